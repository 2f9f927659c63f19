"""
Entity base class for models that store uploaded files in their fields.

A subclass declares its file fields as ordinary pydantic fields and
configures their rules in ``configure_uploads``::

    class Document(FileModel):
        __tablename__ = "user_documents"

        title: str = ""
        attachment: Optional[str] = None

        def configure_uploads(self):
            self.set_extensions("attachment", ["pdf", "docx"]).set_max_size("5M")

    doc = Document(title="Q3 report")
    if doc.upload_files({"attachment": descriptor}):
        save(doc.attachment)
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr, ValidationError

from file_fields.errors import InvalidArgumentError, UnknownFieldError
from file_fields.placement import extension_of, place, remove_stored_file
from file_fields.rules import UploadRules
from file_fields.schemas import UploadDescriptor
from file_fields.settings import get_settings
from file_fields.sizes import parse_size
from file_fields.utils.decorators import log_upload_time

logger = logging.getLogger(__name__)

MIME_MAX_LENGTH = 50


def to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def to_camel(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join(part.capitalize() for part in rest)


class FieldAccessor(ABC):
    """What the upload pipeline needs from an entity."""

    @abstractmethod
    def has_field(self, field: str) -> bool:
        """Whether the entity declares a property with this name."""

    @abstractmethod
    def get_field(self, field: str) -> Any:
        pass

    @abstractmethod
    def set_field(self, field: str, value: Any) -> None:
        pass

    @classmethod
    @abstractmethod
    def table_name(cls) -> str:
        pass

    @classmethod
    def bucket_name(cls) -> str:
        """Storage subdirectory for uploads of this entity kind."""
        return to_camel(cls.table_name())


class FileModel(BaseModel, FieldAccessor):
    """Pydantic entity whose declared fields can hold uploaded file paths.

    ``mime`` records the declared media type of the last upload that got
    past the transport and size checks. It is overwritten on every such
    attempt, including ones later rejected for their extension, and cut
    to ``MIME_MAX_LENGTH`` characters.
    """

    mime: Optional[str] = Field(None, max_length=MIME_MAX_LENGTH)

    _rules: UploadRules = PrivateAttr(default_factory=UploadRules)
    _max_size: Optional[Union[int, str]] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        self.configure_uploads()

    def configure_uploads(self) -> None:
        """Hook for subclasses to declare extension and size rules."""

    # FieldAccessor

    def has_field(self, field: str) -> bool:
        return isinstance(field, str) and field in type(self).model_fields

    def get_field(self, field: str) -> Any:
        self._require_field(field, "Get file field")
        return getattr(self, field)

    def set_field(self, field: str, value: Any) -> None:
        self._require_field(field, "Set file field")
        setattr(self, field, value)

    @classmethod
    def table_name(cls) -> str:
        return getattr(cls, "__tablename__", None) or to_snake(cls.__name__)

    def _require_field(self, field: str, action: str) -> None:
        if not self.has_field(field):
            raise UnknownFieldError(field, type(self).__name__, action)

    # Rule registry

    def add_extension(self, field: str, ext: str) -> "FileModel":
        """Add an allowed extension for a file field."""
        self._require_field(field, "Add file extension")
        self._rules.add_extension(field, ext)
        return self

    def set_extensions(self, field: str, extensions: Iterable[str]) -> "FileModel":
        """Replace the allowed extensions of a file field."""
        self._require_field(field, "Set file extensions")
        self._rules.set_extensions(field, extensions)
        return self

    def add_bad_extension(self, field: str, ext: str) -> "FileModel":
        self._require_field(field, "Add bad file extension")
        self._rules.add_bad_extension(field, ext)
        return self

    def set_bad_extensions(self, field: str, extensions: Iterable[str]) -> "FileModel":
        self._require_field(field, "Set bad file extensions")
        self._rules.set_bad_extensions(field, extensions)
        return self

    def set_alt_name_field(self, field: Optional[str]) -> "FileModel":
        """Name stored files after the value of ``field`` instead of the uploaded name.

        Applies to every file field uploaded afterwards. Pass None to go
        back to timestamped original names.
        """
        if field is not None:
            self._require_field(field, "Set alternate name field")
        self._rules.alt_name_field = field
        return self

    @property
    def alt_name_field(self) -> Optional[str]:
        return self._rules.alt_name_field

    # Size policy

    def set_max_size(self, size: Union[int, str]) -> "FileModel":
        """Set the maximum upload size; it is only parsed when first needed."""
        self._max_size = size
        return self

    def get_max_size(self) -> int:
        """Byte value of the max upload size, falling back to ``upload_max_filesize``."""
        if self._max_size is None:
            self._max_size = get_settings().upload_max_filesize
        return self.parse_size(self._max_size)

    @staticmethod
    def parse_size(size: Union[int, str]) -> int:
        return parse_size(size)

    # Validation

    def size_is_ok(self, size: int) -> bool:
        return size <= self.get_max_size()

    def extension_is_ok(self, field: str, extension: str) -> Optional[str]:
        """Return the lower-cased extension if ``field`` accepts it, else None."""
        return self._rules.extension_is_ok(field, extension)

    def file_is_ok(self, field: str, info) -> Optional[str]:
        """Check one upload against the transport status, size and extension rules.

        Args:
            field: Name of the file field
            info: An ``UploadDescriptor`` or a mapping accepted by it

        Returns:
            The validated extension, or None if the upload is rejected
        """
        descriptor = self._coerce_descriptor(field, info)
        if not descriptor.ok:
            logger.warning(f"Upload for field '{field}' failed in transport: {descriptor.error.name}")
            return None

        if not self.size_is_ok(descriptor.size):
            logger.warning(
                f"Upload for field '{field}' is too large: {descriptor.size} > {self.get_max_size()} bytes"
            )
            return None

        self.set_mime(descriptor.type)

        extension = self.extension_is_ok(field, extension_of(descriptor.name))
        if extension is None:
            logger.warning(f"Upload '{descriptor.name}' for field '{field}' has a disallowed extension")
        return extension

    # Commit

    @log_upload_time
    def upload_files(self, files) -> bool:
        """Validate and store every upload in a batch.

        Entries with an empty name or naming an undeclared field are
        skipped. The first rejected entry stops the batch; files already
        stored for earlier fields stay in place.

        Args:
            files: Mapping of field name to descriptor, or a pydantic model
                whose fields are the descriptors

        Returns:
            True if every eligible upload was stored, False otherwise

        Raises:
            InvalidArgumentError: If the batch or a descriptor is malformed
            StorageError: If a destination directory cannot be created
        """
        settings = get_settings()

        for field, info in self._coerce_batch(files).items():
            if not isinstance(info, (Mapping, UploadDescriptor)):
                raise InvalidArgumentError(
                    f"Upload for field '{field}' must be a mapping or UploadDescriptor, got {type(info).__name__}"
                )
            name = info.get("name") if isinstance(info, Mapping) else info.name
            if not name:
                continue

            if not self.has_field(field):
                logger.debug(f"Skipping upload for undeclared field '{field}'")
                continue

            descriptor = self._coerce_descriptor(field, info)
            extension = self.file_is_ok(field, descriptor)
            if not extension:
                return False

            stored = place(
                self,
                field,
                descriptor,
                extension,
                data_dir=settings.data_dir,
                alt_name_field=self.alt_name_field,
                dir_mode=settings.dir_mode,
            )
            if stored is None:
                return False

        return True

    def unlink(self, field: str) -> bool:
        """Delete the file stored in ``field``, if any."""
        if not self.has_field(field):
            return True
        return remove_stored_file(getattr(self, field))

    def get_mime(self) -> Optional[str]:
        return self.mime

    def set_mime(self, mime: Optional[str]) -> "FileModel":
        """Record a media type, cut to the ``mime`` column width."""
        self.mime = mime[:MIME_MAX_LENGTH] if mime is not None else None
        return self

    @staticmethod
    def _coerce_batch(files) -> dict:
        if isinstance(files, BaseModel):
            return files.model_dump()
        if isinstance(files, Mapping):
            return dict(files)
        raise InvalidArgumentError(
            f"Upload batch must be a mapping or a pydantic model, got {type(files).__name__}"
        )

    @staticmethod
    def _coerce_descriptor(field: str, info) -> UploadDescriptor:
        if isinstance(info, UploadDescriptor):
            return info
        if not isinstance(info, Mapping):
            raise InvalidArgumentError(
                f"Upload for field '{field}' must be a mapping or UploadDescriptor, got {type(info).__name__}"
            )
        try:
            return UploadDescriptor.model_validate(info)
        except ValidationError as e:
            raise InvalidArgumentError(f"Malformed upload for field '{field}': {e}") from e
