"""
Placement of validated uploads on disk.

Files land in ``<data_dir>/<bucket>/<extension>/<name>``. The move from the
transport's temporary path is atomic: a plain rename when both paths share
a filesystem, otherwise a copy next to the destination followed by a rename.
"""

import errno
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Optional, Union

from file_fields.errors import StorageError
from file_fields.schemas import UploadDescriptor

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

PathLike = Union[str, Path]


def sanitize(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` of a base name with ``_``."""
    return _UNSAFE_CHARS.sub("_", os.path.basename(str(name)))


def extension_of(filename: str) -> str:
    """Return what follows the last dot of the base name, or "" if there is no dot."""
    base = os.path.basename(filename)
    if "." not in base:
        return ""
    return base.rsplit(".", 1)[1]


def target_directory(data_dir: PathLike, bucket_name: str, extension: str) -> Path:
    return Path(data_dir) / bucket_name / extension


def ensure_directory(directory: Path, mode: int = 0o777) -> Path:
    """Create the directory and its parents if needed.

    Raises:
        StorageError: If the directory cannot be created
    """
    if directory.is_dir():
        return directory
    try:
        os.makedirs(directory, mode=mode, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create upload directory {directory}: {e}")
        raise StorageError(str(directory), detail=e.strerror or str(e)) from e
    logger.info(f"Created upload directory {directory}")
    return directory


def resolve_name(original_name: str, extension: str, alt_name: Optional[str] = None,
                 now: Optional[float] = None) -> str:
    """Work out the stored file name.

    With an alternate name the result is ``<alt_name>.<extension>``, so
    later uploads under the same name overwrite the earlier file. Without
    one, or when it sanitizes to nothing, it is ``<unix time>_<original name>``.
    """
    base = sanitize(alt_name) if alt_name else ""
    if base:
        return f"{base}.{extension}"

    timestamp = int(time.time() if now is None else now)
    return f"{timestamp}_{sanitize(original_name)}"


def move_into_place(tmp_name: PathLike, save_path: PathLike) -> bool:
    """Move a temporary upload to its final path.

    Returns:
        True on success, False if the file could not be moved
    """
    try:
        os.replace(tmp_name, save_path)
        return True
    except OSError as e:
        if e.errno != errno.EXDEV:
            logger.warning(f"Could not move {tmp_name} to {save_path}: {e}")
            return False

    # Different filesystems: stage a copy beside the target, then rename it in
    staging = None
    try:
        fd, staging = tempfile.mkstemp(dir=os.path.dirname(save_path), prefix=".upload-")
        os.close(fd)
        shutil.copyfile(tmp_name, staging)
        os.replace(staging, save_path)
        staging = None
    except OSError as e:
        logger.warning(f"Could not copy {tmp_name} to {save_path}: {e}")
        return False
    finally:
        if staging and os.path.exists(staging):
            os.remove(staging)

    # The upload is in place; removing the temp file is cleanup only
    try:
        os.remove(tmp_name)
    except OSError as e:
        logger.warning(f"Could not remove temporary upload {tmp_name}: {e}")
    return True


def remove_stored_file(path) -> bool:
    """Delete a previously stored file if ``path`` points at a regular file.

    Returns:
        True if there was nothing to delete or the file was deleted
    """
    if not isinstance(path, (str, Path)) or not os.path.isfile(path):
        return True
    try:
        os.remove(path)
    except OSError as e:
        logger.warning(f"Could not remove superseded file {path}: {e}")
        return False
    logger.info(f"Removed superseded file {path}")
    return True


def place(entity, field: str, descriptor: UploadDescriptor, extension: str,
          data_dir: PathLike, alt_name_field: Optional[str] = None,
          dir_mode: int = 0o777) -> Optional[str]:
    """Store a validated upload and point the entity field at it.

    The previous file of the field is removed only after the new one is in
    place, and never when both resolve to the same path.

    Args:
        entity: A ``FieldAccessor`` owning the field
        field: Name of the file field
        descriptor: The upload being stored
        extension: Validated, lower-cased extension
        data_dir: Base data root
        alt_name_field: Field whose value names the stored file, if any
        dir_mode: Permission bits for created directories

    Returns:
        The stored path, or None if the move failed

    Raises:
        StorageError: If the destination directory cannot be created
    """
    directory = ensure_directory(target_directory(data_dir, entity.bucket_name(), extension), dir_mode)

    alt_name = None
    if alt_name_field is not None:
        value = entity.get_field(alt_name_field)
        alt_name = str(value) if value not in (None, "") else None
        if alt_name is None:
            logger.debug(f"Alternate name field '{alt_name_field}' is empty, using default naming")

    save_path = str(directory / resolve_name(descriptor.name, extension, alt_name))

    if not move_into_place(descriptor.tmp_name, save_path):
        return None

    previous = entity.get_field(field)
    if previous is not None and os.path.abspath(str(previous)) != os.path.abspath(save_path):
        remove_stored_file(previous)

    entity.set_field(field, save_path)
    logger.info(f"Stored upload for field '{field}' at {save_path}")
    return save_path
