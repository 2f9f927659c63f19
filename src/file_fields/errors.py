"""
Exceptions raised by file field configuration and storage.

Validation outcomes (transport error, oversize file, disallowed extension,
failed move) are not exceptions; ``FileModel.upload_files`` reports them
as ``False``.
"""

from typing import Optional


class FileFieldError(Exception):
    """Base exception for file field failures."""


class UnknownFieldError(FileFieldError, AttributeError):
    """Raised when a rule is configured for a property the entity lacks."""

    def __init__(self, field: str, entity: str, action: str = "Configure file field"):
        self.field = field
        self.entity = entity
        super().__init__(f'{action} error: property "{field}" does not exist on "{entity}"')


class InvalidArgumentError(FileFieldError, TypeError):
    """Raised when an upload batch or descriptor is malformed."""


class InvalidSizeError(FileFieldError):
    """Base for max-size configuration that cannot be resolved to bytes."""


class InvalidSizeTypeError(InvalidSizeError, TypeError):
    """Raised when a size is neither an integer nor a string."""


class InvalidSizeFormatError(InvalidSizeError, ValueError):
    """Raised when a size string uses an unsupported form, e.g. "2GB"."""


class StorageError(FileFieldError, OSError):
    """Raised when a destination directory cannot be provisioned."""

    PERMISSION_DENIED = "permission-denied"

    def __init__(self, path: str, reason: str = PERMISSION_DENIED, detail: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f'Permission denied to directory "{path}"'
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]
