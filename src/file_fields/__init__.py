"""
Per-field file upload validation and storage for data-model entities.

Exposes the entity base class, the upload descriptor schema and the
error taxonomy.
"""

from file_fields.errors import (
    FileFieldError,
    InvalidArgumentError,
    InvalidSizeError,
    InvalidSizeFormatError,
    InvalidSizeTypeError,
    StorageError,
    UnknownFieldError,
)
from file_fields.models import FieldAccessor, FileModel
from file_fields.schemas import UploadDescriptor, UploadRule, UploadStatus
from file_fields.sizes import parse_size

__all__ = [
    "FieldAccessor",
    "FileFieldError",
    "FileModel",
    "InvalidArgumentError",
    "InvalidSizeError",
    "InvalidSizeFormatError",
    "InvalidSizeTypeError",
    "StorageError",
    "UnknownFieldError",
    "UploadDescriptor",
    "UploadRule",
    "UploadStatus",
    "parse_size",
]
