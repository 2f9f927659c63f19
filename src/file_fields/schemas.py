######################################
# --- Upload descriptors and rules --- #
######################################

from enum import IntEnum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UploadStatus(IntEnum):
    """Transport status codes reported for each uploaded file."""
    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


class UploadDescriptor(BaseModel):
    """Raw metadata the transport hands over for one uploaded file."""
    name: str = Field(
        "",
        description="Original file name as sent by the client.",
        json_schema_extra={"example": "Quarterly Report.PDF"},
    )
    tmp_name: str = Field(
        "",
        alias="tmpName",
        description="Temporary path the transport stored the content at.",
    )
    size: int = Field(0, ge=0, description="Declared size in bytes.")
    type: str = Field("", description="Declared media type.")
    error: UploadStatus = Field(
        UploadStatus.OK,
        description="Transport status; only OK is processed.",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "Quarterly Report.PDF",
                "tmpName": "/tmp/upload_a1b2c3",
                "size": 52344,
                "type": "application/pdf",
                "error": 0,
            }
        },
    )

    @property
    def ok(self) -> bool:
        return self.error == UploadStatus.OK


def normalize_extension(ext: str) -> str:
    """Lower-case an extension and drop a leading dot."""
    return str(ext).strip().lower().lstrip(".")


def _unique(values) -> Tuple[str, ...]:
    seen = []
    for value in values:
        value = normalize_extension(value)
        if value not in seen:
            seen.append(value)
    return tuple(seen)


class UploadRule(BaseModel):
    """Allow-list and deny-list of extensions for one file field.

    ``None`` means the list was never configured, which is not the same
    as an empty allow-list (an empty allow-list rejects everything).
    """
    allowed_extensions: Optional[Tuple[str, ...]] = None
    denied_extensions: Optional[Tuple[str, ...]] = None

    @field_validator("allowed_extensions", "denied_extensions", mode="before")
    @classmethod
    def lower_case_extensions(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            v = [v]
        return _unique(v)
