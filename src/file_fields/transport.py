"""
Adapter from FastAPI uploads to upload descriptors.

Only turns ``UploadFile`` objects into the descriptors ``FileModel.upload_files``
consumes; routing and request parsing stay with the application.
"""

import logging
import os
import shutil
import tempfile
from typing import Dict, Mapping, Optional

from fastapi import UploadFile

from file_fields.schemas import UploadDescriptor, UploadStatus

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def descriptor_from_upload(upload: Optional[UploadFile], tmp_dir: Optional[str] = None) -> UploadDescriptor:
    """Spool an upload to a temporary file and describe it.

    Args:
        upload: The uploaded file, or None when the form field was empty
        tmp_dir: Directory for the temporary file (system default if None)

    Returns:
        An UploadDescriptor; its ``error`` is NO_FILE when nothing was sent,
        NO_TMP_DIR when ``tmp_dir`` is missing and CANT_WRITE when spooling fails
    """
    if upload is None or not upload.filename:
        return UploadDescriptor(error=UploadStatus.NO_FILE)

    media_type = upload.content_type or DEFAULT_MEDIA_TYPE

    try:
        fd, tmp_name = tempfile.mkstemp(dir=tmp_dir, prefix="upload_")
    except FileNotFoundError:
        logger.error(f"Temporary upload directory {tmp_dir} does not exist")
        return UploadDescriptor(name=upload.filename, type=media_type, error=UploadStatus.NO_TMP_DIR)
    except OSError as e:
        logger.error(f"Could not create temporary file for {upload.filename}: {e}")
        return UploadDescriptor(name=upload.filename, type=media_type, error=UploadStatus.CANT_WRITE)

    try:
        with os.fdopen(fd, "wb") as out:
            upload.file.seek(0)
            shutil.copyfileobj(upload.file, out)
            size = out.tell()
    except OSError as e:
        logger.error(f"Could not spool {upload.filename} to {tmp_name}: {e}")
        os.remove(tmp_name)
        return UploadDescriptor(name=upload.filename, type=media_type, error=UploadStatus.CANT_WRITE)

    logger.debug(f"Spooled {upload.filename} ({size} bytes) to {tmp_name}")
    return UploadDescriptor(
        name=upload.filename,
        tmp_name=tmp_name,
        size=size,
        type=media_type,
    )


def descriptors_from_form(files: Mapping[str, Optional[UploadFile]],
                          tmp_dir: Optional[str] = None) -> Dict[str, UploadDescriptor]:
    """Build an upload batch from form field names to uploaded files."""
    return {field: descriptor_from_upload(upload, tmp_dir) for field, upload in files.items()}
