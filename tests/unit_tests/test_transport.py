import io
import os

from fastapi import UploadFile
from starlette.datastructures import Headers

from file_fields.schemas import UploadStatus
from file_fields.transport import descriptor_from_upload, descriptors_from_form
from tests.consts import TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE, TEST_PDF_NAME
from tests.fixtures.entities import Document


def _upload(filename, content=TEST_PDF_CONTENT, content_type=TEST_PDF_CONTENT_TYPE):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_descriptor_from_upload(tmp_path):
    descriptor = descriptor_from_upload(_upload(TEST_PDF_NAME), tmp_dir=str(tmp_path))

    assert descriptor.ok
    assert descriptor.name == TEST_PDF_NAME
    assert descriptor.size == len(TEST_PDF_CONTENT)
    assert descriptor.type == TEST_PDF_CONTENT_TYPE
    assert os.path.dirname(descriptor.tmp_name) == str(tmp_path)
    with open(descriptor.tmp_name, "rb") as f:
        assert f.read() == TEST_PDF_CONTENT


def test_missing_upload_is_no_file():
    assert descriptor_from_upload(None).error == UploadStatus.NO_FILE
    assert descriptor_from_upload(_upload("")).error == UploadStatus.NO_FILE


def test_missing_tmp_dir(tmp_path):
    descriptor = descriptor_from_upload(_upload(TEST_PDF_NAME), tmp_dir=str(tmp_path / "nope"))
    assert descriptor.error == UploadStatus.NO_TMP_DIR
    assert descriptor.name == TEST_PDF_NAME


def test_form_uploads_feed_upload_files(tmp_path):
    batch = descriptors_from_form(
        {"attachment": _upload(TEST_PDF_NAME), "cover": None},
        tmp_dir=str(tmp_path),
    )
    doc = Document()

    assert doc.upload_files(batch) is True
    assert os.path.isfile(doc.attachment)
    assert doc.cover is None
