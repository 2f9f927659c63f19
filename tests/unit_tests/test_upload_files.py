import os
import re
from typing import Optional

import pytest
from pydantic import BaseModel

from file_fields.errors import InvalidArgumentError, InvalidSizeFormatError, StorageError
from file_fields.schemas import UploadDescriptor, UploadStatus
from tests.consts import (
    TEST_BUCKET_NAME,
    TEST_PDF_CONTENT,
    TEST_PDF_CONTENT_TYPE,
    TEST_PDF_NAME,
    TEST_PNG_CONTENT,
    TEST_PNG_CONTENT_TYPE,
    TEST_PNG_NAME,
)
from tests.fixtures.entities import Document


def test_upload_file__happy_path(data_dir, make_upload):
    doc = Document(title="Q3")
    upload = make_upload(TEST_PDF_NAME)

    assert doc.upload_files({"attachment": upload}) is True

    stored = doc.attachment
    assert os.path.dirname(stored) == str(data_dir / TEST_BUCKET_NAME / "pdf")
    assert re.fullmatch(r"\d+_Quarterly_Report\.PDF", os.path.basename(stored))
    with open(stored, "rb") as f:
        assert f.read() == TEST_PDF_CONTENT
    assert not os.path.exists(upload.tmp_name)
    assert doc.mime == TEST_PDF_CONTENT_TYPE


def test_upload_files_stores_every_field(data_dir, make_upload):
    doc = Document()
    batch = {
        "attachment": make_upload("notes.docx", content_type="application/msword"),
        "cover": make_upload(TEST_PNG_NAME, TEST_PNG_CONTENT, TEST_PNG_CONTENT_TYPE),
    }

    assert doc.upload_files(batch) is True
    assert doc.attachment.startswith(str(data_dir / TEST_BUCKET_NAME / "docx"))
    assert re.fullmatch(r"\d+_cover_image__1_\.png", os.path.basename(doc.cover))
    assert os.path.isfile(doc.cover)
    # last validated upload wins
    assert doc.mime == TEST_PNG_CONTENT_TYPE


def test_transport_error_rejects_batch_and_leaves_field(make_upload):
    doc = Document()
    upload = make_upload(TEST_PDF_NAME, error=UploadStatus.INI_SIZE)

    assert doc.upload_files({"attachment": upload}) is False
    assert doc.attachment is None
    assert os.path.exists(upload.tmp_name)


def test_oversize_upload_is_rejected(make_upload):
    doc = Document().set_max_size(len(TEST_PDF_CONTENT) - 1)
    assert doc.upload_files({"attachment": make_upload(TEST_PDF_NAME)}) is False
    assert doc.attachment is None


def test_upload_at_exact_max_size_is_accepted(make_upload):
    doc = Document().set_max_size(len(TEST_PDF_CONTENT))
    assert doc.upload_files({"attachment": make_upload(TEST_PDF_NAME)}) is True


def test_disallowed_extension_is_rejected(make_upload):
    doc = Document()
    assert doc.upload_files({"attachment": make_upload("setup.EXE", b"MZ", "application/x-msdownload")}) is False
    assert doc.attachment is None
    assert doc.mime == "application/x-msdownload"


def test_empty_names_and_undeclared_fields_are_skipped(data_dir, make_upload):
    doc = Document()
    batch = {
        "attachment": {"name": "", "tmpName": "", "size": 0, "type": "", "error": UploadStatus.NO_FILE},
        "avatar": make_upload(TEST_PDF_NAME),
    }

    assert doc.upload_files(batch) is True
    assert doc.attachment is None
    assert not data_dir.exists()


def test_no_rollback_when_a_later_field_fails(data_dir, make_upload):
    doc = Document()
    cover = make_upload(TEST_PNG_NAME, TEST_PNG_CONTENT, TEST_PNG_CONTENT_TYPE)
    attachment = make_upload(TEST_PDF_NAME)
    os.remove(attachment.tmp_name)

    assert doc.upload_files({"cover": cover, "attachment": attachment}) is False
    assert doc.cover is not None
    assert os.path.isfile(doc.cover)
    assert doc.attachment is None


def test_first_failure_stops_the_batch(make_upload):
    doc = Document()
    batch = {
        "attachment": make_upload("setup.exe"),
        "cover": make_upload(TEST_PNG_NAME, TEST_PNG_CONTENT, TEST_PNG_CONTENT_TYPE),
    }

    assert doc.upload_files(batch) is False
    assert doc.cover is None


def test_new_upload_replaces_previous_file(make_upload):
    doc = Document()
    assert doc.upload_files({"attachment": make_upload("first.pdf", b"first")}) is True
    first = doc.attachment

    assert doc.upload_files({"attachment": make_upload("second.pdf", b"second")}) is True
    assert doc.attachment != first
    assert not os.path.exists(first)
    with open(doc.attachment, "rb") as f:
        assert f.read() == b"second"


def test_previous_file_is_kept_when_new_upload_fails(make_upload):
    doc = Document()
    assert doc.upload_files({"attachment": make_upload("first.pdf", b"first")}) is True
    first = doc.attachment

    assert doc.upload_files({"attachment": make_upload("second.exe", b"second")}) is False
    assert doc.attachment == first
    assert os.path.isfile(first)


def test_alt_name_field_names_the_file_and_overwrites(data_dir, make_upload):
    doc = Document(title="Q3 report: final").set_alt_name_field("title")

    assert doc.upload_files({"attachment": make_upload("a.PDF", b"one")}) is True
    expected = str(data_dir / TEST_BUCKET_NAME / "pdf" / "Q3_report__final.pdf")
    assert doc.attachment == expected

    assert doc.upload_files({"attachment": make_upload("b.pdf", b"two")}) is True
    assert doc.attachment == expected
    with open(expected, "rb") as f:
        assert f.read() == b"two"


def test_empty_alt_name_falls_back_to_timestamp(make_upload):
    doc = Document(title="").set_alt_name_field("title")
    assert doc.upload_files({"attachment": make_upload(TEST_PDF_NAME)}) is True
    assert re.fullmatch(r"\d+_Quarterly_Report\.PDF", os.path.basename(doc.attachment))


def test_alt_name_without_a_base_name_falls_back_to_timestamp(make_upload):
    doc = Document(title="reports/").set_alt_name_field("title")
    assert doc.upload_files({"attachment": make_upload("a.pdf")}) is True
    assert os.path.basename(doc.attachment) != ".pdf"
    assert re.fullmatch(r"\d+_a\.pdf", os.path.basename(doc.attachment))


def test_unwritable_data_root_raises_storage_error(data_dir, make_upload):
    data_dir.mkdir()
    (data_dir / TEST_BUCKET_NAME).write_text("not a directory")
    doc = Document()

    with pytest.raises(StorageError) as exc_info:
        doc.upload_files({"attachment": make_upload(TEST_PDF_NAME)})
    assert exc_info.value.reason == StorageError.PERMISSION_DENIED
    assert doc.attachment is None


def test_invalid_max_size_surfaces_on_upload(make_upload):
    doc = Document().set_max_size("2GB")
    with pytest.raises(InvalidSizeFormatError):
        doc.upload_files({"attachment": make_upload(TEST_PDF_NAME)})


@pytest.mark.parametrize("batch", [["attachment"], "attachment", None, 42])
def test_batch_must_be_a_mapping(batch):
    with pytest.raises(InvalidArgumentError):
        Document().upload_files(batch)


def test_descriptor_must_be_a_mapping():
    with pytest.raises(InvalidArgumentError):
        Document().upload_files({"attachment": "report.pdf"})


def test_malformed_descriptor_is_an_argument_error():
    with pytest.raises(InvalidArgumentError):
        Document().upload_files({"attachment": {"name": "a.pdf", "size": -5}})


def test_plain_mapping_descriptors_with_transport_keys(make_upload):
    upload = make_upload(TEST_PDF_NAME)
    raw = {
        "name": upload.name,
        "tmpName": upload.tmp_name,
        "size": upload.size,
        "type": upload.type,
        "error": 0,
    }
    doc = Document()
    assert doc.upload_files({"attachment": raw}) is True
    assert os.path.isfile(doc.attachment)


def test_batch_may_be_a_pydantic_model(make_upload):
    class DocumentForm(BaseModel):
        attachment: UploadDescriptor
        cover: Optional[UploadDescriptor] = UploadDescriptor()

    form = DocumentForm(attachment=make_upload(TEST_PDF_NAME))
    doc = Document()
    assert doc.upload_files(form) is True
    assert os.path.isfile(doc.attachment)
    assert doc.cover is None
