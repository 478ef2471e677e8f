"""Tests for attachment storage and the attachment use cases."""

from __future__ import annotations

import pytest

from important_info.application.use_cases.announcements import (
    AttachmentUpload,
    release_attachments,
    store_attachments,
)
from important_info.domain.exceptions import (
    AnnouncementValidationError,
    AttachmentRejectedError,
)


def test_store_locally_when_blob_storage_is_not_configured(storage):
    attachment = storage.store(data=b"%PDF-1.4", original_name="Rules.PDF", mime_type="application/pdf")

    assert attachment.kind == "pdf"
    assert attachment.size_bytes == 8
    assert attachment.original_name == "Rules.PDF"
    assert attachment.filename.endswith(".pdf")
    assert attachment.storage_path == f"file:pdf/{attachment.filename}"
    assert attachment.content_ref == f"http://files.test/uploads/pdf/{attachment.filename}"
    assert (storage.upload_dir / "pdf" / attachment.filename).read_bytes() == b"%PDF-1.4"


def test_images_and_documents_use_their_own_folders(storage):
    image = storage.store(data=b"png", original_name="map.png", mime_type="image/png")
    document = storage.store(
        data=b"doc",
        original_name="form.docx",
        mime_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )

    assert image.kind == "image" and image.storage_path.startswith("file:images/")
    assert document.kind == "document" and document.storage_path.startswith("file:documents/")


def test_release_deletes_the_local_file(storage):
    attachment = storage.store(data=b"gif", original_name="a.gif", mime_type="image/gif")
    path = storage.upload_dir / "images" / attachment.filename

    assert storage.release(attachment) is True
    assert not path.exists()


def test_rejects_unsupported_types_and_oversized_files(storage):
    with pytest.raises(AttachmentRejectedError) as unsupported:
        storage.store(data=b"x", original_name="run.exe", mime_type="application/x-msdownload")
    assert unsupported.value.too_large is False

    with pytest.raises(AttachmentRejectedError) as too_large:
        storage.store(data=b"x" * 2048, original_name="big.pdf", mime_type="application/pdf")
    assert too_large.value.too_large is True


def test_store_attachments_validates_everything_before_storing(storage):
    uploads = [
        AttachmentUpload(filename="ok.pdf", content_type="application/pdf", data=b"pdf"),
        AttachmentUpload(filename="bad.txt", content_type="text/plain", data=b"txt"),
    ]

    with pytest.raises(AttachmentRejectedError):
        store_attachments(storage, uploads, max_files=5)

    assert not (storage.upload_dir / "pdf").exists()


def test_store_attachments_limits_the_number_of_files(storage):
    uploads = [
        AttachmentUpload(filename=f"{index}.png", content_type="image/png", data=b"png")
        for index in range(3)
    ]

    with pytest.raises(AnnouncementValidationError) as too_many:
        store_attachments(storage, uploads, max_files=2)
    assert not isinstance(too_many.value, AttachmentRejectedError)
    assert not (storage.upload_dir / "images").exists()

    stored = store_attachments(storage, uploads, max_files=3)
    assert [attachment.original_name for attachment in stored] == ["0.png", "1.png", "2.png"]
    assert release_attachments(storage, stored) == 3
