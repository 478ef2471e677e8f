"""Store and release the files attached to an announcement."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from important_info.domain.entities import Attachment
from important_info.domain.exceptions import AnnouncementValidationError
from important_info.infrastructure.storage import AttachmentStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachmentUpload:
    """Raw file received from a client before it is stored."""

    filename: str
    content_type: str | None
    data: bytes


def store_attachments(
    storage: AttachmentStorage,
    uploads: Sequence[AttachmentUpload],
    *,
    max_files: int,
) -> list[Attachment]:
    """Validate every upload first, then store them in order.

    When one file fails to store, the files stored before it are released so
    nothing is left orphaned.
    """

    if len(uploads) > max_files:
        raise AnnouncementValidationError(f"At most {max_files} attachments are allowed")
    for upload in uploads:
        storage.validate(mime_type=upload.content_type, size_bytes=len(upload.data))

    stored: list[Attachment] = []
    try:
        for upload in uploads:
            stored.append(
                storage.store(
                    data=upload.data,
                    original_name=upload.filename,
                    mime_type=upload.content_type,
                )
            )
    except Exception:
        release_attachments(storage, stored)
        raise
    return stored


def release_attachments(storage: AttachmentStorage, attachments: Iterable[Attachment]) -> int:
    released = 0
    for attachment in attachments:
        if storage.release(attachment):
            released += 1
        else:
            logger.warning("Attachment %s was not released", attachment.filename)
    return released


__all__ = ["AttachmentUpload", "store_attachments", "release_attachments"]
