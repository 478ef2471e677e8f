"""Use case for creating announcements."""

from __future__ import annotations

from typing import Iterable, Sequence

from sqlalchemy.orm import Session

from important_info.domain.entities import (
    Announcement,
    AnnouncementSender,
    Principal,
    RecipientSelector,
    validate_content,
)
from important_info.domain.exceptions import StorageError
from important_info.infrastructure.storage import AttachmentStorage

from .attachments import AttachmentUpload, release_attachments, store_attachments
from .fan_out import FanOutOrchestrator, FanOutResult, Scheduler


def create_announcement(
    session: Session,
    *,
    orchestrator: FanOutOrchestrator,
    storage: AttachmentStorage,
    sender: Principal,
    title: str,
    body: str,
    recipients: Iterable[str] | None = None,
    urgent: bool = False,
    uploads: Sequence[AttachmentUpload] = (),
    max_attachments: int = 5,
    credential: str | None = None,
    schedule: Scheduler | None = None,
) -> FanOutResult:
    """Create an announcement from raw client input and start its fan-out."""

    if not sender.is_admin():
        raise PermissionError("Only administrators can send announcements")

    clean_title, clean_body = validate_content(title, body)
    selector = RecipientSelector.from_tokens(recipients)
    attachments = store_attachments(storage, uploads, max_files=max_attachments)

    announcement = Announcement(
        id=None,
        title=clean_title,
        body=clean_body,
        sender=AnnouncementSender(
            id=sender.id, name=sender.name, email=sender.email, role=sender.role
        ),
        urgent=urgent,
        selector=selector,
        attachments=attachments,
    )
    try:
        return orchestrator.publish(
            session, announcement, credential=credential, schedule=schedule
        )
    except StorageError:
        # No record references the stored files.
        release_attachments(storage, attachments)
        raise


__all__ = ["create_announcement"]
