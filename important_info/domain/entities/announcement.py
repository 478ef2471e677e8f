"""Domain entities describing an announcement and its per-user ledgers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Final

from important_info.domain.exceptions import AnnouncementValidationError

from .recipient_selector import RecipientSelector

TITLE_MAX_LENGTH: Final[int] = 200
BODY_MAX_LENGTH: Final[int] = 20_000
ATTACHMENT_KIND_PDF: Final[str] = "pdf"
ATTACHMENT_KIND_IMAGE: Final[str] = "image"
ATTACHMENT_KIND_DOCUMENT: Final[str] = "document"

FAN_OUT_PENDING: Final[str] = "pending"
FAN_OUT_COMPLETE: Final[str] = "complete"
FAN_OUT_FAILED: Final[str] = "failed"


@dataclass(frozen=True)
class AnnouncementSender:
    """Snapshot of the administrator who sent the announcement."""

    id: str
    name: str
    email: str | None
    role: str


@dataclass(frozen=True)
class Attachment:
    """Reference to a stored file; the bytes live in attachment storage."""

    filename: str
    original_name: str
    content_ref: str
    kind: str
    size_bytes: int
    storage_path: str | None = None


@dataclass(frozen=True)
class LedgerEntry:
    """A single read or delete event recorded for ``user_id``."""

    user_id: str
    recorded_at: datetime | None


@dataclass
class Announcement:
    """Canonical record of an announcement sent by an administrator."""

    id: str | None
    title: str
    body: str
    sender: AnnouncementSender
    urgent: bool = False
    selector: RecipientSelector = field(default_factory=RecipientSelector)
    attachments: list[Attachment] = field(default_factory=list)
    read_by: list[LedgerEntry] = field(default_factory=list)
    deleted_for: list[LedgerEntry] = field(default_factory=list)
    fan_out_status: str = FAN_OUT_PENDING
    recipient_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_read_by(self, user_id: str) -> bool:
        return any(entry.user_id == str(user_id) for entry in self.read_by)

    def is_deleted_for(self, user_id: str) -> bool:
        return any(entry.user_id == str(user_id) for entry in self.deleted_for)


@dataclass(frozen=True)
class VisibleAnnouncement:
    """An announcement as seen by one user, annotated with its read state."""

    announcement: Announcement
    is_read: bool


def validate_content(title: str | None, body: str | None) -> tuple[str, str]:
    """Return the trimmed title and body or raise when either is unusable."""

    cleaned_title = (title or "").strip()
    if not cleaned_title:
        raise AnnouncementValidationError("The title is required")
    if len(cleaned_title) > TITLE_MAX_LENGTH:
        raise AnnouncementValidationError(
            f"The title cannot exceed {TITLE_MAX_LENGTH} characters"
        )
    if not (body or "").strip():
        raise AnnouncementValidationError("The message body is required")
    if len(body) > BODY_MAX_LENGTH:
        raise AnnouncementValidationError(
            f"The message body cannot exceed {BODY_MAX_LENGTH} characters"
        )
    return cleaned_title, body


def attachment_kind_for(mime_type: str | None) -> str:
    """Classify an upload by MIME type."""

    if not mime_type:
        return ATTACHMENT_KIND_DOCUMENT
    if mime_type == "application/pdf":
        return ATTACHMENT_KIND_PDF
    if mime_type.startswith("image/"):
        return ATTACHMENT_KIND_IMAGE
    return ATTACHMENT_KIND_DOCUMENT


__all__ = [
    "ATTACHMENT_KIND_PDF",
    "ATTACHMENT_KIND_IMAGE",
    "ATTACHMENT_KIND_DOCUMENT",
    "FAN_OUT_PENDING",
    "FAN_OUT_COMPLETE",
    "FAN_OUT_FAILED",
    "AnnouncementSender",
    "Attachment",
    "LedgerEntry",
    "Announcement",
    "VisibleAnnouncement",
    "attachment_kind_for",
    "validate_content",
]
