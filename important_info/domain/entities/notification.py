"""Domain entity representing a per-recipient inbox notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

from .announcement import Announcement

NOTIFICATION_TYPE_IMPORTANT_INFO: Final[str] = "important-info"
NOTIFICATION_TYPE_ADMIN_MESSAGE: Final[str] = "admin-message"
NOTIFICATION_TYPES: Final[frozenset[str]] = frozenset(
    {NOTIFICATION_TYPE_IMPORTANT_INFO, NOTIFICATION_TYPE_ADMIN_MESSAGE}
)


@dataclass
class Notification:
    """Projection row telling that an announcement was fanned out to a user.

    The row only feeds the inbox list and unread badge; visibility of the
    announcement itself is decided from the announcement record.
    """

    id: int | None
    recipient_id: str
    announcement_id: str
    title: str
    type: str = NOTIFICATION_TYPE_IMPORTANT_INFO
    is_read: bool = False
    created_at: datetime | None = None


@dataclass
class InboxEntry:
    """Inbox row together with the announcement it points at.

    ``announcement`` is ``None`` when the record was purged after the row was read.
    """

    notification: Notification
    announcement: Announcement | None = None


@dataclass(frozen=True)
class BulkInsertResult:
    """Outcome of inserting a batch of projection rows."""

    inserted: int = 0
    skipped: int = 0
    failed: int = 0


__all__ = [
    "NOTIFICATION_TYPE_IMPORTANT_INFO",
    "NOTIFICATION_TYPE_ADMIN_MESSAGE",
    "NOTIFICATION_TYPES",
    "Notification",
    "InboxEntry",
    "BulkInsertResult",
]
