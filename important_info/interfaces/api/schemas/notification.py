"""Pydantic models describing inbox notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from important_info.domain.entities import InboxEntry

from .announcement import AnnouncementRead
from .pagination import PaginationRead


class NotificationRead(BaseModel):
    """Representation of an inbox row delivered to the client."""

    id: int
    recipient_id: str
    announcement_id: str
    title: str
    type: str
    is_read: bool
    created_at: datetime | None = None
    announcement: AnnouncementRead | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entry(cls, entry: InboxEntry) -> "NotificationRead":
        row = entry.notification
        announcement = None
        if entry.announcement is not None:
            announcement = AnnouncementRead.from_entity(
                entry.announcement,
                is_read=entry.announcement.is_read_by(row.recipient_id),
            )
        return cls(
            id=row.id,
            recipient_id=row.recipient_id,
            announcement_id=row.announcement_id,
            title=row.title,
            type=row.type,
            is_read=row.is_read,
            created_at=row.created_at,
            announcement=announcement,
        )


class NotificationPage(BaseModel):
    items: list[NotificationRead]
    pagination: PaginationRead


__all__ = ["NotificationRead", "NotificationPage"]
