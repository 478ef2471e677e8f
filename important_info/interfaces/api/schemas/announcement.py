"""Schemas exposed by the announcement endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from important_info.domain.entities import Announcement

from .pagination import PaginationRead


class AttachmentRead(BaseModel):
    filename: str
    original_name: str
    content_ref: str
    kind: str
    size_bytes: int

    model_config = ConfigDict(from_attributes=True)


class AnnouncementSenderRead(BaseModel):
    id: str
    name: str
    email: str | None = None
    role: str

    model_config = ConfigDict(from_attributes=True)


class AnnouncementRead(BaseModel):
    """Announcement as shown to a recipient."""

    id: str
    title: str
    body: str
    sender: AnnouncementSenderRead
    urgent: bool
    recipients: list[str]
    attachments: list[AttachmentRead]
    created_at: datetime | None
    updated_at: datetime | None
    is_read: bool | None = None

    @classmethod
    def from_entity(cls, announcement: Announcement, *, is_read: bool | None = None):
        return cls(
            id=announcement.id,
            title=announcement.title,
            body=announcement.body,
            sender=AnnouncementSenderRead.model_validate(announcement.sender),
            urgent=announcement.urgent,
            recipients=announcement.selector.tokens(),
            attachments=[
                AttachmentRead.model_validate(attachment)
                for attachment in announcement.attachments
            ],
            created_at=announcement.created_at,
            updated_at=announcement.updated_at,
            is_read=is_read,
        )


class AnnouncementAdminRead(AnnouncementRead):
    """Administrator view including the fan-out outcome and ledger sizes."""

    fan_out_status: str
    recipient_count: int | None = None
    read_count: int = 0
    deleted_count: int = 0

    @classmethod
    def from_entity(cls, announcement: Announcement, *, is_read: bool | None = None):
        base = AnnouncementRead.from_entity(announcement, is_read=is_read)
        return cls(
            **base.model_dump(),
            fan_out_status=announcement.fan_out_status,
            recipient_count=announcement.recipient_count,
            read_count=len(announcement.read_by),
            deleted_count=len(announcement.deleted_for),
        )


class AnnouncementCreateResponse(BaseModel):
    message: str
    announcement: AnnouncementAdminRead
    fan_out_status: str
    notified_count: int


class AnnouncementPage(BaseModel):
    items: list[AnnouncementRead]
    pagination: PaginationRead


class AnnouncementAdminPage(BaseModel):
    items: list[AnnouncementAdminRead]
    pagination: PaginationRead


__all__ = [
    "AttachmentRead",
    "AnnouncementSenderRead",
    "AnnouncementRead",
    "AnnouncementAdminRead",
    "AnnouncementCreateResponse",
    "AnnouncementPage",
    "AnnouncementAdminPage",
]
