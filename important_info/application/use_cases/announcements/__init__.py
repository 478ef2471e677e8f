"""Announcement related use cases."""

from .attachments import AttachmentUpload, release_attachments, store_attachments
from .create_announcement import create_announcement
from .delete_announcement_for_user import delete_announcement_for_user
from .fan_out import (
    NOTIFICATION_TITLE_PREFIX,
    DeferredFanOut,
    FanOutOrchestrator,
    FanOutResult,
    notification_title,
)
from .list_announcements import get_announcement, list_announcements
from .mark_announcement_read import mark_announcement_read
from .purge_announcement import purge_announcement

__all__ = [
    "AttachmentUpload",
    "release_attachments",
    "store_attachments",
    "create_announcement",
    "delete_announcement_for_user",
    "NOTIFICATION_TITLE_PREFIX",
    "DeferredFanOut",
    "FanOutOrchestrator",
    "FanOutResult",
    "notification_title",
    "get_announcement",
    "list_announcements",
    "mark_announcement_read",
    "purge_announcement",
]
