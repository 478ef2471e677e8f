"""ORM models used by the application infrastructure."""

from .announcement import (
    AnnouncementAttachmentModel,
    AnnouncementDeletionModel,
    AnnouncementModel,
    AnnouncementReadModel,
    AnnouncementRecipientModel,
)
from .notification import NotificationModel

__all__ = [
    "AnnouncementAttachmentModel",
    "AnnouncementDeletionModel",
    "AnnouncementModel",
    "AnnouncementReadModel",
    "AnnouncementRecipientModel",
    "NotificationModel",
]
