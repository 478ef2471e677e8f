"""Repository implementations for infrastructure layer."""

from .announcement_repository import AnnouncementRepository
from .notification_repository import NotificationRepository

__all__ = [
    "AnnouncementRepository",
    "NotificationRepository",
]
