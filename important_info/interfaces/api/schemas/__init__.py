from .announcement import (
    AnnouncementAdminPage,
    AnnouncementAdminRead,
    AnnouncementCreateResponse,
    AnnouncementPage,
    AnnouncementRead,
    AnnouncementSenderRead,
    AttachmentRead,
)
from .notification import NotificationPage, NotificationRead
from .pagination import MessageResponse, PaginationRead, UnreadCountRead
from .upload import UploadedFileRead, UploadResponse

__all__ = [
    "AnnouncementAdminPage",
    "AnnouncementAdminRead",
    "AnnouncementCreateResponse",
    "AnnouncementPage",
    "AnnouncementRead",
    "AnnouncementSenderRead",
    "AttachmentRead",
    "NotificationPage",
    "NotificationRead",
    "MessageResponse",
    "PaginationRead",
    "UnreadCountRead",
    "UploadedFileRead",
    "UploadResponse",
]
