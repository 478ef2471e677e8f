"""Domain entities exposed by the application."""

from .announcement import (
    ATTACHMENT_KIND_DOCUMENT,
    ATTACHMENT_KIND_IMAGE,
    ATTACHMENT_KIND_PDF,
    FAN_OUT_COMPLETE,
    FAN_OUT_FAILED,
    FAN_OUT_PENDING,
    Announcement,
    AnnouncementSender,
    Attachment,
    LedgerEntry,
    VisibleAnnouncement,
    attachment_kind_for,
    validate_content,
)
from .notification import (
    NOTIFICATION_TYPE_ADMIN_MESSAGE,
    NOTIFICATION_TYPE_IMPORTANT_INFO,
    NOTIFICATION_TYPES,
    BulkInsertResult,
    InboxEntry,
    Notification,
)
from .principal import ROLE_ADMIN, ROLE_STUDENT, DirectoryUser, Principal
from .recipient_selector import (
    ALL_TOKEN,
    ROLE_TOKENS,
    AllRecipients,
    RecipientSelector,
    RecipientTarget,
    RoleRecipients,
    UserRecipient,
    parse_token,
)

__all__ = [
    "ATTACHMENT_KIND_DOCUMENT",
    "ATTACHMENT_KIND_IMAGE",
    "ATTACHMENT_KIND_PDF",
    "FAN_OUT_COMPLETE",
    "FAN_OUT_FAILED",
    "FAN_OUT_PENDING",
    "Announcement",
    "AnnouncementSender",
    "Attachment",
    "LedgerEntry",
    "VisibleAnnouncement",
    "attachment_kind_for",
    "validate_content",
    "NOTIFICATION_TYPE_ADMIN_MESSAGE",
    "NOTIFICATION_TYPE_IMPORTANT_INFO",
    "NOTIFICATION_TYPES",
    "BulkInsertResult",
    "InboxEntry",
    "Notification",
    "ROLE_ADMIN",
    "ROLE_STUDENT",
    "DirectoryUser",
    "Principal",
    "ALL_TOKEN",
    "ROLE_TOKENS",
    "AllRecipients",
    "RecipientSelector",
    "RecipientTarget",
    "RoleRecipients",
    "UserRecipient",
    "parse_token",
]
