"""Public helpers for the notification inbox and live events."""

from .events import (
    EVENT_ALL_READ,
    EVENT_ANNOUNCEMENT_FAN_OUT,
    EVENT_ANNOUNCEMENT_SENT,
    EVENT_NEW_ANNOUNCEMENT,
    EVENT_NOTIFICATION_UPDATED,
    EVENT_NOTIFICATIONS_CLEARED,
    RECIPIENT_COUNT_PENDING,
    broadcast_new_announcement,
    new_announcement_payload,
    notify_all_read,
    notify_announcement_sent,
    notify_count_decreased,
    notify_fan_out_finished,
    notify_notifications_cleared,
    notify_recipients,
)
from .inbox import (
    clear_all_notifications,
    count_unread_notifications,
    list_notifications,
    mark_all_notifications_read,
)

__all__ = [
    "EVENT_ALL_READ",
    "EVENT_ANNOUNCEMENT_FAN_OUT",
    "EVENT_ANNOUNCEMENT_SENT",
    "EVENT_NEW_ANNOUNCEMENT",
    "EVENT_NOTIFICATION_UPDATED",
    "EVENT_NOTIFICATIONS_CLEARED",
    "RECIPIENT_COUNT_PENDING",
    "broadcast_new_announcement",
    "new_announcement_payload",
    "notify_all_read",
    "notify_announcement_sent",
    "notify_count_decreased",
    "notify_fan_out_finished",
    "notify_notifications_cleared",
    "notify_recipients",
    "clear_all_notifications",
    "count_unread_notifications",
    "list_notifications",
    "mark_all_notifications_read",
]
