"""Utility helpers to build and dispatch live-push events."""

from __future__ import annotations

from typing import Iterable, Union

from important_info.domain.entities import Announcement
from important_info.infrastructure.notifications import LivePushPublisher

EVENT_NEW_ANNOUNCEMENT = "new-announcement"
EVENT_ANNOUNCEMENT_SENT = "announcement-sent"
EVENT_ANNOUNCEMENT_FAN_OUT = "announcement-fan-out"
EVENT_NOTIFICATION_UPDATED = "notification-updated"
EVENT_ALL_READ = "all-read"
EVENT_NOTIFICATIONS_CLEARED = "notifications-cleared"

RECIPIENT_COUNT_PENDING = "pending"


def new_announcement_payload(announcement: Announcement) -> dict:
    return {
        "announcement_id": announcement.id,
        "title": announcement.title,
        "urgent": bool(announcement.urgent),
    }


def notify_recipients(
    publisher: LivePushPublisher, announcement: Announcement, user_ids: Iterable[str]
) -> int:
    """Tell each recipient on their own channel that a new announcement arrived."""

    return publisher.to_users(
        sorted(user_ids), EVENT_NEW_ANNOUNCEMENT, new_announcement_payload(announcement)
    )


def broadcast_new_announcement(publisher: LivePushPublisher, announcement: Announcement) -> None:
    """Warn connected users about an announcement whose recipients are not resolved yet.

    Only users whose declared role is targeted receive it; ``all`` reaches
    everyone connected.
    """

    selector = announcement.selector
    roles = None if selector.includes_all else selector.roles
    publisher.broadcast(
        EVENT_NEW_ANNOUNCEMENT, new_announcement_payload(announcement), roles=roles
    )


def notify_announcement_sent(
    publisher: LivePushPublisher,
    announcement: Announcement,
    recipient_count: Union[int, str],
) -> None:
    publisher.to_admins(
        EVENT_ANNOUNCEMENT_SENT,
        {
            "announcement_id": announcement.id,
            "title": announcement.title,
            "recipient_count": recipient_count,
        },
    )


def notify_fan_out_finished(
    publisher: LivePushPublisher,
    *,
    announcement_id: str,
    status: str,
    recipient_count: int | None,
) -> None:
    publisher.to_admins(
        EVENT_ANNOUNCEMENT_FAN_OUT,
        {
            "announcement_id": announcement_id,
            "status": status,
            "recipient_count": recipient_count,
        },
    )


def notify_count_decreased(publisher: LivePushPublisher, user_id: str) -> None:
    publisher.to_user(
        user_id,
        EVENT_NOTIFICATION_UPDATED,
        {"type": "read", "count_decreased": True},
    )


def notify_all_read(publisher: LivePushPublisher, user_id: str) -> None:
    publisher.to_user(user_id, EVENT_ALL_READ, {})


def notify_notifications_cleared(publisher: LivePushPublisher, user_id: str) -> None:
    publisher.to_user(user_id, EVENT_NOTIFICATIONS_CLEARED, {})


__all__ = [
    "EVENT_NEW_ANNOUNCEMENT",
    "EVENT_ANNOUNCEMENT_SENT",
    "EVENT_ANNOUNCEMENT_FAN_OUT",
    "EVENT_NOTIFICATION_UPDATED",
    "EVENT_ALL_READ",
    "EVENT_NOTIFICATIONS_CLEARED",
    "RECIPIENT_COUNT_PENDING",
    "new_announcement_payload",
    "notify_recipients",
    "broadcast_new_announcement",
    "notify_announcement_sent",
    "notify_fan_out_finished",
    "notify_count_decreased",
    "notify_all_read",
    "notify_notifications_cleared",
]
