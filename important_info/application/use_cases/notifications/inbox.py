"""Use cases backing the per-user notification inbox and badge."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from important_info.domain.entities import InboxEntry, Principal
from important_info.domain.exceptions import AnnouncementNotFoundError
from important_info.infrastructure.notifications import LivePushPublisher
from important_info.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
)
from important_info.utils import Page, PageRequest

from .events import notify_all_read, notify_notifications_cleared

logger = logging.getLogger(__name__)


def list_notifications(
    session: Session, *, principal: Principal, page_request: PageRequest
) -> Page[InboxEntry]:
    """Return the caller's inbox rows, each with the announcement it refers to."""

    rows = NotificationRepository(session).list_paged(principal.id, page_request)
    announcements = AnnouncementRepository(session).get_many(
        row.announcement_id for row in rows.items
    )
    entries = [
        InboxEntry(notification=row, announcement=announcements.get(row.announcement_id))
        for row in rows.items
    ]
    return Page(entries, rows.total, rows.request)


def count_unread_notifications(session: Session, *, principal: Principal) -> int:
    """Badge count from the projection; may trail the announcements while fan-out runs."""

    return NotificationRepository(session).count_unread(principal.id)


def mark_all_notifications_read(
    session: Session, *, principal: Principal, publisher: LivePushPublisher
) -> int:
    """Mark every visible unread announcement and every inbox row as read.

    The read ledger is updated too so the badge and the announcement list
    agree afterwards. Returns the number of inbox rows that changed.
    """

    announcements = AnnouncementRepository(session)
    recorded = 0
    for announcement_id in announcements.list_unread_ids(principal.id, principal.role):
        try:
            if announcements.mark_read(announcement_id, principal.id):
                recorded += 1
        except AnnouncementNotFoundError:
            # Purged since it was listed.
            continue

    updated = NotificationRepository(session).mark_all_read(principal.id)
    logger.debug(
        "User %s marked all read (%s ledger entries, %s inbox rows)",
        principal.id,
        recorded,
        updated,
    )
    notify_all_read(publisher, principal.id)
    return updated


def clear_all_notifications(
    session: Session, *, principal: Principal, publisher: LivePushPublisher
) -> int:
    """Empty the inbox; the announcements themselves stay visible."""

    deleted = NotificationRepository(session).delete_all_for_user(principal.id)
    notify_notifications_cleared(publisher, principal.id)
    return deleted


__all__ = [
    "list_notifications",
    "count_unread_notifications",
    "mark_all_notifications_read",
    "clear_all_notifications",
]
