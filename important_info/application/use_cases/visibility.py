"""Which announcements a user can see, and which of those are unread.

These answers come from the announcement selector and ledgers only. The
notification projection may lag behind fan-out and is never consulted here.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from important_info.domain.entities import Announcement, VisibleAnnouncement
from important_info.domain.exceptions import AnnouncementNotFoundError
from important_info.infrastructure.repositories import AnnouncementRepository
from important_info.utils import Page, PageRequest


def is_visible(announcement: Announcement, user_id: str, role: str | None) -> bool:
    return announcement.selector.matches(str(user_id), role) and not announcement.is_deleted_for(
        str(user_id)
    )


def is_read(announcement: Announcement, user_id: str) -> bool:
    return announcement.is_read_by(str(user_id))


def list_visible(
    session: Session, *, user_id: str, role: str | None, page_request: PageRequest
) -> Page[VisibleAnnouncement]:
    """Return the page of announcements visible to the user, newest first."""

    return AnnouncementRepository(session).list_visible_paged(str(user_id), role, page_request)


def count_unread(session: Session, *, user_id: str, role: str | None) -> int:
    return AnnouncementRepository(session).count_unread(str(user_id), role)


def get_visible_announcement(
    session: Session, *, announcement_id: str, user_id: str, role: str | None
) -> VisibleAnnouncement:
    """Return the announcement if the user may see it, otherwise raise not found."""

    visible = AnnouncementRepository(session).get_visible(announcement_id, str(user_id), role)
    if visible is None:
        raise AnnouncementNotFoundError("Announcement not found")
    return visible


__all__ = [
    "is_visible",
    "is_read",
    "list_visible",
    "count_unread",
    "get_visible_announcement",
]
