"""Administrator listing of every announcement."""

from sqlalchemy.orm import Session

from important_info.domain.entities import Announcement
from important_info.domain.exceptions import AnnouncementNotFoundError
from important_info.infrastructure.repositories import AnnouncementRepository
from important_info.utils import Page, PageRequest


def list_announcements(session: Session, *, page_request: PageRequest) -> Page[Announcement]:
    return AnnouncementRepository(session).list_paged(page_request)


def get_announcement(session: Session, announcement_id: str) -> Announcement:
    announcement = AnnouncementRepository(session).get(announcement_id)
    if announcement is None:
        raise AnnouncementNotFoundError("Announcement not found")
    return announcement


__all__ = ["list_announcements", "get_announcement"]
