"""Use case for permanently removing an announcement."""

import logging

from sqlalchemy.orm import Session

from important_info.domain.entities import Announcement
from important_info.domain.exceptions import AnnouncementNotFoundError
from important_info.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
)
from important_info.infrastructure.storage import AttachmentStorage

from .attachments import release_attachments

logger = logging.getLogger(__name__)


def purge_announcement(
    session: Session, *, announcement_id: str, storage: AttachmentStorage
) -> Announcement:
    """Delete the announcement, its inbox rows and its stored attachments."""

    announcements = AnnouncementRepository(session)
    if not announcements.exists(announcement_id):
        raise AnnouncementNotFoundError("Announcement not found")

    removed_rows = NotificationRepository(session).delete_all_for_announcement(announcement_id)
    announcement = announcements.purge(announcement_id)
    released = release_attachments(storage, announcement.attachments)
    logger.info(
        "Announcement %s purged (%s notifications, %s/%s attachments released)",
        announcement_id,
        removed_rows,
        released,
        len(announcement.attachments),
    )
    return announcement


__all__ = ["purge_announcement"]
