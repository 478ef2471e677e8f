"""Use case for hiding an announcement from a single user."""

from sqlalchemy.orm import Session

from important_info.domain.entities import Principal
from important_info.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
)


def delete_announcement_for_user(
    session: Session, *, announcement_id: str, principal: Principal
) -> bool:
    """Soft delete: other recipients still see the announcement."""

    recorded = AnnouncementRepository(session).soft_delete_for(announcement_id, principal.id)
    NotificationRepository(session).delete_for(principal.id, announcement_id)
    return recorded


__all__ = ["delete_announcement_for_user"]
