"""Use case for recording that a user read an announcement."""

from sqlalchemy.orm import Session

from important_info.application.use_cases.notifications.events import notify_count_decreased
from important_info.domain.entities import Principal
from important_info.infrastructure.notifications import LivePushPublisher
from important_info.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
)


def mark_announcement_read(
    session: Session,
    *,
    announcement_id: str,
    principal: Principal,
    publisher: LivePushPublisher,
) -> bool:
    """Append the principal to the read ledger and sync the inbox row.

    Marking twice is harmless. Returns ``True`` when this call recorded the read.
    """

    recorded = AnnouncementRepository(session).mark_read(announcement_id, principal.id)
    NotificationRepository(session).mark_read(principal.id, announcement_id)
    notify_count_decreased(publisher, principal.id)
    return recorded


__all__ = ["mark_announcement_read"]
