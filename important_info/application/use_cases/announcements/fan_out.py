"""Persist an announcement and spread it to its recipients."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from important_info.application.use_cases.notifications.events import (
    RECIPIENT_COUNT_PENDING,
    broadcast_new_announcement,
    notify_announcement_sent,
    notify_fan_out_finished,
    notify_recipients,
)
from important_info.application.use_cases.recipients import (
    explicit_recipients,
    resolve_recipients,
)
from important_info.domain.entities import (
    FAN_OUT_COMPLETE,
    FAN_OUT_FAILED,
    FAN_OUT_PENDING,
    Announcement,
    BulkInsertResult,
    Notification,
)
from important_info.domain.exceptions import UpstreamUnavailableError
from important_info.infrastructure.directory import DirectoryClient
from important_info.infrastructure.notifications import LivePushPublisher
from important_info.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE_PREFIX = "New Important Information: "

Scheduler = Callable[..., Any]


def notification_title(announcement_title: str) -> str:
    return f"{NOTIFICATION_TITLE_PREFIX}{announcement_title}"


@dataclass
class DeferredFanOut:
    """Role and ``all`` resolution left for a background task.

    ``status`` starts as ``pending`` and ends as ``complete`` or ``failed``;
    the same outcome is stored on the announcement.
    """

    announcement: Announcement
    credential: Optional[str] = field(default=None, repr=False)
    status: str = FAN_OUT_PENDING
    recipient_count: Optional[int] = None
    error: Optional[str] = None


@dataclass
class FanOutResult:
    announcement: Announcement
    status: str
    notified_count: int
    deferred: Optional[DeferredFanOut] = None


class FanOutOrchestrator:
    """Turn a stored announcement into projection rows and live events.

    Explicit user ids are materialized before the request returns. Role and
    ``all`` targets need the directory, so they are resolved later by
    :meth:`run_deferred` with a session of its own.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        directory: DirectoryClient,
        publisher: LivePushPublisher,
    ) -> None:
        self._session_factory = session_factory
        self._directory = directory
        self._publisher = publisher

    def publish(
        self,
        session: Session,
        announcement: Announcement,
        *,
        credential: str | None = None,
        schedule: Scheduler | None = None,
    ) -> FanOutResult:
        """Store ``announcement`` and start its fan-out.

        ``schedule`` receives ``(run_deferred, deferred)`` when directory
        resolution is needed. Without a scheduler the deferred work is only
        returned and the caller decides when to run it.
        """

        selector = announcement.selector
        explicit = explicit_recipients(selector)
        if selector.needs_directory:
            announcement.fan_out_status = FAN_OUT_PENDING
            announcement.recipient_count = None
        else:
            announcement.fan_out_status = FAN_OUT_COMPLETE
            announcement.recipient_count = len(explicit)

        stored = AnnouncementRepository(session).create(announcement)
        logger.info(
            "Announcement %s stored by %s for %s",
            stored.id,
            stored.sender.id,
            ",".join(selector.tokens()),
        )

        notified: set[str] = set()
        if explicit:
            _, excluded = self._materialize(session, stored, explicit)
            notified = explicit - excluded
            notify_recipients(self._publisher, stored, notified)

        if not selector.needs_directory:
            notify_announcement_sent(self._publisher, stored, len(explicit))
            return FanOutResult(
                announcement=stored, status=FAN_OUT_COMPLETE, notified_count=len(notified)
            )

        broadcast_new_announcement(self._publisher, stored)
        notify_announcement_sent(self._publisher, stored, RECIPIENT_COUNT_PENDING)
        deferred = DeferredFanOut(announcement=stored, credential=credential)
        if schedule is not None:
            schedule(self.run_deferred, deferred)
        return FanOutResult(
            announcement=stored,
            status=FAN_OUT_PENDING,
            notified_count=len(notified),
            deferred=deferred,
        )

    def run_deferred(self, deferred: DeferredFanOut) -> DeferredFanOut:
        """Resolve role and ``all`` targets through the directory and write their rows."""

        session = self._session_factory()
        try:
            self._run_deferred(session, deferred)
        except Exception as exc:  # pragma: no cover - background processing guard
            logger.exception(
                "Deferred fan-out of announcement %s crashed", deferred.announcement.id
            )
            session.rollback()
            deferred.error = str(exc)
            self._record_outcome(session, deferred, FAN_OUT_FAILED)
        finally:
            session.close()
        return deferred

    def _run_deferred(self, session: Session, deferred: DeferredFanOut) -> None:
        announcement = deferred.announcement
        announcements = AnnouncementRepository(session)
        if not announcements.exists(announcement.id):
            logger.info("Announcement %s was deleted before its fan-out ran", announcement.id)
            deferred.status = FAN_OUT_FAILED
            deferred.error = "Announcement deleted"
            return

        try:
            directory_users = self._directory.list_users(deferred.credential)
        except UpstreamUnavailableError as exc:
            logger.warning("Fan-out of announcement %s abandoned: %s", announcement.id, exc)
            deferred.error = str(exc)
            self._record_outcome(session, deferred, FAN_OUT_FAILED)
            return

        recipients = resolve_recipients(announcement.selector, directory_users)
        if not recipients:
            logger.warning(
                "Announcement %s resolved to no recipients (%s directory users)",
                announcement.id,
                len(directory_users),
            )

        # Rows written before this run were already announced to their recipients.
        already_notified = NotificationRepository(session).recipient_ids_for(announcement.id)
        result, excluded = self._materialize(session, announcement, recipients)
        if result.failed:
            logger.warning(
                "%s of %s notifications for announcement %s could not be stored",
                result.failed,
                len(recipients),
                announcement.id,
            )

        deferred.recipient_count = len(recipients)
        self._record_outcome(session, deferred, FAN_OUT_COMPLETE)
        notify_recipients(
            self._publisher,
            announcement,
            recipients - excluded - already_notified,
        )
        logger.info(
            "Fan-out of announcement %s complete: %s recipients, %s inserted, %s skipped",
            announcement.id,
            len(recipients),
            result.inserted,
            result.skipped,
        )

    def _materialize(
        self, session: Session, announcement: Announcement, recipients: Iterable[str]
    ) -> tuple[BulkInsertResult, set[str]]:
        """Write projection rows seeded from the ledgers, then reconcile late changes.

        Returns the insert outcome and the recipients left out because they
        already deleted the announcement.
        """

        announcements = AnnouncementRepository(session)
        notifications = NotificationRepository(session)
        read_ids = announcements.read_user_ids(announcement.id)
        deleted_ids = announcements.deleted_user_ids(announcement.id)

        title = notification_title(announcement.title)
        rows = [
            Notification(
                id=None,
                recipient_id=recipient_id,
                announcement_id=announcement.id,
                title=title,
                is_read=recipient_id in read_ids,
            )
            for recipient_id in sorted(set(recipients))
            if recipient_id not in deleted_ids
        ]
        result = notifications.bulk_insert(rows) if rows else BulkInsertResult()

        # Reads and deletes may have landed while the batch was written.
        late_reads = announcements.read_user_ids(announcement.id) - read_ids
        late_deletes = announcements.deleted_user_ids(announcement.id) - deleted_ids
        if late_reads:
            notifications.mark_read_for_users(announcement.id, late_reads)
        if late_deletes:
            notifications.delete_for_users(announcement.id, late_deletes)
        return result, deleted_ids | late_deletes

    def _record_outcome(self, session: Session, deferred: DeferredFanOut, status: str) -> None:
        deferred.status = status
        announcement_id = deferred.announcement.id
        try:
            AnnouncementRepository(session).set_fan_out_status(
                announcement_id, status, recipient_count=deferred.recipient_count
            )
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Could not record fan-out status of announcement %s", announcement_id)
        notify_fan_out_finished(
            self._publisher,
            announcement_id=announcement_id,
            status=status,
            recipient_count=deferred.recipient_count,
        )


__all__ = [
    "NOTIFICATION_TITLE_PREFIX",
    "DeferredFanOut",
    "FanOutOrchestrator",
    "FanOutResult",
    "notification_title",
]
