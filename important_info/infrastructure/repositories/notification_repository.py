"""Persistence helpers for the per-recipient notification projection."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from important_info.domain.entities import BulkInsertResult, Notification
from important_info.infrastructure.models import NotificationModel
from important_info.utils import (
    Page,
    PageRequest,
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

logger = logging.getLogger(__name__)

# Keeps IN clauses below the parameter limits of SQL Server and SQLite.
_IN_CLAUSE_CHUNK = 500


def _chunked(values: Iterable[str], size: int = _IN_CLAUSE_CHUNK) -> Iterator[list[str]]:
    chunk: list[str] = []
    for value in values:
        chunk.append(value)
        if len(chunk) >= size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` projection rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def bulk_insert(self, notifications: Sequence[Notification]) -> BulkInsertResult:
        """Insert ``notifications`` skipping (recipient, announcement) pairs already stored.

        The whole batch is written in one transaction. When that fails, rows
        are retried one by one so a single bad row cannot sink the others.
        """

        unique: dict[tuple[str, str], Notification] = {}
        for notification in notifications:
            unique.setdefault((notification.recipient_id, notification.announcement_id), notification)
        skipped = len(notifications) - len(unique)

        existing = self._existing_pairs(unique.keys())
        pending = [notification for key, notification in unique.items() if key not in existing]
        skipped += len(unique) - len(pending)
        if not pending:
            return BulkInsertResult(inserted=0, skipped=skipped, failed=0)

        self.session.add_all([self._to_model(notification) for notification in pending])
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning(
                "Batch insert of %s notifications failed (%s); inserting row by row",
                len(pending),
                exc.__class__.__name__,
            )
            return self._insert_one_by_one(pending, skipped=skipped)

        return BulkInsertResult(inserted=len(pending), skipped=skipped, failed=0)

    def mark_read(self, recipient_id: str, announcement_id: str) -> bool:
        """Flag the row as read; ``False`` when the row does not exist (yet)."""

        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.recipient_id == str(recipient_id),
                NotificationModel.announcement_id == announcement_id,
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return bool(updated)

    def mark_read_for_users(self, announcement_id: str, user_ids: Iterable[str]) -> int:
        updated = 0
        for chunk in _chunked(str(user_id) for user_id in user_ids):
            updated += (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.announcement_id == announcement_id,
                    NotificationModel.recipient_id.in_(chunk),
                    NotificationModel.is_read.is_(False),
                )
                .update({NotificationModel.is_read: True}, synchronize_session=False)
            )
        self.session.commit()
        return updated

    def mark_all_read(self, recipient_id: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.recipient_id == str(recipient_id),
                NotificationModel.is_read.is_(False),
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def delete_for(self, recipient_id: str, announcement_id: str) -> bool:
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.recipient_id == str(recipient_id),
                NotificationModel.announcement_id == announcement_id,
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return bool(deleted)

    def delete_for_users(self, announcement_id: str, user_ids: Iterable[str]) -> int:
        deleted = 0
        for chunk in _chunked(str(user_id) for user_id in user_ids):
            deleted += (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.announcement_id == announcement_id,
                    NotificationModel.recipient_id.in_(chunk),
                )
                .delete(synchronize_session=False)
            )
        self.session.commit()
        return deleted

    def delete_all_for_announcement(self, announcement_id: str) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.announcement_id == announcement_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def delete_all_for_user(self, recipient_id: str) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == str(recipient_id))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def count_unread(self, recipient_id: str) -> int:
        return (
            self.session.query(NotificationModel.id)
            .filter(
                NotificationModel.recipient_id == str(recipient_id),
                NotificationModel.is_read.is_(False),
            )
            .count()
        )

    def list_paged(self, recipient_id: str, page_request: PageRequest) -> Page[Notification]:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.recipient_id == str(recipient_id)
        )
        total = query.count()
        models = (
            query.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .offset(page_request.offset)
            .limit(page_request.page_size)
            .all()
        )
        return Page([self._to_entity(model) for model in models], total, page_request)

    def recipient_ids_for(self, announcement_id: str) -> set[str]:
        rows = (
            self.session.query(NotificationModel.recipient_id)
            .filter(NotificationModel.announcement_id == announcement_id)
            .all()
        )
        return {recipient_id for (recipient_id,) in rows}

    def _existing_pairs(self, keys: Iterable[tuple[str, str]]) -> set[tuple[str, str]]:
        by_announcement: dict[str, list[str]] = defaultdict(list)
        for recipient_id, announcement_id in keys:
            by_announcement[announcement_id].append(recipient_id)

        existing: set[tuple[str, str]] = set()
        for announcement_id, recipient_ids in by_announcement.items():
            for chunk in _chunked(recipient_ids):
                rows = (
                    self.session.query(NotificationModel.recipient_id)
                    .filter(
                        NotificationModel.announcement_id == announcement_id,
                        NotificationModel.recipient_id.in_(chunk),
                    )
                    .all()
                )
                existing.update((recipient_id, announcement_id) for (recipient_id,) in rows)
        return existing

    def _insert_one_by_one(
        self, notifications: Sequence[Notification], *, skipped: int
    ) -> BulkInsertResult:
        inserted = failed = 0
        for notification in notifications:
            self.session.add(self._to_model(notification))
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                if self._existing_pairs([(notification.recipient_id, notification.announcement_id)]):
                    skipped += 1
                    continue
                failed += 1
                logger.warning(
                    "Could not store notification of announcement %s for recipient %s",
                    notification.announcement_id,
                    notification.recipient_id,
                )
            except SQLAlchemyError:
                self.session.rollback()
                failed += 1
                logger.exception(
                    "Could not store notification of announcement %s for recipient %s",
                    notification.announcement_id,
                    notification.recipient_id,
                )
            else:
                inserted += 1
        return BulkInsertResult(inserted=inserted, skipped=skipped, failed=failed)

    @staticmethod
    def _to_model(notification: Notification) -> NotificationModel:
        return NotificationModel(
            recipient_id=notification.recipient_id,
            announcement_id=notification.announcement_id,
            type=notification.type,
            title=notification.title,
            is_read=bool(notification.is_read),
            created_at=(
                ensure_app_naive_datetime(notification.created_at)
                or ensure_app_naive_datetime(now_in_app_timezone())
            ),
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            announcement_id=model.announcement_id,
            title=model.title,
            type=model.type,
            is_read=bool(model.is_read),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
