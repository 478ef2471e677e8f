"""Persistence helpers for announcements and their per-user ledgers."""

from __future__ import annotations

import logging
from typing import Iterable, Type, Union
from uuid import uuid4

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from important_info.domain.entities import (
    AllRecipients,
    Announcement,
    AnnouncementSender,
    Attachment,
    LedgerEntry,
    RecipientSelector,
    RecipientTarget,
    RoleRecipients,
    UserRecipient,
    VisibleAnnouncement,
    validate_content,
)
from important_info.domain.exceptions import AnnouncementNotFoundError, StorageError
from important_info.infrastructure.models import (
    AnnouncementAttachmentModel,
    AnnouncementDeletionModel,
    AnnouncementModel,
    AnnouncementReadModel,
    AnnouncementRecipientModel,
)
from important_info.utils import (
    Page,
    PageRequest,
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

logger = logging.getLogger(__name__)

_LedgerModel = Union[Type[AnnouncementReadModel], Type[AnnouncementDeletionModel]]


def visible_to_clause(user_id: str, role: str | None):
    """SQL predicate equivalent to :func:`is_visible` for ``user_id``/``role``.

    The announcement must address the user (``all``, the user's role or the
    user id) and the user must not have deleted it.
    """

    user_id = str(user_id)
    target_conditions = [
        AnnouncementRecipientModel.kind == "all",
        and_(
            AnnouncementRecipientModel.kind == "user",
            AnnouncementRecipientModel.value == user_id,
        ),
    ]
    if role:
        target_conditions.append(
            and_(
                AnnouncementRecipientModel.kind == "role",
                AnnouncementRecipientModel.value == role.lower(),
            )
        )
    addressed = (
        select(AnnouncementRecipientModel.id)
        .where(AnnouncementRecipientModel.announcement_id == AnnouncementModel.id)
        .where(or_(*target_conditions))
        .exists()
    )
    deleted = (
        select(AnnouncementDeletionModel.id)
        .where(AnnouncementDeletionModel.announcement_id == AnnouncementModel.id)
        .where(AnnouncementDeletionModel.user_id == user_id)
        .exists()
    )
    return and_(addressed, ~deleted)


def read_by_clause(user_id: str):
    return (
        select(AnnouncementReadModel.id)
        .where(AnnouncementReadModel.announcement_id == AnnouncementModel.id)
        .where(AnnouncementReadModel.user_id == str(user_id))
        .exists()
    )


class AnnouncementRepository:
    """Provide storage operations for :class:`Announcement` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, announcement: Announcement) -> Announcement:
        """Persist ``announcement`` and return it with its id and timestamps."""

        title, body = validate_content(announcement.title, announcement.body)
        now = ensure_app_naive_datetime(announcement.created_at or now_in_app_timezone())
        model = AnnouncementModel(
            id=uuid4().hex,
            title=title,
            body=body,
            sender_id=str(announcement.sender.id),
            sender_name=announcement.sender.name,
            sender_email=announcement.sender.email,
            sender_role=announcement.sender.role,
            urgent=bool(announcement.urgent),
            fan_out_status=announcement.fan_out_status,
            recipient_count=announcement.recipient_count,
            created_at=now,
            updated_at=now,
        )
        model.recipients = [
            self._target_to_model(target, position)
            for position, target in enumerate(announcement.selector.targets)
        ]
        model.attachments = [
            AnnouncementAttachmentModel(
                position=position,
                filename=attachment.filename,
                original_name=attachment.original_name,
                content_ref=attachment.content_ref,
                storage_path=attachment.storage_path,
                kind=attachment.kind,
                size_bytes=attachment.size_bytes,
            )
            for position, attachment in enumerate(announcement.attachments)
        ]
        self.session.add(model)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Could not store announcement '%s'", title)
            raise StorageError("Could not store the announcement") from exc
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, announcement_id: str) -> Announcement | None:
        model = self.session.get(AnnouncementModel, announcement_id)
        return self._to_entity(model) if model else None

    def get_many(self, announcement_ids: Iterable[str]) -> dict[str, Announcement]:
        ids = {str(announcement_id) for announcement_id in announcement_ids}
        if not ids:
            return {}
        models = self.session.query(AnnouncementModel).filter(AnnouncementModel.id.in_(ids)).all()
        return {model.id: self._to_entity(model) for model in models}

    def exists(self, announcement_id: str) -> bool:
        return (
            self.session.query(AnnouncementModel.id)
            .filter(AnnouncementModel.id == announcement_id)
            .first()
            is not None
        )

    def list_paged(self, page_request: PageRequest) -> Page[Announcement]:
        """Return every announcement, newest first (administrator view)."""

        query = self.session.query(AnnouncementModel)
        total = query.count()
        models = (
            query.order_by(AnnouncementModel.created_at.desc(), AnnouncementModel.id.desc())
            .offset(page_request.offset)
            .limit(page_request.page_size)
            .all()
        )
        return Page([self._to_entity(model) for model in models], total, page_request)

    def list_visible_paged(
        self, user_id: str, role: str | None, page_request: PageRequest
    ) -> Page[VisibleAnnouncement]:
        """Return the announcements visible to ``user_id`` annotated with read state."""

        visible = visible_to_clause(user_id, role)
        total = self.session.query(AnnouncementModel.id).filter(visible).count()
        rows = (
            self.session.query(AnnouncementModel, read_by_clause(user_id).label("is_read"))
            .filter(visible)
            .order_by(AnnouncementModel.created_at.desc(), AnnouncementModel.id.desc())
            .offset(page_request.offset)
            .limit(page_request.page_size)
            .all()
        )
        items = [
            VisibleAnnouncement(announcement=self._to_entity(model), is_read=bool(is_read))
            for model, is_read in rows
        ]
        return Page(items, total, page_request)

    def get_visible(self, announcement_id: str, user_id: str, role: str | None) -> VisibleAnnouncement | None:
        row = (
            self.session.query(AnnouncementModel, read_by_clause(user_id).label("is_read"))
            .filter(AnnouncementModel.id == announcement_id)
            .filter(visible_to_clause(user_id, role))
            .first()
        )
        if row is None:
            return None
        model, is_read = row
        return VisibleAnnouncement(announcement=self._to_entity(model), is_read=bool(is_read))

    def count_unread(self, user_id: str, role: str | None) -> int:
        return (
            self.session.query(AnnouncementModel.id)
            .filter(visible_to_clause(user_id, role))
            .filter(~read_by_clause(user_id))
            .count()
        )

    def list_unread_ids(self, user_id: str, role: str | None) -> list[str]:
        rows = (
            self.session.query(AnnouncementModel.id)
            .filter(visible_to_clause(user_id, role))
            .filter(~read_by_clause(user_id))
            .all()
        )
        return [announcement_id for (announcement_id,) in rows]

    def mark_read(self, announcement_id: str, user_id: str) -> bool:
        """Append ``user_id`` to the read ledger; ``False`` when already present."""

        return self._append_ledger_entry(AnnouncementReadModel, announcement_id, user_id)

    def soft_delete_for(self, announcement_id: str, user_id: str) -> bool:
        """Append ``user_id`` to the deletion ledger; ``False`` when already present."""

        return self._append_ledger_entry(AnnouncementDeletionModel, announcement_id, user_id)

    def read_user_ids(self, announcement_id: str) -> set[str]:
        rows = (
            self.session.query(AnnouncementReadModel.user_id)
            .filter(AnnouncementReadModel.announcement_id == announcement_id)
            .all()
        )
        return {user_id for (user_id,) in rows}

    def deleted_user_ids(self, announcement_id: str) -> set[str]:
        rows = (
            self.session.query(AnnouncementDeletionModel.user_id)
            .filter(AnnouncementDeletionModel.announcement_id == announcement_id)
            .all()
        )
        return {user_id for (user_id,) in rows}

    def set_fan_out_status(
        self, announcement_id: str, status: str, *, recipient_count: int | None = None
    ) -> None:
        values: dict[object, object] = {AnnouncementModel.fan_out_status: status}
        if recipient_count is not None:
            values[AnnouncementModel.recipient_count] = recipient_count
        self.session.query(AnnouncementModel).filter(
            AnnouncementModel.id == announcement_id
        ).update(values, synchronize_session=False)
        self.session.commit()

    def purge(self, announcement_id: str) -> Announcement:
        """Irreversibly delete the announcement and return what was removed."""

        model = self.session.get(AnnouncementModel, announcement_id)
        if model is None:
            raise AnnouncementNotFoundError("Announcement not found")
        announcement = self._to_entity(model)
        self.session.delete(model)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Could not purge announcement %s", announcement_id)
            raise StorageError("Could not delete the announcement") from exc
        return announcement

    def _append_ledger_entry(
        self, model_cls: _LedgerModel, announcement_id: str, user_id: str
    ) -> bool:
        for attempt in (1, 2):
            try:
                return self._insert_if_absent(model_cls, announcement_id, str(user_id))
            except OperationalError as exc:
                self.session.rollback()
                if attempt == 2:
                    logger.error(
                        "Ledger append on %s failed twice for announcement %s",
                        model_cls.__tablename__,
                        announcement_id,
                    )
                    raise StorageError("Could not update the announcement") from exc
                logger.warning(
                    "Transient failure appending to %s for announcement %s; retrying",
                    model_cls.__tablename__,
                    announcement_id,
                )
            except SQLAlchemyError as exc:
                self.session.rollback()
                logger.exception(
                    "Ledger append on %s failed for announcement %s",
                    model_cls.__tablename__,
                    announcement_id,
                )
                raise StorageError("Could not update the announcement") from exc
        return False  # pragma: no cover - the loop always returns or raises

    def _insert_if_absent(
        self, model_cls: _LedgerModel, announcement_id: str, user_id: str
    ) -> bool:
        if not self.exists(announcement_id):
            raise AnnouncementNotFoundError("Announcement not found")

        now = ensure_app_naive_datetime(now_in_app_timezone())
        entry = model_cls(announcement_id=announcement_id, user_id=user_id)
        if model_cls is AnnouncementReadModel:
            entry.read_at = now
        else:
            entry.deleted_at = now
        self.session.add(entry)
        try:
            self.session.flush()
        except IntegrityError:
            # Unique (announcement, user) already taken: the entry exists.
            self.session.rollback()
            return False

        self.session.query(AnnouncementModel).filter(
            AnnouncementModel.id == announcement_id
        ).update({AnnouncementModel.updated_at: now}, synchronize_session=False)
        self.session.commit()
        return True

    @staticmethod
    def _target_to_model(target: RecipientTarget, position: int) -> AnnouncementRecipientModel:
        if isinstance(target, RoleRecipients):
            value = target.role
        elif isinstance(target, UserRecipient):
            value = target.user_id
        else:
            value = ""
        return AnnouncementRecipientModel(position=position, kind=target.kind, value=value)

    @staticmethod
    def _model_to_target(model: AnnouncementRecipientModel) -> RecipientTarget:
        if model.kind == "role":
            return RoleRecipients(model.value)
        if model.kind == "user":
            return UserRecipient(model.value)
        return AllRecipients()

    @classmethod
    def _to_entity(cls, model: AnnouncementModel) -> Announcement:
        return Announcement(
            id=model.id,
            title=model.title,
            body=model.body,
            sender=AnnouncementSender(
                id=model.sender_id,
                name=model.sender_name,
                email=model.sender_email,
                role=model.sender_role,
            ),
            urgent=bool(model.urgent),
            selector=RecipientSelector.from_targets(
                cls._model_to_target(recipient) for recipient in model.recipients
            ),
            attachments=[
                Attachment(
                    filename=attachment.filename,
                    original_name=attachment.original_name,
                    content_ref=attachment.content_ref,
                    kind=attachment.kind,
                    size_bytes=attachment.size_bytes,
                    storage_path=attachment.storage_path,
                )
                for attachment in model.attachments
            ],
            read_by=[
                LedgerEntry(user_id=read.user_id, recorded_at=ensure_app_timezone(read.read_at))
                for read in model.reads
            ],
            deleted_for=[
                LedgerEntry(
                    user_id=deletion.user_id,
                    recorded_at=ensure_app_timezone(deletion.deleted_at),
                )
                for deletion in model.deletions
            ],
            fan_out_status=model.fan_out_status,
            recipient_count=model.recipient_count,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["AnnouncementRepository", "visible_to_clause", "read_by_clause"]
