"""SQLAlchemy models for announcements, their selector, attachments and ledgers."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from important_info.infrastructure.database import Base
from important_info.utils import now_in_app_naive_datetime


class AnnouncementModel(Base):
    """Database representation of an announcement."""

    __tablename__ = "announcement"

    id = Column(String(32), primary_key=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    sender_id = Column(String(64), nullable=False, index=True)
    sender_name = Column(String(120), nullable=False)
    sender_email = Column(String(255), nullable=True)
    sender_role = Column(String(40), nullable=False)
    urgent = Column(Boolean, nullable=False, default=False)
    fan_out_status = Column(String(20), nullable=False, default="pending")
    recipient_count = Column(Integer, nullable=True)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    updated_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    recipients = relationship(
        "AnnouncementRecipientModel",
        order_by="AnnouncementRecipientModel.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    attachments = relationship(
        "AnnouncementAttachmentModel",
        order_by="AnnouncementAttachmentModel.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    reads = relationship(
        "AnnouncementReadModel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    deletions = relationship(
        "AnnouncementDeletionModel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )


class AnnouncementRecipientModel(Base):
    """One normalized target of an announcement's recipient selector."""

    __tablename__ = "announcement_recipient"
    __table_args__ = (
        UniqueConstraint("announcement_id", "kind", "value", name="uq_announcement_recipient"),
    )

    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(
        String(32),
        ForeignKey("announcement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    kind = Column(String(10), nullable=False)
    value = Column(String(64), nullable=False, default="", index=True)


class AnnouncementAttachmentModel(Base):
    """Content reference to a file attached to an announcement."""

    __tablename__ = "announcement_attachment"

    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(
        String(32),
        ForeignKey("announcement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    content_ref = Column(String(1024), nullable=False)
    storage_path = Column(String(1024), nullable=True)
    kind = Column(String(20), nullable=False)
    size_bytes = Column(Integer, nullable=False, default=0)


class AnnouncementReadModel(Base):
    """Ledger entry recording that a user read an announcement."""

    __tablename__ = "announcement_read"
    __table_args__ = (
        UniqueConstraint("announcement_id", "user_id", name="uq_announcement_read_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(
        String(32),
        ForeignKey("announcement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(64), nullable=False, index=True)
    read_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


class AnnouncementDeletionModel(Base):
    """Ledger entry hiding an announcement from a single user."""

    __tablename__ = "announcement_deletion"
    __table_args__ = (
        UniqueConstraint(
            "announcement_id", "user_id", name="uq_announcement_deletion_user"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(
        String(32),
        ForeignKey("announcement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(64), nullable=False, index=True)
    deleted_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = [
    "AnnouncementModel",
    "AnnouncementRecipientModel",
    "AnnouncementAttachmentModel",
    "AnnouncementReadModel",
    "AnnouncementDeletionModel",
]
