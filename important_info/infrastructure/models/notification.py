"""SQLAlchemy model for per-recipient inbox notifications."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from important_info.infrastructure.database import Base
from important_info.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation of a fanned-out notification."""

    __tablename__ = "notification"
    __table_args__ = (
        UniqueConstraint(
            "recipient_id", "announcement_id", name="uq_notification_recipient_announcement"
        ),
        Index("ix_notification_recipient_read", "recipient_id", "is_read"),
        Index("ix_notification_recipient_created", "recipient_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(String(64), nullable=False)
    announcement_id = Column(
        String(32),
        ForeignKey("announcement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(String(30), nullable=False, default="important-info")
    title = Column(String(255), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["NotificationModel"]
