"""Notification model."""

from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, DateTime, String, Text

from app.db.base import Base, generate_id, utcnow


class NotificationKind(str, PyEnum):
    """What triggered a notification."""

    COMMENT = "comment"
    APPROVAL = "approval"


class Notification(Base):
    """Notification delivered to a single recipient."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), nullable=False, index=True)
    post_id = Column(String(36), nullable=True)
    kind = Column(String(20), nullable=False)
    message = Column(Text, nullable=False, default="")
    is_read = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, is_read={self.is_read})>"
