"""Lost/found post model."""

from enum import Enum as PyEnum

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base, generate_id, utcnow


class PostType(str, PyEnum):
    """Whether the post reports a lost or a found item."""

    LOST = "lost"
    FOUND = "found"


class ApprovalStatus(str, PyEnum):
    """Moderation state of a post."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Post(Base):
    """
    Lost or found item report.

    `user_id` is a loose reference to the creator; it may point to a user
    that no longer exists.
    """

    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    post_type = Column(String(10), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    location_found = Column(String(255), nullable=True)
    current_location = Column(String(255), nullable=True)
    date_found = Column(String(10), nullable=True)  # YYYY-MM-DD
    tags = Column(JSON, nullable=True)
    photo_ids = Column(JSON, nullable=True)

    admin_approval_status = Column(
        String(20),
        nullable=False,
        default=ApprovalStatus.PENDING.value,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, type={self.post_type}, status={self.admin_approval_status})>"
