"""Comment model."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base, generate_id, utcnow


class Comment(Base):
    """Comment left on a post."""

    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=generate_id)
    post_id = Column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(36), nullable=True, index=True)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    post = relationship("Post", back_populates="comments")
    author = relationship(
        "User",
        primaryjoin="foreign(Comment.user_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    @property
    def user_name(self):
        return self.author.name if self.author else None

    @property
    def user_email(self):
        return self.author.email if self.author else None

    @property
    def user_picture(self):
        return self.author.picture if self.author else None

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, post_id={self.post_id})>"
