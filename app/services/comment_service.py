"""Comment service."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.db.base import utcnow
from app.models.comment import Comment
from app.models.notification import NotificationKind
from app.models.post import Post
from app.services.context import RequestContext
from app.services.exceptions import (
    CommentNotFoundError,
    InvalidInputError,
    PostNotFoundError,
)
from app.services.notification_service import NotificationService
from app.services.ownership import ensure_can_mutate

logger = logging.getLogger(__name__)


def _require_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidInputError("Comment content is required")
    return content


class CommentService:
    """Service for comments on posts."""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        """
        Initialize the comment service.

        Args:
            db: SQLAlchemy database session
            notifications: Notification service (created on the same session if omitted)
        """
        self.db = db
        self.notifications = notifications or NotificationService(db)

    def _get_post(self, post_id: str) -> Post:
        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise PostNotFoundError(post_id)
        return post

    def list_for_post(self, post_id: str) -> list[Comment]:
        """List a post's comments, oldest first."""
        self._get_post(post_id)
        return self.db.query(Comment).filter(
            Comment.post_id == post_id
        ).order_by(Comment.created_at.asc()).all()

    def get_comment(self, comment_id: str) -> Comment:
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()

        if not comment:
            raise CommentNotFoundError(comment_id)

        return comment

    def create_comment(self, ctx: RequestContext, post_id: str, content: str) -> Comment:
        """
        Comment on a post as the current user.

        The post owner is notified unless they wrote the comment.
        """
        content = _require_content(content)
        post = self._get_post(post_id)

        comment = Comment(post_id=post.id, user_id=ctx.user_id, content=content)
        self.db.add(comment)

        self.notifications.notify(
            post.user_id,
            NotificationKind.COMMENT,
            f'{ctx.name or "Someone"} commented on "{post.title}"',
            post_id=post.id,
            actor_id=ctx.user_id,
            commit=False,
        )

        self.db.commit()
        self.db.refresh(comment)

        logger.info(f"Comment {comment.id} added to post {post.id} by {ctx.user_id}")
        return comment

    def update_comment(self, ctx: RequestContext, comment_id: str, content: str) -> Comment:
        """
        Edit a comment. Owner or admin only.

        Raises:
            CommentNotFoundError: If comment doesn't exist
            ForbiddenError: Not owner/admin
            InvalidInputError: Empty content
        """
        comment = self.get_comment(comment_id)
        ensure_can_mutate(ctx, comment.user_id, "comment")
        content = _require_content(content)

        self.db.query(Comment).filter(Comment.id == comment.id).update(
            {"content": content, "updated_at": utcnow()}, synchronize_session="fetch"
        )
        self.db.commit()
        self.db.refresh(comment)

        logger.info(f"Comment {comment.id} updated by {ctx.user_id}")
        return comment

    def delete_comment(self, ctx: RequestContext, comment_id: str) -> None:
        """
        Delete a comment. Owner or admin only.

        Raises:
            CommentNotFoundError: If comment doesn't exist
            ForbiddenError: Not owner/admin
        """
        comment = self.get_comment(comment_id)
        ensure_can_mutate(ctx, comment.user_id, "comment")

        self.db.query(Comment).filter(Comment.id == comment.id).delete(synchronize_session="fetch")
        self.db.commit()

        logger.info(f"Comment {comment_id} deleted by {ctx.user_id}")
