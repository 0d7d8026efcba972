"""Post service for lost/found item reports."""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.db.base import utcnow
from app.models.notification import NotificationKind
from app.models.post import Post, PostType
from app.schemas.post import PostCreate, PostUpdate
from app.services import approval
from app.services.context import RequestContext
from app.services.exceptions import InvalidInputError, PostNotFoundError
from app.services.notification_service import NotificationService
from app.services.ownership import ensure_can_mutate

logger = logging.getLogger(__name__)


class PostService:
    """Service for creating, moderating and removing posts."""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        """
        Initialize the post service.

        Args:
            db: SQLAlchemy database session
            notifications: Notification service (created on the same session if omitted)
        """
        self.db = db
        self.notifications = notifications or NotificationService(db)

    def list_posts(self, post_type: Optional[PostType] = None) -> list[Post]:
        """
        List posts, newest first.

        Every approval status is returned; callers filter if they need to.
        """
        query = self.db.query(Post)
        if post_type:
            query = query.filter(Post.post_type == post_type.value)
        return query.order_by(Post.created_at.desc()).all()

    def get_post(self, post_id: str) -> Post:
        """
        Get a post by ID.

        Raises:
            PostNotFoundError: If post doesn't exist
        """
        post = self.db.query(Post).filter(Post.id == post_id).first()

        if not post:
            raise PostNotFoundError(post_id)

        return post

    def create_post(self, ctx: RequestContext, data: PostCreate) -> Post:
        """
        Create a post owned by the current user.

        The approval status is decided here from the creator's admin flag
        and never recomputed afterwards.
        """
        status = approval.initial_status(ctx.is_admin)

        post = Post(
            user_id=ctx.user_id,
            admin_approval_status=status.value,
            title=data.title or data.item_name,
            post_type=data.post_type.value,
            item_name=data.item_name,
            description=data.description or "",
            content=data.content or "",
            location_found=data.location_found,
            current_location=data.current_location,
            date_found=data.date_found,
            tags=data.tags,
            photo_ids=data.photo_ids or None,
        )

        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)

        logger.info(f"Created post {post.id} ({post.post_type}) for user {ctx.user_id} as {status.value}")
        return post

    def update_post(self, ctx: RequestContext, post_id: str, data: PostUpdate) -> Post:
        """
        Update a post.

        Only the owner or an admin may update; only an admin may change the
        approval status.

        Raises:
            PostNotFoundError: If post doesn't exist
            ForbiddenError: Not owner/admin, or non-admin approval change
            InvalidInputError: No fields to update
        """
        post = self.get_post(post_id)
        ensure_can_mutate(ctx, post.user_id, "post")

        values: dict[str, Any] = data.model_dump(
            exclude_unset=True,
            exclude_none=True,
            exclude={"admin_approval_status"},
        )
        if "post_type" in values:
            values["post_type"] = values["post_type"].value
        if "photo_ids" in data.model_fields_set:
            values["photo_ids"] = data.photo_ids or None

        previous_status = post.admin_approval_status
        new_status = None
        if data.admin_approval_status is not None:
            new_status = approval.transition(ctx, previous_status, data.admin_approval_status)
            values["admin_approval_status"] = new_status.value

        if not values:
            raise InvalidInputError("No fields to update")

        values["updated_at"] = utcnow()
        self.db.query(Post).filter(Post.id == post.id).update(values, synchronize_session="fetch")

        if new_status is not None and new_status.value != previous_status:
            self.notifications.notify(
                post.user_id,
                NotificationKind.APPROVAL,
                f'Your post "{post.title}" is now {new_status.value}',
                post_id=post.id,
                actor_id=ctx.user_id,
                commit=False,
            )

        self.db.commit()
        self.db.refresh(post)

        logger.info(f"Post {post.id} updated by {ctx.user_id}")
        return post

    def delete_post(self, ctx: RequestContext, post_id: str) -> None:
        """
        Delete a post and its comments.

        Raises:
            PostNotFoundError: If post doesn't exist
            ForbiddenError: Not owner/admin
        """
        post = self.get_post(post_id)
        ensure_can_mutate(ctx, post.user_id, "post")

        self.db.delete(post)
        self.db.commit()

        logger.info(f"Post {post_id} deleted by {ctx.user_id}")
