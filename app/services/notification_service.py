"""Notification service."""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationKind
from app.services.context import RequestContext
from app.services.exceptions import NotificationNotFoundError
from app.services.ownership import ensure_can_access_notification, normalize_id, same_id

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Service for user notifications.

    Notifications are private to their recipient. Unlike posts and comments,
    administrators get no override here.
    """

    def __init__(self, db: Session):
        """
        Initialize the notification service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    @staticmethod
    def _owned_by(ctx: RequestContext):
        # Same normalisation as ownership.same_id, applied in SQL
        return func.lower(func.trim(Notification.user_id)) == normalize_id(ctx.user_id)

    def notify(
        self,
        user_id: Optional[str],
        kind: NotificationKind,
        message: str,
        post_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        commit: bool = True,
    ) -> Optional[Notification]:
        """
        Queue a notification for ``user_id``.

        Nothing is created when there is no recipient or the recipient is
        the actor.
        """
        if not user_id or same_id(user_id, actor_id):
            return None

        notification = Notification(
            user_id=user_id,
            post_id=post_id,
            kind=kind.value,
            message=message,
            is_read=False,
        )
        self.db.add(notification)
        if commit:
            self.db.commit()
            self.db.refresh(notification)

        logger.info(f"Notification ({kind.value}) queued for user {user_id}")
        return notification

    def list_for_user(self, ctx: RequestContext, unread_only: bool = False) -> tuple[list[Notification], int]:
        """
        List the current user's notifications, newest first.

        Returns:
            Tuple of (notifications, unread count)
        """
        query = self.db.query(Notification).filter(self._owned_by(ctx))
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))

        notifications = query.order_by(Notification.created_at.desc()).all()

        if unread_only:
            unread_count = len(notifications)
        else:
            unread_count = self.db.query(Notification).filter(
                self._owned_by(ctx),
                Notification.is_read.is_(False),
            ).count()

        return notifications, unread_count

    def get_for_user(self, ctx: RequestContext, notification_id: str) -> Notification:
        """
        Get one of the current user's notifications.

        Other users' notifications are reported as missing.
        """
        notification = self.db.query(Notification).filter(
            Notification.id == notification_id,
            self._owned_by(ctx),
        ).first()

        if not notification:
            raise NotificationNotFoundError(notification_id)

        return notification

    def set_read(self, ctx: RequestContext, notification_id: str, is_read: bool) -> Notification:
        """
        Flip the read flag of a notification.

        Raises:
            NotificationNotFoundError: If it doesn't exist
            ForbiddenError: If it belongs to someone else
        """
        notification = self.db.query(Notification).filter(
            Notification.id == notification_id
        ).first()

        if not notification:
            raise NotificationNotFoundError(notification_id)

        ensure_can_access_notification(ctx, notification.user_id)

        self.db.query(Notification).filter(Notification.id == notification.id).update(
            {"is_read": bool(is_read)}, synchronize_session="fetch"
        )
        self.db.commit()
        self.db.refresh(notification)
        return notification
