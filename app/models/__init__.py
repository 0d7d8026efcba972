"""Database models."""

from app.models.user import User, UserRole
from app.models.session import AuthSession
from app.models.post import Post, PostType, ApprovalStatus
from app.models.comment import Comment
from app.models.notification import Notification, NotificationKind

__all__ = [
    "User",
    "UserRole",
    "AuthSession",
    "Post",
    "PostType",
    "ApprovalStatus",
    "Comment",
    "Notification",
    "NotificationKind",
]
