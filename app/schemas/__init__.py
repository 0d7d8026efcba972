"""Pydantic schemas for request/response validation."""

from app.schemas.common import MessageResponse
from app.schemas.post import (
    PostCreate,
    PostUpdate,
    PostResponse,
    PostListResponse,
    PostCreatedResponse,
)
from app.schemas.comment import (
    CommentCreate,
    CommentUpdate,
    CommentResponse,
    CommentListResponse,
    CommentEnvelope,
)
from app.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    NotificationUpdate,
)
from app.schemas.user import (
    UserResponse,
    UserListResponse,
    UserUpdate,
    SessionUser,
    SessionInfo,
)

__all__ = [
    "MessageResponse",
    "PostCreate",
    "PostUpdate",
    "PostResponse",
    "PostListResponse",
    "PostCreatedResponse",
    "CommentCreate",
    "CommentUpdate",
    "CommentResponse",
    "CommentListResponse",
    "CommentEnvelope",
    "NotificationResponse",
    "NotificationListResponse",
    "NotificationUpdate",
    "UserResponse",
    "UserListResponse",
    "UserUpdate",
    "SessionUser",
    "SessionInfo",
]
