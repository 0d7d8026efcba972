"""Pydantic schemas for notification endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationResponse(BaseModel):
    """Schema for a single notification."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    post_id: Optional[str] = None
    kind: str
    message: str
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    status: str = "success"
    count: int
    unread_count: int
    notifications: list[NotificationResponse]


class NotificationUpdate(BaseModel):
    """Schema for marking a notification read or unread."""

    is_read: Optional[bool] = Field(default=None, description="New read flag")
