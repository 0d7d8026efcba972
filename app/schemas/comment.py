"""Pydantic schemas for comment endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Schema for creating a comment."""

    post_id: str = Field(..., description="Post being commented on")
    content: str = Field(..., description="Comment text")


class CommentUpdate(BaseModel):
    """Schema for editing a comment."""

    content: str = Field(..., description="New comment text")


class CommentResponse(BaseModel):
    """Schema for a comment with its author's public details."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    user_id: Optional[str] = None
    content: str
    created_at: datetime
    updated_at: datetime
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_picture: Optional[str] = None


class CommentListResponse(BaseModel):
    status: str = "success"
    count: int
    comments: list[CommentResponse]


class CommentEnvelope(BaseModel):
    status: str = "success"
    message: str
    comment: CommentResponse
