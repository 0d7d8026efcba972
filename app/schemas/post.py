"""Pydantic schemas for post endpoints."""

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.post import PostType

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _clean_photo_ids(value: Optional[list[Any]]) -> Optional[list[str]]:
    if value is None:
        return None
    return [item for item in value if isinstance(item, str) and item.strip()]


def _check_date(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if not DATE_PATTERN.match(value):
        raise ValueError("Date found must be in YYYY-MM-DD format")
    return value


class PostCreate(BaseModel):
    """Schema for creating a post."""

    title: Optional[str] = Field(default=None, max_length=255, description="Defaults to item_name")
    post_type: PostType = Field(..., description="'lost' or 'found'")
    item_name: str = Field(..., min_length=1, max_length=255, description="Name of the item")
    description: Optional[str] = Field(default=None, description="Short description")
    content: Optional[str] = Field(default=None, description="Long-form body")
    location_found: Optional[str] = Field(default=None, max_length=255)
    current_location: Optional[str] = Field(default=None, max_length=255)
    date_found: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    tags: Optional[list[str]] = Field(default=None)
    photo_ids: Optional[list[Any]] = Field(default=None, description="Uploaded photo references")

    strip_text = field_validator(
        "title", "item_name", "description", "content",
        "location_found", "current_location", "date_found",
        mode="before",
    )(_strip)

    @field_validator("title")
    @classmethod
    def blank_title_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("date_found")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return _check_date(v)

    @field_validator("photo_ids")
    @classmethod
    def validate_photo_ids(cls, v: Optional[list[Any]]) -> Optional[list[str]]:
        return _clean_photo_ids(v)


class PostUpdate(BaseModel):
    """Schema for a partial post update."""

    title: Optional[str] = Field(default=None, max_length=255)
    post_type: Optional[PostType] = None
    item_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    location_found: Optional[str] = Field(default=None, max_length=255)
    current_location: Optional[str] = Field(default=None, max_length=255)
    date_found: Optional[str] = None
    tags: Optional[list[str]] = None
    photo_ids: Optional[list[Any]] = None
    admin_approval_status: Optional[str] = Field(
        default=None,
        description="'pending', 'approved' or 'rejected' (admins only)",
    )

    strip_text = field_validator(
        "title", "item_name", "description", "content",
        "location_found", "current_location", "date_found",
        mode="before",
    )(_strip)

    @field_validator("date_found")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return _check_date(v)

    @field_validator("photo_ids")
    @classmethod
    def validate_photo_ids(cls, v: Optional[list[Any]]) -> Optional[list[str]]:
        return _clean_photo_ids(v)


class PostResponse(BaseModel):
    """Schema for a stored post."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    title: str
    post_type: PostType
    item_name: str
    description: str = ""
    content: str = ""
    location_found: Optional[str] = None
    current_location: Optional[str] = None
    date_found: Optional[str] = None
    tags: Optional[list[str]] = None
    photo_ids: Optional[list[str]] = None
    admin_approval_status: str
    created_at: datetime
    updated_at: datetime


class PostListResponse(BaseModel):
    """Schema for the post listing."""

    status: str = "success"
    count: int
    posts: list[PostResponse]


class PostCreatedResponse(BaseModel):
    """Schema returned after creating a post."""

    status: str = "success"
    message: str = "Post created successfully"
    id: str
    admin_approval_status: str
