"""Pydantic schemas for users and sessions."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique user identifier")
    external_id: Optional[str] = Field(default=None, description="Google account subject")
    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(default=None, description="Display name")
    picture: Optional[str] = Field(default=None, description="Avatar URL")
    phone: Optional[str] = Field(default=None, description="Phone number")
    role: Optional[str] = Field(default=None, description="'user', 'admin' or unset")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime
    last_login_at: Optional[datetime] = None


class UserListResponse(BaseModel):
    status: str = "success"
    count: int
    users: list[UserResponse]


class UserUpdate(BaseModel):
    """
    Schema for a profile update.

    ``email`` and ``role`` are honoured for admins only.
    """

    name: Optional[str] = Field(default=None, max_length=255)
    picture: Optional[str] = Field(default=None, max_length=2048)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None


class SessionUser(BaseModel):
    id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class SessionInfo(BaseModel):
    """Schema for the session introspection endpoint."""

    status: str = "success"
    logged_in: bool
    user: Optional[SessionUser] = None
