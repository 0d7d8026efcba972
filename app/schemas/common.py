"""Shared response schemas."""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgment envelope."""

    status: str = Field(default="success", description="Outcome, 'success' or 'error'")
    message: str = Field(..., description="Human-readable message")
