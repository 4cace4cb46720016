"""
User schemas for user data transfer objects.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """User response schema (public data)."""

    id: uuid.UUID = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    is_active: bool = Field(..., description="Whether the user account is active")
    created_at: datetime | None = Field(default=None, description="Account creation timestamp")
    last_login: datetime | None = Field(default=None, description="Last login timestamp")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "username": "alice",
                "is_active": True,
                "created_at": "2024-01-15T10:30:00Z",
                "last_login": "2024-01-15T12:00:00Z",
            }
        }
