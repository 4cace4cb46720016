"""
Authentication schemas for the local strategies.
"""

from pydantic import BaseModel, Field, field_validator


class Credentials(BaseModel):
    """Username/password pair read from the parsed request body."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, description="Password")

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        """Usernames are matched case-insensitively."""
        v = v.strip().lower()
        if not v:
            raise ValueError("Username must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "username": "alice",
                "password": "SecureP@ssw0rd!",
            }
        }


class AuthInfo(BaseModel):
    """Info payload a strategy reports alongside its result."""

    success: bool = Field(..., description="Whether the strategy accepted the credentials")
    message: str = Field(..., description="Human readable outcome")
