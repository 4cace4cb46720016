"""
Common response schemas used across the application.
"""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Generic message response."""

    success: bool = Field(default=True, description="Whether the operation was successful")
    message: str = Field(..., description="Response message")


class SuccessResponse(BaseModel):
    """Bare success flag."""

    success: bool = Field(default=True, description="Whether the operation was successful")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy", description="Service status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Current environment")
    database: bool | None = Field(default=None, description="Database reachability")
