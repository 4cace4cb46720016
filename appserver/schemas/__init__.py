"""Pydantic schemas for request/response validation."""

from appserver.schemas.auth import AuthInfo, Credentials
from appserver.schemas.common import HealthResponse, MessageResponse, SuccessResponse
from appserver.schemas.user import UserResponse

__all__ = [
    # Auth
    "AuthInfo",
    "Credentials",
    # User
    "UserResponse",
    # Common
    "HealthResponse",
    "MessageResponse",
    "SuccessResponse",
]
