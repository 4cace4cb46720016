"""Database models."""

from appserver.models.user import User

__all__ = ["User"]
