"""Business logic services."""

from appserver.services.user_service import UserService

__all__ = ["UserService"]
