"""
Named strategy registry and session login/logout.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from starlette.authentication import UnauthenticatedUser
from starlette.requests import HTTPConnection

from appserver.auth.strategies import AuthResult, AuthStrategy
from appserver.core.exceptions import UnknownStrategyException
from appserver.core.sessions import rotate_session
from appserver.db.session import Database
from appserver.models.user import User
from appserver.services.user_service import UserService

logger = logging.getLogger(__name__)

# Session key holding the serialized user
SESSION_USER_KEY = "user_id"


class Authenticator:
    """Dispatches credentials to strategies and binds users to sessions."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self._strategies: dict[str, AuthStrategy] = {}

    def use(self, strategy: AuthStrategy, name: str | None = None) -> "Authenticator":
        """Register a strategy under ``name`` (defaults to ``strategy.name``)."""
        self._strategies[name or strategy.name] = strategy
        return self

    @property
    def strategies(self) -> tuple[str, ...]:
        return tuple(self._strategies)

    async def authenticate(self, name: str, credentials: Mapping[str, Any]) -> AuthResult:
        """
        Run the named strategy.

        Raises:
            UnknownStrategyException: If no strategy is registered under ``name``
        """
        try:
            strategy = self._strategies[name]
        except KeyError:
            raise UnknownStrategyException(name) from None
        return await strategy.authenticate(credentials)

    def login(self, conn: HTTPConnection, user: User) -> None:
        """Bind ``user`` to the current session under a freshly issued id."""
        from appserver.auth.backend import SessionUser

        rotate_session(conn.scope)
        conn.session[SESSION_USER_KEY] = self.serialize_user(user)
        conn.scope["user"] = SessionUser(user)
        logger.debug("User %s logged in", user.username)

    def logout(self, conn: HTTPConnection) -> None:
        """Clear the current session whether or not anyone was logged in."""
        conn.session.clear()
        conn.scope["user"] = UnauthenticatedUser()

    @staticmethod
    def serialize_user(user: User) -> str:
        return str(user.id)

    async def deserialize_user(self, user_id: str) -> User | None:
        """Load the session user, ``None`` for unknown or malformed ids."""
        try:
            key = uuid.UUID(user_id)
        except (TypeError, ValueError):
            return None

        async with self.database.session() as db:
            return await UserService(db).get_by_id(key)
