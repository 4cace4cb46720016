"""
Starlette authentication backend reading the user from the session.
"""

from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    BaseUser,
)
from starlette.requests import HTTPConnection

from appserver.auth.authenticator import SESSION_USER_KEY, Authenticator
from appserver.models.user import User


class SessionUser(BaseUser):
    """Authenticated request user backed by a ``User`` row."""

    def __init__(self, user: User) -> None:
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.user.username

    @property
    def identity(self) -> str:
        return str(self.user.id)


class SessionAuthBackend(AuthenticationBackend):
    """Deserialize the session user on every request."""

    def __init__(self, authenticator: Authenticator) -> None:
        self.authenticator = authenticator

    async def authenticate(
        self, conn: HTTPConnection
    ) -> tuple[AuthCredentials, BaseUser] | None:
        user_id = conn.session.get(SESSION_USER_KEY)
        if not user_id:
            return None

        user = await self.authenticator.deserialize_user(user_id)
        if user is None or not user.is_active:
            return None

        return AuthCredentials(["authenticated"]), SessionUser(user)
