"""
Pluggable credential strategies.

A strategy never raises for bad credentials: it returns a failed
``AuthResult`` carrying an info payload for the client. Exceptions are
reserved for real errors (database down, bugs) and propagate to the caller.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from appserver.core.config import Settings
from appserver.core.exceptions import (
    AccountDisabledException,
    AccountLockedException,
    AppServerException,
    InvalidCredentialsException,
    UserAlreadyExistsException,
)
from appserver.core.security import DUMMY_HASH, verify_password
from appserver.db.session import Database
from appserver.models.user import User
from appserver.schemas.auth import AuthInfo, Credentials
from appserver.services.user_service import UserService

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = AuthInfo(success=False, message="Missing credentials")
REGISTERED = AuthInfo(success=True, message="Successfully registered")


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a strategy: a user on success, none on failure."""

    user: User | None
    info: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.user is not None

    @classmethod
    def success(cls, user: User, info: AuthInfo | None = None) -> "AuthResult":
        return cls(user=user, info=info.model_dump() if info else None)

    @classmethod
    def failure(cls, info: AuthInfo) -> "AuthResult":
        return cls(user=None, info=info.model_dump())


class AuthStrategy(ABC):
    """Credential verification algorithm registered under a name."""

    name: str

    @abstractmethod
    async def authenticate(self, credentials: Mapping[str, Any]) -> AuthResult:
        """Verify the credentials taken from the request body."""


def parse_credentials(credentials: Mapping[str, Any]) -> Credentials | None:
    try:
        return Credentials.model_validate(credentials)
    except ValidationError:
        return None


class LocalSignup(AuthStrategy):
    """Create an account from a username/password pair."""

    name = "local-signup"

    def __init__(self, database: Database, settings: Settings) -> None:
        self.database = database
        self.password_min_length = settings.password_min_length

    async def authenticate(self, credentials: Mapping[str, Any]) -> AuthResult:
        creds = parse_credentials(credentials)
        if creds is None:
            return AuthResult.failure(MISSING_CREDENTIALS)
        if len(creds.password) < self.password_min_length:
            return AuthResult.failure(
                AuthInfo(
                    success=False,
                    message=f"Password must be at least {self.password_min_length} characters",
                )
            )

        async with self.database.session() as db:
            user_service = UserService(db)
            try:
                user = await user_service.create(creds.username, creds.password)
            except UserAlreadyExistsException as e:
                return AuthResult.failure(AuthInfo(success=False, message=e.message))
            await user_service.record_login(user)

        logger.info("Registered user %s", user.username)
        return AuthResult.success(user, REGISTERED)


class LocalLogin(AuthStrategy):
    """Check a username/password pair against the stored Argon2 hash."""

    name = "local-login"

    def __init__(self, database: Database, settings: Settings) -> None:
        self.database = database
        self.max_login_attempts = settings.max_login_attempts
        self.lockout_minutes = settings.lockout_duration_minutes

    async def authenticate(self, credentials: Mapping[str, Any]) -> AuthResult:
        creds = parse_credentials(credentials)
        if creds is None:
            return AuthResult.failure(MISSING_CREDENTIALS)

        async with self.database.session() as db:
            user_service = UserService(db)
            user = await user_service.get_by_username(creds.username)

            if not user:
                # Hash anyway so unknown usernames cost the same as bad passwords
                verify_password(creds.password, DUMMY_HASH)
                return self._reject(InvalidCredentialsException())

            if user.is_locked:
                return self._reject(
                    AccountLockedException(lockout_minutes=self.lockout_minutes)
                )

            if not user.is_active:
                return self._reject(AccountDisabledException())

            if not verify_password(creds.password, user.hashed_password):
                await user_service.record_failed_login(
                    user,
                    max_attempts=self.max_login_attempts,
                    lockout_minutes=self.lockout_minutes,
                )
                return self._reject(InvalidCredentialsException())

            await user_service.record_login(user)

        return AuthResult.success(user)

    @staticmethod
    def _reject(exc: AppServerException) -> AuthResult:
        logger.debug("Login rejected: %s", exc.error_code)
        return AuthResult.failure(AuthInfo(success=False, message=exc.message))
