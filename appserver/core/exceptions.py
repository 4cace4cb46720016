"""
Custom exceptions for the application server.

All exceptions inherit from a base exception for consistency.
"""

from typing import Any


class AppServerException(Exception):
    """Base exception for application server errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or "APP_ERROR"
        self.details = details or {}
        super().__init__(message)


class InvalidCredentialsException(AppServerException):
    """Raised when login credentials are invalid."""

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message, error_code="INVALID_CREDENTIALS")


class UserAlreadyExistsException(AppServerException):
    """Raised when attempting to create a user that already exists."""

    def __init__(self, message: str = "That username is already taken") -> None:
        super().__init__(message, error_code="USER_EXISTS")


class AccountLockedException(AppServerException):
    """Raised when an account is locked due to too many failed attempts."""

    def __init__(
        self,
        message: str = "Account is temporarily locked due to too many failed login attempts",
        lockout_minutes: int = 15,
    ) -> None:
        super().__init__(
            message,
            error_code="ACCOUNT_LOCKED",
            details={"lockout_minutes": lockout_minutes},
        )


class AccountDisabledException(AppServerException):
    """Raised when an account has been disabled."""

    def __init__(self, message: str = "Account has been disabled") -> None:
        super().__init__(message, error_code="ACCOUNT_DISABLED")


class UnknownStrategyException(AppServerException):
    """Raised when authenticating with a strategy name nobody registered."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unknown authentication strategy '{name}'",
            error_code="UNKNOWN_STRATEGY",
            details={"strategy": name},
        )


class SessionStoreClosedException(AppServerException):
    """Raised when the session store is used outside its init/destroy lifecycle."""

    def __init__(self, message: str = "Session store is not initialized") -> None:
        super().__init__(message, error_code="SESSION_STORE_CLOSED")
