"""Strategy-based session authentication."""

from appserver.auth.authenticator import SESSION_USER_KEY, Authenticator
from appserver.auth.backend import SessionAuthBackend, SessionUser
from appserver.auth.strategies import AuthResult, AuthStrategy, LocalLogin, LocalSignup

__all__ = [
    "SESSION_USER_KEY",
    "Authenticator",
    "AuthResult",
    "AuthStrategy",
    "LocalLogin",
    "LocalSignup",
    "SessionAuthBackend",
    "SessionUser",
]
