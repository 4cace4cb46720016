"""
Server-side session store with signed session-id cookies.

Session data stays in process memory; the cookie only carries a random id
signed with itsdangerous. Signing keys rotate the way the config lists them:
the first key signs new cookies, every key still verifies old ones.
"""

import logging
import secrets
import time
from collections.abc import MutableMapping
from typing import Any

from itsdangerous import BadSignature, URLSafeTimedSerializer

from appserver.core.exceptions import SessionStoreClosedException

logger = logging.getLogger(__name__)

SESSION_SALT = "appserver.session"

# Scope flag asking the session middleware to move the session to a fresh id
ROTATE_SCOPE_KEY = "appserver.session.rotate"

# Upper bound between two sweeps of expired entries, in seconds
SWEEP_INTERVAL = 60


def rotate_session(scope: MutableMapping[str, Any]) -> None:
    """Mark the request so its session is saved under a new id."""
    scope[ROTATE_SCOPE_KEY] = True


class SessionStore:
    """In-memory session data keyed by signed session ids."""

    def __init__(self, keys: list[str], max_age: int = 86400) -> None:
        if not keys:
            raise ValueError("At least one session key is required")
        # itsdangerous signs with the last key and verifies with all of them
        self._serializer = URLSafeTimedSerializer(list(reversed(keys)), salt=SESSION_SALT)
        self.max_age = max_age
        self._sessions: dict[str, tuple[float, dict[str, Any]]] | None = None
        self._next_sweep = 0.0

    @property
    def is_open(self) -> bool:
        return self._sessions is not None

    def init(self) -> None:
        """Start with an empty store. Called on application startup."""
        self._sessions = {}
        self._next_sweep = time.time() + min(self.max_age, SWEEP_INTERVAL)
        logger.debug("Session store initialized")

    def destroy(self) -> None:
        """Drop every session. Called on application shutdown."""
        if self._sessions is not None:
            logger.debug("Session store destroyed with %d live sessions", len(self._sessions))
        self._sessions = None

    def _require_open(self) -> dict[str, tuple[float, dict[str, Any]]]:
        if self._sessions is None:
            raise SessionStoreClosedException()
        return self._sessions

    def new_id(self) -> str:
        return secrets.token_urlsafe(32)

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, cookie: str) -> str | None:
        """Return the session id in ``cookie``, ``None`` if tampered or expired."""
        try:
            return self._serializer.loads(cookie, max_age=self.max_age)
        except BadSignature:
            return None

    def load(self, cookie: str | None) -> tuple[str, dict[str, Any]] | None:
        """
        Resolve a cookie value to its session.

        Returns:
            Tuple of (session id, copy of the session data), or None
        """
        if not cookie:
            return None
        session_id = self.unsign(cookie)
        if session_id is None:
            return None

        sessions = self._require_open()
        entry = sessions.get(session_id)
        if entry is None:
            return None

        expires_at, data = entry
        if expires_at <= time.time():
            del sessions[session_id]
            return None
        return session_id, dict(data)

    def save(self, session_id: str, data: dict[str, Any]) -> str:
        """
        Store ``data`` under ``session_id``.

        Returns:
            Signed cookie value for the session
        """
        sessions = self._require_open()
        now = time.time()
        if now >= self._next_sweep:
            self.sweep(now)
        sessions[session_id] = (now + self.max_age, dict(data))
        return self.sign(session_id)

    def sweep(self, now: float | None = None) -> int:
        """
        Drop every expired session.

        Runs from ``save()`` at most once per sweep interval so abandoned
        sessions do not pile up.

        Returns:
            Number of sessions removed
        """
        sessions = self._require_open()
        now = time.time() if now is None else now
        expired = [sid for sid, (expires_at, _) in sessions.items() if expires_at <= now]
        for sid in expired:
            del sessions[sid]
        self._next_sweep = now + min(self.max_age, SWEEP_INTERVAL)
        if expired:
            logger.debug("Swept %d expired sessions", len(expired))
        return len(expired)

    def delete(self, session_id: str) -> None:
        self._require_open().pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions or {})
