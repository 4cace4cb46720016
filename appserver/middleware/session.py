"""
Session middleware backed by an explicit ``SessionStore``.

Exposes the session as ``request.session``. Modified sessions are saved and
their cookie refreshed; cleared sessions are deleted from the store and the
cookie is expired. A session marked for rotation moves to a fresh id and the
old id stops resolving.
"""

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from appserver.core.sessions import ROTATE_SCOPE_KEY, SessionStore


class SessionMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        cookie_name: str = "appserver.sess",
        path: str = "/",
        same_site: str = "lax",
        https_only: bool = False,
    ) -> None:
        self.app = app
        self.store = store
        self.cookie_name = cookie_name
        self.path = path
        self.security_flags = f"httponly; samesite={same_site}"
        if https_only:
            self.security_flags += "; secure"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        loaded = self.store.load(connection.cookies.get(self.cookie_name))
        session_id, initial = loaded if loaded else (None, {})
        scope["session"] = dict(initial)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                session = scope["session"]
                headers = MutableHeaders(scope=message)
                rotate = scope.get(ROTATE_SCOPE_KEY, False)
                if session:
                    if rotate or session_id is None or session != initial:
                        if rotate and session_id is not None:
                            self.store.delete(session_id)
                        keep = session_id if session_id is not None and not rotate else None
                        cookie = self.store.save(keep or self.store.new_id(), session)
                        headers.append("Set-Cookie", self._cookie(cookie, self.store.max_age))
                elif session_id is not None:
                    self.store.delete(session_id)
                    headers.append("Set-Cookie", self._cookie("null", 0))
            await send(message)

        await self.app(scope, receive, send_wrapper)

    def _cookie(self, value: str, max_age: int) -> str:
        header = f"{self.cookie_name}={value}; path={self.path}; Max-Age={max_age}; {self.security_flags}"
        if max_age == 0:
            header += "; expires=Thu, 01 Jan 1970 00:00:00 GMT"
        return header
