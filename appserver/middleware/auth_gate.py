"""
Authentication gate for GET requests.
"""

from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

GATED_METHODS = ("GET", "HEAD")


class AuthGateMiddleware:
    """
    Stop unauthenticated GET/HEAD requests with an empty 401.

    Must run after ``AuthenticationMiddleware`` has populated ``scope["user"]``.
    Other methods pass through untouched.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in GATED_METHODS:
            await self.app(scope, receive, send)
            return

        user = scope.get("user")
        if user is None or not user.is_authenticated:
            response = Response(status_code=401)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
