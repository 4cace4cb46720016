"""
Static asset middleware.

Serves files from a build directory when one matches the request path and
hands every other request to the next stage of the pipeline.
"""

from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send


class StaticAssetsMiddleware:
    """Serve ``directory`` for GET/HEAD requests, falling through on misses."""

    def __init__(self, app: ASGIApp, directory: str = "dist", html: bool = True) -> None:
        self.app = app
        self.directory = directory
        # The build directory may appear after startup
        self.static = StaticFiles(directory=directory, html=html, check_dir=False)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in ("GET", "HEAD"):
            await self.app(scope, receive, send)
            return

        try:
            response = await self.static.get_response(self.static.get_path(scope), scope)
        except HTTPException as exc:
            if exc.status_code in (404, 405):
                await self.app(scope, receive, send)
                return
            raise

        await response(scope, receive, send)
