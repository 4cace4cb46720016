"""
Request body parsing middleware.

Parses JSON and form bodies once and exposes the result as
``request.state.body`` (an empty dict when there is nothing to parse).
"""

import json

from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")


class BodyParserMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request body parsing and size validation.
    """

    def __init__(self, app: ASGIApp, max_body_size: int = 1024 * 1024) -> None:
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request.state.body = {}

        if request.method not in BODY_METHODS:
            return await call_next(request)

        # Check content length
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > self.max_body_size:
                    return _error(413, "Request body too large")
            except ValueError:
                return _error(400, "Invalid Content-Length header")

        content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

        is_json = content_type == "application/json" or content_type.endswith("+json")
        if not is_json and content_type not in FORM_TYPES:
            return await call_next(request)

        # Chunked bodies carry no Content-Length, so measure what was received
        raw = await request.body()
        if len(raw) > self.max_body_size:
            return _error(413, "Request body too large")

        if is_json:
            if raw.strip():
                try:
                    request.state.body = json.loads(raw)
                except (UnicodeDecodeError, ValueError):
                    return _error(400, "Malformed JSON body")
        else:
            try:
                form = await request.form()
            except HTTPException as exc:
                return _error(400, exc.detail)
            request.state.body = {key: value for key, value in form.items()}

        return await call_next(request)


def _error(status_code: int, detail: str) -> Response:
    return JSONResponse(status_code=status_code, content={"detail": detail})
