"""
Access log middleware writing Apache combined format lines.
"""

import logging
from datetime import datetime

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from appserver.core.logging import ACCESS_LOGGER

CLF_DATE_FORMAT = "%d/%b/%Y:%H:%M:%S %z"


def format_combined(scope: Scope, status: int | None, content_length: str | None) -> str:
    """
    Format one request as an Apache combined log line.

    ``:remote-addr - :remote-user [:date] ":method :url HTTP/:version"
    :status :content-length ":referrer" ":user-agent"``
    """
    headers = Headers(scope=scope)
    client = scope.get("client")
    remote_addr = client[0] if client else "-"

    raw_path = scope.get("raw_path") or scope["path"].encode()
    url = raw_path.split(b"?", 1)[0].decode("latin-1")
    if scope.get("query_string"):
        url = f"{url}?{scope['query_string'].decode('latin-1')}"

    date = datetime.now().astimezone().strftime(CLF_DATE_FORMAT)
    referrer = headers.get("referer") or headers.get("referrer") or "-"
    user_agent = headers.get("user-agent", "-")

    return (
        f'{remote_addr} - - [{date}] "{scope["method"]} {url} '
        f'HTTP/{scope.get("http_version", "1.1")}" {status if status is not None else "-"} '
        f'{content_length or "-"} "{referrer}" "{user_agent}"'
    )


class AccessLogMiddleware:
    """Log one line per HTTP response once it has been sent."""

    def __init__(self, app: ASGIApp, logger_name: str = ACCESS_LOGGER) -> None:
        self.app = app
        self.logger = logging.getLogger(logger_name)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status: int | None = None
        content_length: str | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status, content_length
            if message["type"] == "http.response.start":
                status = message["status"]
                content_length = Headers(raw=message.get("headers", [])).get("content-length")
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            self.logger.info(format_combined(scope, status, content_length))
