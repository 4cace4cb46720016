"""ASGI middleware making up the request pipeline."""

from appserver.middleware.access_log import AccessLogMiddleware
from appserver.middleware.auth_gate import AuthGateMiddleware
from appserver.middleware.body_parser import BodyParserMiddleware
from appserver.middleware.session import SessionMiddleware
from appserver.middleware.static import StaticAssetsMiddleware

__all__ = [
    "AccessLogMiddleware",
    "AuthGateMiddleware",
    "BodyParserMiddleware",
    "SessionMiddleware",
    "StaticAssetsMiddleware",
]
