"""
Declarative request pipeline.

``build_pipeline`` turns a settings snapshot into the ordered middleware
stages of the application. Order matters and is fixed:

    access_log -> cors -> static -> body_parser -> session ->
    authentication -> auth_gate -> static_fallback -> routes

Stages switched off by configuration are left out; the rest keep their
relative order. The result is a tuple and is never modified afterwards.
"""

from dataclasses import dataclass

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware import Middleware
from starlette.middleware.authentication import AuthenticationMiddleware

from appserver.auth.authenticator import Authenticator
from appserver.auth.backend import SessionAuthBackend
from appserver.core.config import Settings
from appserver.core.sessions import SessionStore
from appserver.middleware import (
    AccessLogMiddleware,
    AuthGateMiddleware,
    BodyParserMiddleware,
    SessionMiddleware,
    StaticAssetsMiddleware,
)


@dataclass(frozen=True)
class Stage:
    """One named middleware stage."""

    name: str
    middleware: Middleware


def _cors_stage(settings: Settings) -> Stage:
    origins = settings.cors_origins_list
    # Reflect any origin so credentials stay allowed
    if "*" in origins:
        options = {"allow_origin_regex": ".*"}
    else:
        options = {"allow_origins": origins}

    return Stage(
        "cors",
        Middleware(
            CORSMiddleware,
            allow_credentials=True,
            allow_methods=["GET", "HEAD", "PUT", "POST", "DELETE", "PATCH"],
            allow_headers=["*"],
            **options,
        ),
    )


def build_pipeline(
    settings: Settings,
    session_store: SessionStore | None = None,
    authenticator: Authenticator | None = None,
) -> tuple[Stage, ...]:
    """
    Build the ordered middleware stages for ``settings``.

    Args:
        settings: Configuration snapshot
        session_store: Required when the auth section is configured
        authenticator: Required when the auth section is configured

    Returns:
        Immutable tuple of stages, outermost first
    """
    stages = [Stage("access_log", Middleware(AccessLogMiddleware))]

    if settings.cors:
        stages.append(_cors_stage(settings))

    if settings.serve_static:
        stages.append(
            Stage("static", Middleware(StaticAssetsMiddleware, directory=settings.static_dir))
        )

    stages.append(
        Stage(
            "body_parser",
            Middleware(BodyParserMiddleware, max_body_size=settings.max_body_size),
        )
    )

    if settings.auth is not None:
        if session_store is None or authenticator is None:
            raise ValueError("auth is configured but no session store or authenticator was given")
        stages += [
            Stage(
                "session",
                Middleware(
                    SessionMiddleware,
                    store=session_store,
                    cookie_name=settings.auth.cookie_name,
                    https_only=settings.auth.https_only,
                ),
            ),
            Stage(
                "authentication",
                Middleware(AuthenticationMiddleware, backend=SessionAuthBackend(authenticator)),
            ),
            Stage("auth_gate", Middleware(AuthGateMiddleware)),
        ]

    stages.append(
        Stage(
            "static_fallback",
            Middleware(StaticAssetsMiddleware, directory=settings.static_dir),
        )
    )

    return tuple(stages)
