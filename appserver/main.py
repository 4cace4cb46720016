"""
FastAPI Application Factory.

Creates and configures the FastAPI application with all middleware and routes.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from appserver import __version__
from appserver.api import register_api
from appserver.api.auth import router as auth_router
from appserver.auth import Authenticator, LocalLogin, LocalSignup
from appserver.core.config import Settings, get_settings
from appserver.core.pipeline import build_pipeline
from appserver.core.sessions import SessionStore
from appserver.db.session import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Handles startup and shutdown events.
    """
    # Startup
    # Connection errors are logged inside connect() and do not stop startup.
    # A slow database keeps connecting in the background once the wait runs out.
    timeout = app.state.settings.database_startup_timeout
    connecting = asyncio.create_task(app.state.database.connect(), name="appserver-db-connect")
    app.state.database_connect = connecting
    done, _ = await asyncio.wait({connecting}, timeout=timeout)
    if not done:
        logger.warning("Database still connecting after %ss, serving without it", timeout)
    if app.state.session_store is not None:
        app.state.session_store.init()

    yield

    # Shutdown
    if app.state.session_store is not None:
        app.state.session_store.destroy()
    if not connecting.done():
        connecting.cancel()
        with suppress(asyncio.CancelledError):
            await connecting
    await app.state.database.dispose()


def create_application(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration snapshot, the cached environment settings if omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    database = Database(settings.database_url, echo=settings.debug)

    session_store: SessionStore | None = None
    authenticator: Authenticator | None = None
    if settings.auth is not None:
        session_store = SessionStore(settings.auth.keys, max_age=settings.auth.max_age)
        authenticator = (
            Authenticator(database)
            .use(LocalSignup(database, settings))
            .use(LocalLogin(database, settings))
        )

    pipeline = build_pipeline(settings, session_store, authenticator)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        middleware=[stage.middleware for stage in pipeline],
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.session_store = session_store
    app.state.authenticator = authenticator
    app.state.pipeline = pipeline

    if settings.auth is not None:
        app.include_router(auth_router, tags=["Authentication"])

    register_api(app)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )

        # Don't expose internal errors in production
        if settings.is_production:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"detail": "Internal server error"},
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc)},
        )

    logger.debug("Pipeline: %s", " -> ".join(stage.name for stage in pipeline))
    return app
