"""HTTP API assembly."""

from fastapi import FastAPI

from appserver.api.v1.router import api_router


def register_api(app: FastAPI) -> None:
    """Mount every API route not owned by the bootstrap itself."""
    app.include_router(api_router, prefix="/api/v1")
