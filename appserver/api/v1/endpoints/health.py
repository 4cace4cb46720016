"""
Health check endpoints.
"""

from fastapi import APIRouter, Request

from appserver import __version__
from appserver.api.deps import DatabaseDep
from appserver.schemas.common import HealthResponse

router = APIRouter()


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the API is running and healthy.",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Returns basic service information.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=request.app.state.settings.app_env,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness Check",
    description="Check if the API is ready to accept requests.",
)
async def readiness_check(request: Request, database: DatabaseDep) -> HealthResponse:
    """
    Readiness check endpoint.

    Verifies database connectivity.
    """
    reachable = await database.ping()

    return HealthResponse(
        status="ready" if reachable else "degraded",
        version=__version__,
        environment=request.app.state.settings.app_env,
        database=reachable,
    )
