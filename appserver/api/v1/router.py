"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from appserver.api.v1.endpoints import health, users

api_router = APIRouter()

# Include routers
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["Health"],
)
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
)
