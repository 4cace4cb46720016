"""
User endpoints.
"""

from fastapi import APIRouter

from appserver.api.deps import CurrentUser
from appserver.schemas.user import UserResponse

router = APIRouter()


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get the profile of the user bound to the current session.",
)
async def get_current_user_profile(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)
