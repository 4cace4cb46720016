"""
Session authentication endpoints.

Registered at the application root only when the auth section is configured.
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from appserver.api.deps import AuthenticatorDep, RequestBody
from appserver.schemas.common import MessageResponse, SuccessResponse

router = APIRouter()


@router.post(
    "/register",
    summary="Register new user",
    description="Create an account and log it in.",
)
async def register(
    request: Request,
    body: RequestBody,
    authenticator: AuthenticatorDep,
) -> JSONResponse:
    """
    Register with the ``local-signup`` strategy.

    Both outcomes answer with the strategy's info payload; only the status
    code tells them apart.
    """
    result = await authenticator.authenticate("local-signup", body)

    if not result.ok:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=result.info)

    authenticator.login(request, result.user)
    return JSONResponse(content=result.info)


@router.post(
    "/login",
    summary="Login",
    description="Authenticate with username and password and start a session.",
)
async def login(
    request: Request,
    body: RequestBody,
    authenticator: AuthenticatorDep,
) -> JSONResponse:
    """Login with the ``local-login`` strategy."""
    result = await authenticator.authenticate("local-login", body)

    if not result.ok:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=result.info)

    authenticator.login(request, result.user)
    return JSONResponse(content=SuccessResponse().model_dump())


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="End the current session.",
)
async def logout(
    request: Request,
    authenticator: AuthenticatorDep,
) -> MessageResponse:
    authenticator.logout(request)
    return MessageResponse(message="Successfully logged out")
