"""
FastAPI dependencies for request-scoped services.
"""

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status

from appserver.auth.authenticator import Authenticator
from appserver.auth.backend import SessionUser
from appserver.db.session import Database
from appserver.models.user import User


def get_database(request: Request) -> Database:
    """Shared database handle opened at startup."""
    return request.app.state.database


def get_authenticator(request: Request) -> Authenticator:
    """
    Authenticator configured for this application.

    Raises:
        HTTPException: If the auth section is not configured
    """
    authenticator = getattr(request.app.state, "authenticator", None)
    if authenticator is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Authentication is not enabled",
        )
    return authenticator


def get_request_body(request: Request) -> dict[str, Any]:
    """Body parsed by ``BodyParserMiddleware``."""
    body = getattr(request.state, "body", None)
    return body if isinstance(body, dict) else {}


async def get_current_user(request: Request) -> User:
    """
    Get the user bound to the current session.

    Raises:
        HTTPException: If nobody is logged in
    """
    user = request.scope.get("user")
    if not isinstance(user, SessionUser):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user.user


# Type aliases for common dependencies
AuthenticatorDep = Annotated[Authenticator, Depends(get_authenticator)]
DatabaseDep = Annotated[Database, Depends(get_database)]
RequestBody = Annotated[dict[str, Any], Depends(get_request_body)]
CurrentUser = Annotated[User, Depends(get_current_user)]
