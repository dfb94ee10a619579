"""
FastAPI dependencies for authentication and authorization.

get_current_identity is the access guard for identity-scoped routes.
Ownership (path email == token email) is checked by each handler with
ensure_owner, since only the handler knows which parameter names the owner.
"""

from typing import Optional
from fastapi import Cookie, Request

from app.core.config import settings
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import verify_token
from app.schemas.auth import TokenIdentity


def get_current_identity(
    request: Request,
    token: Optional[str] = Cookie(None, alias=settings.TOKEN_COOKIE_NAME),
) -> TokenIdentity:
    """
    Extract and validate the caller's identity from the session cookie.

    Raises:
        UnauthorizedError 401: If the cookie is missing or the token is invalid
    """
    if not token:
        raise UnauthorizedError()

    identity = verify_token(token)
    request.state.identity = identity
    return identity


def ensure_owner(identity: TokenIdentity, email: str) -> None:
    """
    Require that the authenticated user is the owner named in the path.

    Raises:
        ForbiddenError 403: If the emails differ
    """
    if identity.email.strip().lower() != email.strip().lower():
        raise ForbiddenError()
