"""
Session token utilities.

Implements stateless cookie sessions: a JWT (HS256) carrying the user's
email, valid for TOKEN_EXPIRE_DAYS, stored in an HTTP-only cookie. No
server-side session record exists, so a token stays valid until it
expires even after the cookie is cleared.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Response
from jose import JWTError, jwt

from app.core.config import settings
from app.core.exceptions import UnauthorizedError
from app.schemas.auth import TokenIdentity

logger = logging.getLogger(__name__)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed session token.

    Args:
        data: Identity claims to encode (must contain "email")
        expires_delta: Optional lifetime (default: TOKEN_EXPIRE_DAYS)

    Returns:
        Encoded JWT token as a string
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.TOKEN_EXPIRE_DAYS))

    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Raises:
        JWTError: If token is malformed, badly signed or expired
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def verify_token(token: Optional[str]) -> TokenIdentity:
    """
    Verify a session token and return the identity it carries.

    Raises:
        UnauthorizedError: If the token is absent, invalid, expired or has no email
    """
    if not token:
        raise UnauthorizedError()

    try:
        payload = decode_token(token)
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        raise UnauthorizedError(context={"reason": str(e)})

    email = payload.get("email")
    if not isinstance(email, str) or not email:
        raise UnauthorizedError(context={"reason": "token carries no email"})

    return TokenIdentity(email=email, claims=payload)


def cookie_options() -> Dict[str, Any]:
    """
    Cookie attributes for the session cookie.

    Production serves the frontend from another site, so the cookie must
    be SameSite=None and therefore Secure. Development stays Strict.
    """
    production = settings.is_production
    return {
        "httponly": True,
        "secure": production,
        "samesite": "none" if production else "strict",
    }


def set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        value=token,
        max_age=int(timedelta(days=settings.TOKEN_EXPIRE_DAYS).total_seconds()),
        **cookie_options(),
    )


def clear_token_cookie(response: Response) -> None:
    """Expire the session cookie on the client (Max-Age=0)."""
    response.set_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        value="",
        max_age=0,
        **cookie_options(),
    )
