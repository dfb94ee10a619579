"""
Session endpoints.

- POST /jwt: sign the posted identity and set it as the `token` cookie
- GET /logout: clear the cookie

Sessions are stateless: logging out only removes the cookie from this
browser; a copied token stays valid until it expires.
"""

import logging
from fastapi import APIRouter, Response

from app.core.security import clear_token_cookie, create_access_token, set_token_cookie
from app.schemas.auth import TokenRequest
from app.schemas.common import AckResponse

router = APIRouter(tags=["Authentication"])
logger = logging.getLogger(__name__)


@router.post("/jwt", response_model=AckResponse)
def issue_token(request: TokenRequest, response: Response):
    """
    Issue a session token for the posted identity.

    The body must contain an email; any other fields become extra claims.
    """
    token = create_access_token(request.model_dump(mode="json"))
    set_token_cookie(response, token)
    logger.info(f"Issued session token for {request.email}")
    return AckResponse()


@router.get("/logout", response_model=AckResponse)
def logout(response: Response):
    """Clear the session cookie."""
    clear_token_cookie(response)
    return AckResponse()
