"""
Session token endpoints for API v1.

``POST /jwt`` issues a signed token for an email and stores it in an
HttpOnly cookie so browser clients are authenticated on subsequent
requests; ``POST /logout`` clears that cookie.

When an identity provider is configured the caller must prove the
email by presenting a provider-issued bearer token for it.  Without a
provider (local development) any well-formed email is accepted.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from edu_learn_api.app.core.identity import get_identity_provider
from edu_learn_api.app.core.security import (
    clear_auth_cookie,
    create_access_token,
    emails_match,
    security,
    set_auth_cookie,
    verify_provider_token,
)
from edu_learn_api.app.schemas.auth import LogoutResponse, TokenRequest, TokenResponse


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/jwt", response_model=TokenResponse)
def issue_token(
    body: TokenRequest,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenResponse:
    """Issue a session token for ``email`` and set it as a cookie."""
    email = body.email.lower()
    if get_identity_provider() is not None:
        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Identity provider token required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        claims = verify_provider_token(credentials.credentials)
        if not claims:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid identity provider token",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not emails_match(claims["email"], email):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden access")
    token = create_access_token({"email": email})
    set_auth_cookie(response, token)
    logger.info("Issued session token for %s", email)
    return TokenResponse(access_token=token)


@router.post("/logout", response_model=LogoutResponse)
def logout(response: Response) -> LogoutResponse:
    """Clear the session cookie."""
    clear_auth_cookie(response)
    return LogoutResponse()
