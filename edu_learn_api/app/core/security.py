"""
Security helpers for JWT authentication and email-based authorization.

Tokens are compact JSON Web Tokens signed with HMAC-SHA256 and
base64url encoded.  They embed the user's ``email`` claim and an
expiration timestamp (``exp``).  The secret key from the application
settings signs and verifies them.

A request is authenticated by the session cookie set by ``POST /jwt``
or, failing that, by an ``Authorization: Bearer`` header.  Bearer
tokens not signed by this server are handed to the external identity
provider when one is configured (see ``core.identity``).

Authorization in this API is ownership based: a caller may only read
or modify enrollments and instructor data that belong to the email in
their token.  ``require_email_match`` enforces that rule.
"""

import base64
import json
import time
import hmac
import hashlib
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .identity import get_identity_provider


logger = logging.getLogger(__name__)


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Create a signed JWT token with the given payload.

    The payload is extended with ``iat`` and ``exp`` fields (UNIX
    timestamps).  The token has the form ``header.payload.signature``
    with each part base64url encoded.

    Parameters
    ----------
    data : dict
        Claims to embed in the token, e.g. ``{"email": "ann@example.com"}``.
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        A signed JWT token.
    """
    to_encode = data.copy()
    now = int(time.time())
    exp_seconds = expires_delta or settings.access_token_expire_minutes * 60
    to_encode["iat"] = now
    to_encode["exp"] = now + exp_seconds
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT token.

    Checks the header algorithm, the HMAC signature and the ``exp``
    field.  Returns the payload dictionary when valid, otherwise
    ``None``.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    try:
        header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
        actual_sig = _b64_url_decode(signature_b64)
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(header, dict) or header.get("alg") != "HS256":
        return None
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, settings.secret_key)
    # Constant-time comparison
    if not hmac.compare_digest(expected_sig, actual_sig):
        return None
    if not isinstance(data, dict):
        return None
    try:
        if data.get("exp") is None or int(data["exp"]) < int(time.time()):
            return None
    except (TypeError, ValueError):
        return None
    return data


def set_auth_cookie(response, token: str) -> None:
    """Attach the session cookie carrying ``token`` to ``response``."""
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def clear_auth_cookie(response) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_provider_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify ``token`` with the identity provider, if one is configured."""
    provider = get_identity_provider()
    if provider is None:
        return None
    claims = provider.verify_token(token)
    if claims is None:
        return None
    return {"email": claims["email"], "provider": True}


security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency that resolves the authenticated caller.

    The session cookie is consulted first, then the bearer header.
    Raises HTTP 401 if no token is present or if it cannot be
    verified.  On success returns the token claims; ``email`` is always
    present.
    """
    cookie_token = request.cookies.get(settings.cookie_name)
    if cookie_token:
        payload = decode_access_token(cookie_token)
        if payload and payload.get("email"):
            return payload
        if credentials is None:
            raise _unauthorized("Invalid or expired token")

    if credentials is None:
        raise _unauthorized("Not authenticated")

    token = credentials.credentials
    payload = decode_access_token(token)
    if payload and payload.get("email"):
        return payload
    payload = verify_provider_token(token)
    if payload:
        return payload
    raise _unauthorized("Invalid or expired token")


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Dict[str, Any]]:
    """Resolve the caller if possible, otherwise return ``None``.

    Never raises: an expired cookie or an unverifiable bearer token is
    treated the same as no credentials at all.
    """
    cookie_token = request.cookies.get(settings.cookie_name)
    if cookie_token:
        payload = decode_access_token(cookie_token)
        if payload and payload.get("email"):
            return payload
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    if payload and payload.get("email"):
        return payload
    return verify_provider_token(credentials.credentials)


def emails_match(first: Optional[str], second: Optional[str]) -> bool:
    if not first or not second:
        return False
    return first.strip().lower() == second.strip().lower()


def require_email_match(email: Optional[str], current_user: Dict[str, Any]) -> None:
    """Raise HTTP 403 unless ``email`` is the caller's own email."""
    if not emails_match(email, current_user.get("email")):
        logger.warning(
            "Forbidden: token email %s requested data of %s",
            current_user.get("email"),
            email,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden access")
