"""
Client for an external identity provider.

Browser clients usually sign in with a hosted identity provider and
then present the provider-issued ID token to this API.  Rather than
handling the provider's key rotation ourselves, the token is sent to
the provider's token-info endpoint, which answers with the token's
claims when it is valid and with an error status otherwise.  Only the
``email`` claim (and optionally ``aud``) is used by the API.

The client uses the ``requests`` library.  A custom session can be
injected, which keeps the network out of unit tests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config import settings


logger = logging.getLogger(__name__)


class IdentityProviderClient:
    """Verify bearer tokens issued by an external identity provider."""

    def __init__(
        self,
        tokeninfo_url: str,
        audience: Optional[str] = None,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.tokeninfo_url = tokeninfo_url
        self.audience = audience or None
        self.timeout = timeout
        self.session = session or requests.Session()

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the token's claims, or ``None`` if the provider rejects it.

        A token is accepted only when the provider answers with a 2xx
        status, the payload contains an ``email`` claim, the email is not
        explicitly flagged as unverified, and (if configured) the
        audience matches.  Network failures are logged and treated as a
        rejection so the caller answers 401 rather than 500.
        """
        try:
            response = self.session.get(
                self.tokeninfo_url,
                params={"id_token": token},
                timeout=self.timeout,
            )
            response.raise_for_status()
            claims = response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            logger.info("Identity provider rejected token (%s)", status)
            return None
        except (requests.RequestException, ValueError) as exc:
            logger.error("Identity provider request failed: %s", exc)
            return None

        if not isinstance(claims, dict) or not claims.get("email"):
            logger.warning("Identity provider response carries no email claim")
            return None
        if str(claims.get("email_verified", "true")).lower() == "false":
            logger.warning("Identity provider email %s is not verified", claims["email"])
            return None
        if self.audience and claims.get("aud") != self.audience:
            logger.warning("Identity provider token audience mismatch: %s", claims.get("aud"))
            return None
        return claims


_provider: Optional[IdentityProviderClient] = None


def get_identity_provider() -> Optional[IdentityProviderClient]:
    """Return the configured provider client, or ``None`` if disabled."""
    global _provider
    if not settings.identity_provider_url:
        return None
    if _provider is None or _provider.tokeninfo_url != settings.identity_provider_url:
        _provider = IdentityProviderClient(
            settings.identity_provider_url,
            audience=settings.identity_provider_audience,
            timeout=settings.identity_provider_timeout,
        )
    return _provider


def set_identity_provider(provider: Optional[IdentityProviderClient]) -> None:
    """Install a provider client explicitly (used by tests)."""
    global _provider
    _provider = provider
