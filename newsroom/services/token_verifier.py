"""
Identity token verification for the Newsroom backend.

Admin requests carry a Google ID token. Verification checks signature,
expiry, issuer and audience through google-auth and yields the stable
subject identifier of the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token
from loguru import logger


class VerificationError(Exception):
    """Raised when an identity token cannot be verified."""


@dataclass(frozen=True, slots=True)
class Identity:
    """Claims extracted from a verified identity token."""

    subject: str
    email: Optional[str] = None


class TokenVerifier:
    """Interface for identity token verification strategies.

    Implementations may block on network I/O; callers run ``verify`` in an
    executor.
    """

    def verify(self, token: str) -> Identity:
        raise NotImplementedError


class GoogleTokenVerifier(TokenVerifier):
    """Verify Google Sign-In ID tokens issued for a fixed client id."""

    def __init__(self, client_id: str):
        if not client_id:
            logger.warning("GOOGLE_CLIENT_ID not set; every identity token will be rejected")
        self._client_id = client_id
        self._transport = google_requests.Request()

    def verify(self, token: str) -> Identity:
        """
        Verify ``token`` against Google's public keys.

        Args:
            token: Raw ID token taken from the request header

        Returns:
            Identity of the token's subject

        Raises:
            VerificationError: If the token is empty, malformed, expired,
                issued for another audience, or Google cannot be reached
        """
        if not token or not token.strip():
            raise VerificationError("Empty identity token")
        if not self._client_id:
            raise VerificationError("No client id configured")

        try:
            claims = google_id_token.verify_oauth2_token(
                token.strip(), self._transport, audience=self._client_id
            )
        except (ValueError, google_exceptions.GoogleAuthError) as exc:
            logger.warning(f"Identity token rejected: {exc}")
            raise VerificationError("Invalid identity token") from exc

        subject = claims.get("sub")
        if not subject:
            logger.warning("Identity token verified but carries no subject")
            raise VerificationError("Identity token has no subject")

        return Identity(subject=str(subject), email=claims.get("email"))
