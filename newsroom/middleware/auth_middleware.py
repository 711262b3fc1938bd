"""
Admin authorization for the Newsroom backend.
Verifies the identity token header and checks the admin allow-list.
"""

import asyncio
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from fastapi import Depends, HTTPException, Request
from loguru import logger

from ..config import ID_TOKEN_HEADER
from ..services.token_verifier import TokenVerifier, VerificationError


class AuthError(Exception):
    """Raised when a request is not authorized for admin endpoints."""


class MissingTokenError(AuthError):
    """The identity token header is absent or blank."""


class InvalidTokenError(AuthError):
    """The token failed verification or its subject is not an admin."""


@dataclass(frozen=True, slots=True)
class AdminPrincipal:
    """Proof that the current request passed the admin check."""

    subject: str
    email: Optional[str] = None


class AdminGuard:
    """Authorize requests whose verified subject is on the allow-list."""

    def __init__(self, verifier: TokenVerifier, admin_subjects: Iterable[str]):
        self._verifier = verifier
        self._admin_subjects: FrozenSet[str] = frozenset(admin_subjects)

    def is_admin(self, subject: str) -> bool:
        return subject in self._admin_subjects

    async def authorize(self, id_token: Optional[str]) -> AdminPrincipal:
        """
        Check an identity token for admin access.

        Args:
            id_token: Raw header value, None when the header is missing

        Returns:
            AdminPrincipal for the verified subject

        Raises:
            MissingTokenError: If no token was supplied
            InvalidTokenError: If verification fails or the subject is not an admin
        """
        if id_token is None or not id_token.strip():
            logger.warning("Admin only request without identity token")
            raise MissingTokenError("Identity token missing")

        loop = asyncio.get_running_loop()
        try:
            identity = await loop.run_in_executor(None, self._verifier.verify, id_token)
        except VerificationError as exc:
            logger.warning(f"Admin only request with invalid identity token: {exc}")
            raise InvalidTokenError("Identity token invalid") from exc

        email = identity.email or "No email provided"
        if not self.is_admin(identity.subject):
            logger.warning(
                f"{email}-(sub: {identity.subject}) failed to access admin only request"
            )
            raise InvalidTokenError("Subject is not an admin")

        logger.info(f"{email}-(sub: {identity.subject}) accessed admin only request")
        return AdminPrincipal(subject=identity.subject, email=identity.email)


def get_admin_guard(request: Request) -> AdminGuard:
    """Return the guard built at application startup."""
    return request.app.state.admin_guard


async def require_admin(
    request: Request, guard: AdminGuard = Depends(get_admin_guard)
) -> AdminPrincipal:
    """
    Require admin authorization for a request.

    Raises:
        HTTPException: 401 when the token header is missing, 403 when the
            token is invalid or belongs to a non-admin
    """
    try:
        return await guard.authorize(request.headers.get(ID_TOKEN_HEADER))
    except MissingTokenError as exc:
        raise HTTPException(status_code=401, detail="Authentication required") from exc
    except InvalidTokenError as exc:
        raise HTTPException(status_code=403, detail="Access denied") from exc
