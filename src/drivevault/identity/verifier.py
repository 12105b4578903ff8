"""Bearer credential verification (Firebase ID tokens)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from drivevault.errors import InvalidTokenError, UnauthenticatedError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class CallerIdentity:
    """Stable identity of a verified caller."""

    uid: str
    email: Optional[str] = None


class CredentialVerifier(Protocol):
    def verify(self, token: str) -> CallerIdentity:
        """Return the caller identity, or raise InvalidTokenError."""
        ...


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Return the token part of an ``Authorization: Bearer <token>`` header.

    Raises:
        UnauthenticatedError: header absent, not a bearer header, or empty token.
    """
    if not authorization:
        raise UnauthenticatedError("Unauthorized: No token provided")
    if not authorization.lower().startswith(_BEARER_PREFIX):
        raise UnauthenticatedError("Unauthorized: Bearer token required")
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedError("Unauthorized: No token provided")
    return token


class FirebaseTokenVerifier:
    """Verify Firebase Auth ID tokens against Google's published certificates."""

    def __init__(self, project_id: str, *, request: Any = None) -> None:
        if not project_id:
            raise ValueError("project_id must be a non-empty string")
        self._project_id = project_id
        self._request = request

    def verify(self, token: str) -> CallerIdentity:
        from google.auth import exceptions as auth_exceptions
        from google.auth.transport import requests as auth_requests
        from google.oauth2 import id_token

        request = self._request or auth_requests.Request()
        try:
            claims = id_token.verify_firebase_token(
                token,
                request,
                audience=self._project_id,
            )
        except auth_exceptions.TransportError as exc:
            raise UpstreamUnavailableError(
                "Could not fetch token verification certificates", cause=exc
            ) from exc
        except (ValueError, auth_exceptions.GoogleAuthError) as exc:
            logger.info("Rejected ID token: %s", exc)
            raise InvalidTokenError("Unauthorized: Invalid token", cause=exc) from exc

        return identity_from_claims(claims)


def identity_from_claims(claims: Any) -> CallerIdentity:
    """Build a CallerIdentity from verified token claims (subject only)."""
    if not isinstance(claims, dict):
        raise InvalidTokenError("Unauthorized: Invalid token")
    uid = claims.get("sub") or claims.get("user_id")
    if not isinstance(uid, str) or not uid.strip():
        raise InvalidTokenError("Unauthorized: Token has no subject")
    email = claims.get("email")
    return CallerIdentity(uid=uid, email=email if isinstance(email, str) else None)
