"""Map a verified request to the identity whose vault it may touch."""

from __future__ import annotations

from typing import Optional

from drivevault.config import IsolationPolicy
from drivevault.errors import UnauthenticatedError

from .verifier import CallerIdentity, CredentialVerifier, extract_bearer_token

SHARED_IDENTITY = "shared"


class RequestAuthenticator:
    """
    Authenticate a request under one isolation policy chosen at startup.

    Every policy requires a valid bearer token. They differ only in which
    identity owns the vault:
        - TOKEN: the verified token subject.
        - HEADER: the ``X-User-Id`` header (trusted gateway / emulator setups).
        - NONE: one shared identity for every caller.
    """

    def __init__(self, verifier: CredentialVerifier, policy: IsolationPolicy) -> None:
        self._verifier = verifier
        self._policy = policy

    @property
    def policy(self) -> IsolationPolicy:
        return self._policy

    def authenticate(
        self,
        authorization: Optional[str],
        user_id_header: Optional[str] = None,
    ) -> CallerIdentity:
        token = extract_bearer_token(authorization)
        verified = self._verifier.verify(token)

        if self._policy is IsolationPolicy.TOKEN:
            return verified

        if self._policy is IsolationPolicy.HEADER:
            uid = (user_id_header or "").strip()
            if not uid:
                raise UnauthenticatedError("User ID required")
            return CallerIdentity(uid=uid, email=verified.email)

        return CallerIdentity(uid=SHARED_IDENTITY, email=verified.email)
