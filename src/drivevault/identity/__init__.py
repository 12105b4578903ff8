"""Caller identity exports for drivevault."""

from __future__ import annotations

from .policy import SHARED_IDENTITY, RequestAuthenticator
from .verifier import (
    CallerIdentity,
    CredentialVerifier,
    FirebaseTokenVerifier,
    extract_bearer_token,
    identity_from_claims,
)

__all__ = [
    "CallerIdentity",
    "CredentialVerifier",
    "FirebaseTokenVerifier",
    "RequestAuthenticator",
    "SHARED_IDENTITY",
    "extract_bearer_token",
    "identity_from_claims",
]
