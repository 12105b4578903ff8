"""drivevault public API."""

from __future__ import annotations

from drivevault.auth import AuthInfo, OAuthClient
from drivevault.config import IsolationPolicy, Settings
from drivevault.controller import DriveController
from drivevault.errors import (
    ConfigurationError,
    DriveVaultError,
    ForbiddenScopeError,
    HttpErrorInfo,
    InternalUpstreamError,
    InvalidFolderIdError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
    UnauthenticatedError,
    UpstreamUnavailableError,
    map_http_error,
)
from drivevault.identity import CallerIdentity, FirebaseTokenVerifier, RequestAuthenticator
from drivevault.models import FileItem, FileListing, RootFolderRecord, UploadSource
from drivevault.service import VaultService
from drivevault.vault import RootResolver, ScopeGuard

__all__ = [
    # High-level
    "VaultService",
    "RootResolver",
    "ScopeGuard",
    "DriveController",
    # Auth / identity
    "AuthInfo",
    "OAuthClient",
    "CallerIdentity",
    "FirebaseTokenVerifier",
    "RequestAuthenticator",
    # Config
    "IsolationPolicy",
    "Settings",
    # Models
    "FileItem",
    "FileListing",
    "RootFolderRecord",
    "UploadSource",
    # Errors
    "DriveVaultError",
    "UnauthenticatedError",
    "InvalidTokenError",
    "InvalidInputError",
    "InvalidFolderIdError",
    "ForbiddenScopeError",
    "NotFoundError",
    "UpstreamUnavailableError",
    "InternalUpstreamError",
    "ConfigurationError",
    "HttpErrorInfo",
    "map_http_error",
]
