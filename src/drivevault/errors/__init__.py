"""Public error exports for drivevault."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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
