"""Exception hierarchy and HTTP error mapping for drivevault."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class DriveVaultError(Exception):
    """
    Base exception for drivevault.

    Attributes:
        http_status: Status code the request handlers answer with.
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause


class UnauthenticatedError(DriveVaultError):
    """Raised when no bearer credential was presented."""

    http_status = 401


class InvalidTokenError(UnauthenticatedError):
    """Raised when the bearer credential could not be verified."""

    http_status = 403


class InvalidInputError(DriveVaultError):
    """Raised when a required field is missing or malformed."""

    http_status = 400


class InvalidFolderIdError(InvalidInputError):
    """Raised when a folder/file ID is not a well-formed Drive ID."""


class ForbiddenScopeError(DriveVaultError):
    """Raised when a target lies outside the caller's root folder subtree."""

    http_status = 403


class NotFoundError(DriveVaultError):
    """Raised when the caller's root folder or a Drive item does not exist."""

    http_status = 404


class UpstreamUnavailableError(DriveVaultError):
    """Raised when Drive is unreachable or the backend credential is unusable."""

    http_status = 503


class InternalUpstreamError(DriveVaultError):
    """Raised for any other Drive API failure."""

    http_status = 500


class ConfigurationError(DriveVaultError):
    """Raised when settings are missing or malformed at startup."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to drivevault exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> DriveVaultError:
    """
    Map a Drive HTTP error to a drivevault exception.

    Policy:
        - 401 -> UpstreamUnavailableError (backend credential rejected)
        - 403 -> UpstreamUnavailableError if quota/rate related,
                 InternalUpstreamError otherwise
        - 404 -> NotFoundError
        - 429 -> UpstreamUnavailableError
        - 5xx -> UpstreamUnavailableError
        - otherwise (incl. 400) -> InternalUpstreamError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        return UpstreamUnavailableError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return UpstreamUnavailableError(message, details=details, cause=cause)
        return InternalUpstreamError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 429:
        return UpstreamUnavailableError(message, details=details, cause=cause)
    if 500 <= info.status_code <= 599:
        return UpstreamUnavailableError(message, details=details, cause=cause)

    return InternalUpstreamError(message, details=details, cause=cause)
