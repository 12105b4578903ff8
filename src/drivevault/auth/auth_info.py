"""Drive API credential information for drivevault."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "refresh_token": ("client_id", "client_secret", "refresh_token"),
    "oauth": ("client_secrets_file", "token_file"),
}


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Credentials the backend uses to act on the shared Drive account.

    Supported kinds:
        kind = "refresh_token"
            data: client_id, client_secret, refresh_token
            (the long-lived token printed by `drivevault setup-oauth`)
        kind = "oauth"
            data: client_secrets_file, token_file
            (authorized-user JSON written by a previous consent flow)
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind not in _REQUIRED_KEYS:
            raise ValueError(
                f"AuthInfo.kind must be one of {sorted(_REQUIRED_KEYS)}, got {self.kind!r}"
            )

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        for key in _REQUIRED_KEYS[self.kind]:
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks.
        return f"AuthInfo(kind={self.kind!r}, keys={sorted(self.data)})"

    @classmethod
    def from_refresh_token(
        cls, client_id: str, client_secret: str, refresh_token: str
    ) -> "AuthInfo":
        return cls(
            kind="refresh_token",
            data={
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
            },
        )

    @property
    def client_secrets_file(self) -> str:
        """Path to OAuth client secrets JSON ("oauth" kind)."""
        return str(self.data["client_secrets_file"])

    @property
    def token_file(self) -> str:
        """Path to OAuth token JSON ("oauth" kind)."""
        return str(self.data["token_file"])
