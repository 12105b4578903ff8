"""OAuth client utilities for drivevault."""

from __future__ import annotations

import logging
import os
from typing import Sequence

from drivevault.errors import ConfigurationError, UpstreamUnavailableError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)

DRIVE_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)
TOKEN_URI: str = "https://oauth2.googleapis.com/token"


class OAuthClient:
    """Create Drive API credentials and service objects for the vault account."""

    def __init__(self, auth_info: AuthInfo) -> None:
        self._auth_info = auth_info

    def get_credentials(self, scopes: Sequence[str] = DRIVE_SCOPES, ensure_valid: bool = True):
        """
        Return OAuth credentials for the given scopes.

        Args:
            scopes: OAuth scopes.
            ensure_valid: If True, refresh credentials when possible.

        Returns:
            google.oauth2.credentials.Credentials

        Raises:
            UpstreamUnavailableError: on load/refresh failures.
            ConfigurationError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise ConfigurationError("scopes must be a non-empty sequence of strings")

        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if self._auth_info.kind == "refresh_token":
            data = self._auth_info.data
            creds = Credentials(
                token=None,
                refresh_token=data["refresh_token"],
                token_uri=TOKEN_URI,
                client_id=data["client_id"],
                client_secret=data["client_secret"],
                scopes=list(scopes),
            )
        else:
            token_file = self._auth_info.token_file
            if not os.path.exists(token_file):
                raise ConfigurationError(
                    "token_file does not exist; run `drivevault setup-oauth` first",
                    details={"token_file": token_file},
                )
            try:
                creds = Credentials.from_authorized_user_file(
                    token_file,
                    scopes=list(scopes),
                )
            except Exception as exc:
                raise UpstreamUnavailableError(
                    "Failed to load token_file",
                    details={"token_file": token_file},
                    cause=exc,
                ) from exc

        if not ensure_valid:
            return creds

        if not creds.valid and creds.refresh_token:
            try:
                creds.refresh(Request())
            except Exception as exc:
                raise UpstreamUnavailableError(
                    "Failed to refresh Drive OAuth credentials",
                    details={"kind": self._auth_info.kind},
                    cause=exc,
                ) from exc
            if self._auth_info.kind == "oauth":
                self._save_credentials(creds)

        if not creds.valid:
            raise UpstreamUnavailableError(
                "Drive OAuth credentials are not valid",
                details={"kind": self._auth_info.kind},
            )
        return creds

    def build_drive_service(self, scopes: Sequence[str] = DRIVE_SCOPES, ensure_valid: bool = True):
        """
        Build a Drive API service resource.

        Returns:
            googleapiclient.discovery.Resource
        """
        from googleapiclient.discovery import build

        creds = self.get_credentials(scopes=scopes, ensure_valid=ensure_valid)
        try:
            return build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise UpstreamUnavailableError("Failed to build Drive service", cause=exc) from exc

    @staticmethod
    def run_consent_flow(client_secrets_file: str, scopes: Sequence[str] = DRIVE_SCOPES):
        """
        Run the installed-app consent flow and return credentials with a refresh token.

        Opens a browser on this machine; meant for one-off setup, never for
        request handling.
        """
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not os.path.exists(client_secrets_file):
            raise ConfigurationError(
                "client secrets file not found",
                details={"client_secrets_file": client_secrets_file},
            )

        flow = InstalledAppFlow.from_client_secrets_file(
            client_secrets_file,
            scopes=list(scopes),
        )
        # offline + consent so Google issues a refresh token every time.
        creds = flow.run_local_server(port=0, access_type="offline", prompt="consent")
        if not creds.refresh_token:
            raise UpstreamUnavailableError("Consent flow returned no refresh token")
        logger.info("OAuth consent flow completed")
        return creds

    def _save_credentials(self, creds) -> None:
        token_file = self._auth_info.token_file
        token_dir = os.path.dirname(token_file)
        if token_dir:
            os.makedirs(token_dir, exist_ok=True)

        try:
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise ConfigurationError(
                "Failed to save OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
