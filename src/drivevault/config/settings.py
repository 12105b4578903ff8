"""Process-wide, read-only configuration loaded once at startup."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import dotenv_values, find_dotenv

from drivevault.auth import AuthInfo
from drivevault.errors import ConfigurationError
from drivevault.vault.root_resolver import DEFAULT_ROOT_FOLDER_PREFIX

DEFAULT_CORS_ORIGINS: tuple[str, ...] = ("http://localhost:5173",)
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024
DEFAULT_SCOPE_MAX_DEPTH = 32
DEFAULT_PORT = 3001


class IsolationPolicy(str, enum.Enum):
    """How a verified request is mapped to a vault owner."""

    NONE = "none"
    HEADER = "header"
    TOKEN = "token"


@dataclass(frozen=True)
class Settings:
    master_folder_id: str
    auth_info: Optional[AuthInfo] = None
    firebase_project_id: Optional[str] = None
    isolation_policy: IsolationPolicy = IsolationPolicy.TOKEN
    root_folder_prefix: str = DEFAULT_ROOT_FOLDER_PREFIX
    profile_store_path: Optional[str] = None
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    scope_max_depth: int = DEFAULT_SCOPE_MAX_DEPTH
    log_level: str = "INFO"
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        if not self.master_folder_id:
            raise ConfigurationError("MASTER_FOLDER_ID is required")
        if not self.root_folder_prefix:
            raise ConfigurationError("ROOT_FOLDER_PREFIX must not be empty")
        if self.max_upload_bytes <= 0:
            raise ConfigurationError("MAX_UPLOAD_BYTES must be positive")
        if self.scope_max_depth <= 0:
            raise ConfigurationError("SCOPE_MAX_DEPTH must be positive")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: Optional[str] = None,
    ) -> "Settings":
        """
        Build settings from the environment.

        Values from a `.env` file (``dotenv_path`` or one found from the
        working directory) fill in variables that the real environment does
        not set; real environment variables always win. Passing ``environ``
        skips `.env` loading unless ``dotenv_path`` is also given.
        """
        env: dict[str, str] = {}
        if environ is None or dotenv_path is not None:
            path = dotenv_path or find_dotenv(usecwd=True)
            values = dotenv_values(path) if path else {}
            env.update({k: v for k, v in values.items() if v is not None})
        env.update(os.environ if environ is None else environ)

        return cls(
            master_folder_id=_get(env, "MASTER_FOLDER_ID") or "",
            auth_info=_auth_info_from_env(env),
            firebase_project_id=_get(env, "FIREBASE_PROJECT_ID"),
            isolation_policy=_parse_policy(_get(env, "ISOLATION_POLICY")),
            root_folder_prefix=_get(env, "ROOT_FOLDER_PREFIX") or DEFAULT_ROOT_FOLDER_PREFIX,
            profile_store_path=_get(env, "PROFILE_STORE_PATH"),
            cors_origins=_parse_origins(_get(env, "CORS_ORIGINS")),
            max_upload_bytes=_parse_int(env, "MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            scope_max_depth=_parse_int(env, "SCOPE_MAX_DEPTH", DEFAULT_SCOPE_MAX_DEPTH),
            log_level=_parse_log_level(_get(env, "LOG_LEVEL")),
            port=_parse_int(env, "PORT", DEFAULT_PORT),
        )

    def require_auth_info(self) -> AuthInfo:
        if self.auth_info is None:
            raise ConfigurationError(
                "Drive credentials missing: set GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET "
                "and GOOGLE_REFRESH_TOKEN (or GOOGLE_CLIENT_SECRETS_FILE and GOOGLE_TOKEN_FILE)"
            )
        return self.auth_info

    def require_firebase_project_id(self) -> str:
        if not self.firebase_project_id:
            raise ConfigurationError("FIREBASE_PROJECT_ID is required to verify ID tokens")
        return self.firebase_project_id


def _get(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _auth_info_from_env(env: Mapping[str, str]) -> Optional[AuthInfo]:
    client_id = _get(env, "GOOGLE_CLIENT_ID")
    client_secret = _get(env, "GOOGLE_CLIENT_SECRET")
    refresh_token = _get(env, "GOOGLE_REFRESH_TOKEN")
    if client_id and client_secret and refresh_token:
        return AuthInfo.from_refresh_token(client_id, client_secret, refresh_token)

    secrets_file = _get(env, "GOOGLE_CLIENT_SECRETS_FILE")
    token_file = _get(env, "GOOGLE_TOKEN_FILE")
    if secrets_file and token_file:
        return AuthInfo(
            kind="oauth",
            data={"client_secrets_file": secrets_file, "token_file": token_file},
        )

    if any((client_id, client_secret, refresh_token)):
        raise ConfigurationError(
            "GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN must be set together"
        )
    return None


def _parse_policy(raw: Optional[str]) -> IsolationPolicy:
    if raw is None:
        return IsolationPolicy.TOKEN
    try:
        return IsolationPolicy(raw.lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"ISOLATION_POLICY must be one of {[p.value for p in IsolationPolicy]}",
            details={"value": raw},
            cause=exc,
        ) from exc


def _parse_origins(raw: Optional[str]) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_CORS_ORIGINS
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = _get(env, key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{key} must be an integer", details={"value": raw}, cause=exc
        ) from exc


def _parse_log_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError("LOG_LEVEL is not a logging level", details={"value": raw})
    return level
