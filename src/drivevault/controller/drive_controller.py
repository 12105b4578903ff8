"""Google Drive API controller (internal use only)."""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from drivevault.auth import AuthInfo, OAuthClient
from drivevault.errors import (
    DriveVaultError,
    HttpErrorInfo,
    InternalUpstreamError,
    InvalidInputError,
    UpstreamUnavailableError,
    map_http_error,
)
from drivevault.models import FileItem
from drivevault.util.mime import FOLDER_MIME, upload_mime_type
from drivevault.util.time import parse_rfc3339_or_none

from .fields import FILE_FIELDS, LIST_FIELDS, PARENT_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Statuses for which Drive refused the request without acting on it.
_REJECTED_STATUSES = (403, 429)


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class DriveController:
    """
    Drive API controller (internal only).

    Notes:
        - The Drive `service` object is NOT exposed.
        - googleapiclient services are not thread-safe, so each thread gets
          its own service built from the shared factory.
        - `supports_all_drives` is applied to all requests consistently.
    """

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        supports_all_drives: bool = True,
    ) -> None:
        client = OAuthClient(auth_info)
        self._init(lambda: client.build_drive_service(ensure_valid=True), supports_all_drives)

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        supports_all_drives: bool = True,
    ) -> "DriveController":
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._init(lambda: service, supports_all_drives)
        return obj

    def _init(self, service_factory: Callable[[], Any], supports_all_drives: bool) -> None:
        self._service_factory = service_factory
        self._local = threading.local()
        self._supports_all_drives = supports_all_drives
        self._retry_policy = _RetryPolicy()

    @property
    def _service(self) -> Any:
        service = getattr(self._local, "service", None)
        if service is None:
            service = self._service_factory()
            self._local.service = service
        return service

    # ----------------------------
    # Public API
    # ----------------------------
    def get(self, file_id: str, *, fields: str = FILE_FIELDS) -> FileItem:
        req = self._service.files().get(
            fileId=file_id,
            fields=fields,
            **self._common_get_kwargs(),
        )
        data = self._execute(req.execute)
        return _file_dict_to_file_item(data)

    def get_parents(self, file_id: str) -> FileItem:
        """Fetch only the hierarchy fields of an item."""
        return self.get(file_id, fields=PARENT_FIELDS)

    def list_files(
        self,
        query: str,
        *,
        order_by: Optional[str] = None,
        fields: str = LIST_FIELDS,
        page_size: int = 100,
        max_items: Optional[int] = None,
    ) -> list[FileItem]:
        """Run a Drive `q` query, following pagination up to `max_items`."""
        all_files: list[FileItem] = []
        page_token: Optional[str] = None

        while True:
            kwargs: dict[str, Any] = {
                "q": query,
                "fields": fields,
                "pageSize": page_size,
                "spaces": "drive",
                **self._common_list_kwargs(),
            }
            if order_by:
                kwargs["orderBy"] = order_by
            if page_token:
                kwargs["pageToken"] = page_token

            req = self._service.files().list(**kwargs)
            data = self._execute(req.execute)
            for f in data.get("files", []) or []:
                all_files.append(_file_dict_to_file_item(f))
                if max_items is not None and len(all_files) >= max_items:
                    return all_files

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return all_files

    def create_folder(self, name: str, parent_id: str) -> FileItem:
        body = {"name": name, "mimeType": FOLDER_MIME, "parents": [parent_id]}
        req = self._service.files().create(
            body=body,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute, idempotent=False)
        return _file_dict_to_file_item(data)

    def rename(self, file_id: str, new_name: str) -> FileItem:
        return self._update(file_id, {"name": new_name})

    def set_trashed(self, file_id: str, trashed: bool) -> FileItem:
        return self._update(file_id, {"trashed": trashed})

    def upload_file(
        self,
        local_path: str,
        parent_id: str,
        *,
        name: str,
        mime_type: Optional[str] = None,
    ) -> FileItem:
        if not local_path or not isinstance(local_path, str):
            raise InvalidInputError("local_path must be a non-empty string")

        from googleapiclient.http import MediaFileUpload

        media = MediaFileUpload(
            local_path,
            mimetype=upload_mime_type(name, mime_type),
            resumable=os.path.getsize(local_path) > 0,
        )
        body = {"name": name, "parents": [parent_id]}

        req = self._service.files().create(
            body=body,
            media_body=media,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute, idempotent=False)
        return _file_dict_to_file_item(data)

    # ----------------------------
    # Internals
    # ----------------------------
    def _update(self, file_id: str, body: dict[str, Any]) -> FileItem:
        req = self._service.files().update(
            fileId=file_id,
            body=body,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute)
        return _file_dict_to_file_item(data)

    def _common_get_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    def _common_write_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _execute(self, func: Callable[[], T], *, idempotent: bool = True) -> T:
        """
        Run a Drive request with exponential backoff.

        Non-idempotent requests (files.create) are only retried when Drive
        rejected them outright (rate limit / quota); after a 5xx or a network
        error the item may already exist, so the error is raised instead.
        """
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except DriveVaultError:
                raise
            except Exception as exc:
                mapped = self._map_exception(exc)
                if (
                    self._should_retry(mapped, idempotent=idempotent)
                    and attempt < self._retry_policy.max_retries
                ):
                    logger.warning(
                        "Drive call failed (%s), retrying in %.1fs", mapped, delay
                    )
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise InternalUpstreamError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception, *, idempotent: bool = True) -> bool:
        if not isinstance(exc, UpstreamUnavailableError):
            return False
        status_code = exc.details.get("status_code")
        # A rejected backend credential (401) will not heal by retrying.
        if status_code == 401:
            return False
        return idempotent or status_code in _REJECTED_STATUSES

    def _map_exception(self, exc: Exception) -> DriveVaultError:
        import httplib2
        from google.auth.exceptions import RefreshError, TransportError
        from googleapiclient.errors import HttpError

        if isinstance(exc, HttpError):
            info = _http_error_to_info(exc)
            return map_http_error(info, cause=exc)

        if isinstance(exc, RefreshError):
            return UpstreamUnavailableError(
                "Drive credential refresh failed",
                details={"status_code": 401},
                cause=exc,
            )

        if isinstance(exc, (TransportError, httplib2.HttpLib2Error, OSError, TimeoutError)):
            return UpstreamUnavailableError("Network error", cause=exc)

        return InternalUpstreamError("Drive API error", cause=exc)


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _file_dict_to_file_item(data: dict[str, Any]) -> FileItem:
    file_id = data.get("id")
    name = data.get("name", "")
    mime_type = data.get("mimeType", "")
    parents = data.get("parents", []) or []

    return FileItem(
        file_id=file_id if isinstance(file_id, str) else "",
        name=name if isinstance(name, str) else "",
        mime_type=mime_type if isinstance(mime_type, str) else "",
        parents=list(parents) if isinstance(parents, list) else [],
        trashed=bool(data.get("trashed", False)),
        size=_int_or_none(data.get("size")),
        quota_bytes_used=_int_or_none(data.get("quotaBytesUsed")),
        created_time=parse_rfc3339_or_none(data.get("createdTime")),
        modified_time=parse_rfc3339_or_none(data.get("modifiedTime")),
        web_view_link=_str_or_none(data.get("webViewLink")),
        web_content_link=_str_or_none(data.get("webContentLink")),
        thumbnail_link=_str_or_none(data.get("thumbnailLink")),
        icon_link=_str_or_none(data.get("iconLink")),
    )


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                details["reason_detail"] = errors[0].get("reason")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if isinstance(status_code, str) and status_code.isdigit():
        status_code = int(status_code)
    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
