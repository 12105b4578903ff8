"""Optional record of each identity's root folder, as kept in the user profile."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from typing import Optional, Protocol

from drivevault.models import RootFolderRecord
from drivevault.util.time import parse_rfc3339_or_none, to_rfc3339

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    def get(self, identity: str) -> Optional[RootFolderRecord]: ...

    def put(self, record: RootFolderRecord) -> None: ...


class InMemoryProfileStore:
    """Process-local store; lost on restart."""

    def __init__(self) -> None:
        self._records: dict[str, RootFolderRecord] = {}
        self._lock = threading.Lock()

    def get(self, identity: str) -> Optional[RootFolderRecord]:
        with self._lock:
            return self._records.get(identity)

    def put(self, record: RootFolderRecord) -> None:
        with self._lock:
            self._records[record.owner_identity] = record


class JsonFileProfileStore:
    """
    Store backed by one JSON file, shared by the server and the CLI.

    Layout: ``{"users": {"<identity>": {"driveFolderId": ..., "driveFolderCreatedAt": ...}}}``
    Writes replace the file atomically.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def get(self, identity: str) -> Optional[RootFolderRecord]:
        with self._lock:
            entry = self._load().get(identity)
        if not isinstance(entry, dict) or not isinstance(entry.get("driveFolderId"), str):
            return None
        return RootFolderRecord(
            owner_identity=identity,
            folder_id=entry["driveFolderId"],
            created_at=parse_rfc3339_or_none(entry.get("driveFolderCreatedAt")),
        )

    def put(self, record: RootFolderRecord) -> None:
        entry: dict[str, str] = {"driveFolderId": record.folder_id}
        if record.created_at is not None:
            entry["driveFolderCreatedAt"] = to_rfc3339(record.created_at)

        with self._lock:
            users = self._load()
            users[record.owner_identity] = entry
            self._save(users)

    def _load(self) -> dict:
        if not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except ValueError:
            logger.warning("Profile store %s is not valid JSON; ignoring it", self._path)
            return {}
        users = payload.get("users") if isinstance(payload, dict) else None
        return users if isinstance(users, dict) else {}

    def _save(self, users: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".profiles-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"users": users}, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        except BaseException:
            os.unlink(tmp_path)
            raise
