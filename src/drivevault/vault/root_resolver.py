"""
Per-user root folder resolution.

Concurrency policy:
    - Within one process, search-then-create for an identity runs under a
      per-identity lock, so duplicate initialize requests create at most one
      folder.
    - Across processes nothing can be locked, so after every create the
      master folder is searched again and all callers converge on the same
      folder: the oldest by createdTime, ties broken by ID. Extra folders
      are logged and left in place, never deleted.
"""

from __future__ import annotations

import logging
import threading
import weakref
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from drivevault.errors import InvalidInputError, NotFoundError
from drivevault.models import FileItem, RootFolderRecord

from ..controller.fields import LOOKUP_FIELDS
from .profile_store import ProfileStore
from .query_builder import build_root_folder_query

logger = logging.getLogger(__name__)

DEFAULT_ROOT_FOLDER_PREFIX = "Vault_"

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


class FolderBackend(Protocol):
    def list_files(self, query: str, *, fields: str = ..., page_size: int = ...) -> list[FileItem]: ...

    def create_folder(self, name: str, parent_id: str) -> FileItem: ...


def derive_root_folder_name(identity: str, prefix: str = DEFAULT_ROOT_FOLDER_PREFIX) -> str:
    """
    Folder name for an identity's root. The whole identity is kept so two
    identities never derive the same name.
    """
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidInputError("identity must be a non-empty string")
    return f"{prefix}{identity}"


def pick_root_folder(candidates: Iterable[FileItem]) -> FileItem:
    """Deterministic choice among duplicate root folders: oldest, then lowest ID."""
    ordered = sorted(
        candidates,
        key=lambda f: (f.created_time or _FAR_FUTURE, f.file_id),
    )
    if not ordered:
        raise NotFoundError("No root folder candidates")
    return ordered[0]


class RootResolver:
    def __init__(
        self,
        controller: FolderBackend,
        master_folder_id: str,
        *,
        prefix: str = DEFAULT_ROOT_FOLDER_PREFIX,
        profile_store: Optional[ProfileStore] = None,
    ) -> None:
        self._controller = controller
        self._master_folder_id = master_folder_id
        self._prefix = prefix
        self._profile_store = profile_store
        # An entry lives only while some request holds or waits on its lock.
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def folder_name(self, identity: str) -> str:
        return derive_root_folder_name(identity, self._prefix)

    def resolve(self, identity: str) -> RootFolderRecord:
        """Return the identity's root folder, creating it if absent."""
        name = self.folder_name(identity)

        recorded = self._recorded(identity)
        if recorded is not None:
            return recorded

        with self._lock_for(identity):
            recorded = self._recorded(identity)
            if recorded is not None:
                return recorded

            existing = self._search(name)
            if existing:
                chosen = self._choose(identity, existing)
                logger.info("Found existing root folder for %s: %s", identity, chosen.file_id)
            else:
                created = self._controller.create_folder(name, self._master_folder_id)
                logger.info("Created root folder for %s: %s", identity, created.file_id)
                # Search again: a concurrent process may have created one too.
                after = {f.file_id: f for f in self._search(name)}
                after.setdefault(created.file_id, created)
                chosen = self._choose(identity, after.values())
                if chosen.file_id != created.file_id:
                    logger.warning(
                        "Root folder race for %s: using %s, created %s is unused",
                        identity,
                        chosen.file_id,
                        created.file_id,
                    )

            return self._remember(identity, chosen)

    def lookup(self, identity: str) -> RootFolderRecord:
        """
        Return the identity's root folder without creating it.

        Raises:
            NotFoundError: the user has not been initialized yet.
        """
        name = self.folder_name(identity)

        recorded = self._recorded(identity)
        if recorded is not None:
            return recorded

        existing = self._search(name)
        if not existing:
            raise NotFoundError("User folder not found", details={"identity": identity})
        return self._remember(identity, self._choose(identity, existing))

    # ----------------------------
    # Internals
    # ----------------------------
    def _lock_for(self, identity: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(identity)
            if lock is None:
                lock = threading.Lock()
                self._locks[identity] = lock
            return lock

    def _search(self, name: str) -> list[FileItem]:
        query = build_root_folder_query(name, self._master_folder_id)
        found = self._controller.list_files(query, fields=LOOKUP_FIELDS, page_size=10)
        # Drive name matching is not byte-exact for every script; re-check.
        return [f for f in found if f.name == name]

    def _choose(self, identity: str, candidates: Iterable[FileItem]) -> FileItem:
        candidates = list(candidates)
        chosen = pick_root_folder(candidates)
        if len(candidates) > 1:
            logger.warning(
                "Duplicate root folders for %s: %s; using %s",
                identity,
                sorted(f.file_id for f in candidates),
                chosen.file_id,
            )
        return chosen

    def _recorded(self, identity: str) -> Optional[RootFolderRecord]:
        if self._profile_store is None:
            return None
        return self._profile_store.get(identity)

    def _remember(self, identity: str, folder: FileItem) -> RootFolderRecord:
        record = RootFolderRecord(
            owner_identity=identity,
            folder_id=folder.file_id,
            created_at=folder.created_time,
        )
        if self._profile_store is not None:
            self._profile_store.put(record)
        return record
