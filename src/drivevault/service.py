"""VaultService: the per-request pipeline behind every endpoint."""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from typing import BinaryIO, Iterator, Optional, Sequence

from drivevault.config import Settings
from drivevault.controller import DriveController
from drivevault.errors import InvalidInputError
from drivevault.identity import CallerIdentity
from drivevault.models import FileItem, FileListing, RootFolderRecord, UploadSource
from drivevault.vault import (
    JsonFileProfileStore,
    ProfileStore,
    RootResolver,
    ScopeGuard,
    SortSpec,
    View,
    build_query,
    order_by_for_view,
    parse_view,
)
from drivevault.vault.root_resolver import DEFAULT_ROOT_FOLDER_PREFIX

logger = logging.getLogger(__name__)

LIST_MAX_ITEMS = 1000


class VaultService:
    """
    Runs resolve root -> guard target -> build query/mutation -> call Drive.

    Every method takes the already-authenticated caller; nothing here knows
    about HTTP.
    """

    def __init__(
        self,
        controller: DriveController,
        master_folder_id: str,
        *,
        root_folder_prefix: str = DEFAULT_ROOT_FOLDER_PREFIX,
        profile_store: Optional[ProfileStore] = None,
        scope_max_depth: int = 32,
    ) -> None:
        self._controller = controller
        self._resolver = RootResolver(
            controller,
            master_folder_id,
            prefix=root_folder_prefix,
            profile_store=profile_store,
        )
        self._guard = ScopeGuard(controller, master_folder_id, max_depth=scope_max_depth)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        controller: Optional[DriveController] = None,
    ) -> "VaultService":
        """Build the service and its Drive controller from startup settings."""
        if controller is None:
            controller = DriveController(settings.require_auth_info())
        profile_store = (
            JsonFileProfileStore(settings.profile_store_path)
            if settings.profile_store_path
            else None
        )
        return cls(
            controller,
            settings.master_folder_id,
            root_folder_prefix=settings.root_folder_prefix,
            profile_store=profile_store,
            scope_max_depth=settings.scope_max_depth,
        )

    @property
    def resolver(self) -> RootResolver:
        return self._resolver

    # ----------------------------
    # Operations
    # ----------------------------
    def initialize_user(self, caller: CallerIdentity) -> RootFolderRecord:
        return self._resolver.resolve(caller.uid)

    def list_files(
        self,
        caller: CallerIdentity,
        *,
        folder_id: Optional[str] = None,
        view: Optional[str] = None,
        sort_field: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> FileListing:
        parsed_view = parse_view(view)
        root_id = self._root_id(caller)

        # Only my-files navigates; the other views are anchored at the root.
        if parsed_view is View.MY_FILES:
            target_id = self._guard.target_folder(root_id, folder_id)
        else:
            target_id = root_id

        query = build_query(parsed_view, target_id, root_id)
        order_by = order_by_for_view(parsed_view, SortSpec.parse(sort_field, sort_order))
        files = self._controller.list_files(query, order_by=order_by, max_items=LIST_MAX_ITEMS)
        return FileListing(files=files, current_folder_id=target_id, root_folder_id=root_id)

    def upload_files(
        self,
        caller: CallerIdentity,
        uploads: Sequence[UploadSource],
        *,
        folder_id: Optional[str] = None,
    ) -> list[FileItem]:
        if not uploads:
            raise InvalidInputError("No file uploaded")
        names = [clean_upload_filename(u.filename) for u in uploads]

        root_id = self._root_id(caller)
        target_id = self._guard.target_folder(root_id, folder_id)

        uploaded: list[FileItem] = []
        for upload, name in zip(uploads, names):
            with spooled_upload(upload.stream) as local_path:
                item = self._controller.upload_file(
                    local_path,
                    target_id,
                    name=name,
                    mime_type=upload.mime_type,
                )
            logger.info("Uploaded %s (%s) to %s", name, item.file_id, target_id)
            uploaded.append(item)
        return uploaded

    def create_folder(
        self,
        caller: CallerIdentity,
        name: Optional[str],
        *,
        parent_id: Optional[str] = None,
    ) -> FileItem:
        folder_name = _require_name(name, "Missing folder name")
        root_id = self._root_id(caller)
        target_id = self._guard.target_folder(root_id, parent_id)
        return self._controller.create_folder(folder_name, target_id)

    def delete_item(self, caller: CallerIdentity, file_id: Optional[str]) -> FileItem:
        """Move an item of the caller's subtree to the trash."""
        item_id = self._in_scope_item_id(caller, file_id)
        return self._controller.set_trashed(item_id, True)

    def restore_item(self, caller: CallerIdentity, file_id: Optional[str]) -> FileItem:
        item_id = self._in_scope_item_id(caller, file_id)
        return self._controller.set_trashed(item_id, False)

    def rename_item(
        self,
        caller: CallerIdentity,
        file_id: Optional[str],
        new_name: Optional[str],
    ) -> FileItem:
        name = _require_name(new_name, "Missing fileId or newName")
        if not file_id:
            raise InvalidInputError("Missing fileId or newName")
        item_id = self._in_scope_item_id(caller, file_id)
        return self._controller.rename(item_id, name)

    # ----------------------------
    # Internals
    # ----------------------------
    def _root_id(self, caller: CallerIdentity) -> str:
        return self._resolver.lookup(caller.uid).folder_id

    def _in_scope_item_id(self, caller: CallerIdentity, file_id: Optional[str]) -> str:
        if not file_id:
            raise InvalidInputError("Missing fileId")
        root_id = self._root_id(caller)
        self._guard.ensure_item_in_scope(root_id, file_id)
        return file_id


def _require_name(value: Optional[str], message: str) -> str:
    name = value.strip() if isinstance(value, str) else ""
    if not name:
        raise InvalidInputError(message)
    return name


def clean_upload_filename(filename: Optional[str]) -> str:
    """Keep only the final path component of a client-supplied file name."""
    raw = (filename or "").replace("\\", "/")
    name = raw.rsplit("/", 1)[-1].strip()
    if not name or name in (".", ".."):
        raise InvalidInputError("Uploaded file has no usable name")
    return name


@contextlib.contextmanager
def spooled_upload(stream: BinaryIO) -> Iterator[str]:
    """Copy `stream` to a temporary file and remove it afterwards, on success or failure."""
    tmp = tempfile.NamedTemporaryFile(prefix="drivevault-upload-", delete=False)
    try:
        with tmp:
            shutil.copyfileobj(stream, tmp)
        yield tmp.name
    finally:
        try:
            os.remove(tmp.name)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove temporary upload %s: %s", tmp.name, exc)
