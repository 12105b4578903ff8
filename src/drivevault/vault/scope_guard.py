"""Constrain operations to the caller's own root folder subtree."""

from __future__ import annotations

import logging
from typing import NoReturn, Optional, Protocol

from drivevault.errors import ForbiddenScopeError, InvalidInputError, NotFoundError
from drivevault.models import FileItem

from .query_builder import validate_folder_id

logger = logging.getLogger(__name__)


class ParentLookup(Protocol):
    def get_parents(self, file_id: str) -> FileItem: ...


def resolve_target_folder(
    root_folder_id: str,
    requested_folder_id: Optional[str],
    master_folder_id: str,
) -> str:
    """
    Shallow guard: an absent request, or one naming the master folder,
    falls back to the caller's root folder. Anything else is returned as is.
    """
    if not requested_folder_id or requested_folder_id == master_folder_id:
        return root_folder_id
    return requested_folder_id


class ScopeGuard:
    """
    Hardened guard: on top of `resolve_target_folder`, verify that targets
    actually descend from the caller's root by walking `parents` upwards.
    """

    def __init__(
        self,
        controller: ParentLookup,
        master_folder_id: str,
        *,
        max_depth: int = 32,
    ) -> None:
        self._controller = controller
        self._master_folder_id = master_folder_id
        self._max_depth = max_depth

    def target_folder(self, root_folder_id: str, requested_folder_id: Optional[str]) -> str:
        """
        Return the folder a list/upload/create operation may act on.

        Raises:
            InvalidFolderIdError: malformed ID.
            NotFoundError: the requested folder does not exist.
            InvalidInputError: the requested ID is not a folder.
            ForbiddenScopeError: the folder is outside the caller's subtree.
        """
        if requested_folder_id:
            validate_folder_id(requested_folder_id, field="folderId")
        effective = resolve_target_folder(
            root_folder_id, requested_folder_id, self._master_folder_id
        )
        if effective == root_folder_id:
            return root_folder_id

        item = self._controller.get_parents(effective)
        if not item.is_folder:
            raise InvalidInputError("Target is not a folder", details={"folderId": effective})
        self._verify_descends(item, root_folder_id)
        return effective

    def ensure_item_in_scope(self, root_folder_id: str, item_id: Optional[str]) -> FileItem:
        """
        Verify that `item_id` is a strict descendant of the caller's root,
        for delete / restore / rename. The root itself is refused.
        """
        validate_folder_id(item_id, field="fileId")
        if item_id in (root_folder_id, self._master_folder_id):
            logger.warning("Refused mutation of protected folder %s", item_id)
            raise ForbiddenScopeError(
                "Forbidden: item is outside your folder", details={"fileId": item_id}
            )

        item = self._controller.get_parents(item_id)  # type: ignore[arg-type]
        self._verify_descends(item, root_folder_id)
        return item

    def _verify_descends(self, item: FileItem, root_folder_id: str) -> None:
        seen: set[str] = {item.file_id}
        parents = item.parents
        hops = 0

        while root_folder_id not in parents:
            if (
                not parents
                or self._master_folder_id in parents
                or hops >= self._max_depth
            ):
                self._deny(item, root_folder_id)

            parent_id = parents[0]
            if parent_id in seen:
                self._deny(item, root_folder_id)
            seen.add(parent_id)

            try:
                parents = self._controller.get_parents(parent_id).parents
            except NotFoundError:
                # An ancestor invisible to the vault account is outside every vault.
                self._deny(item, root_folder_id)
            hops += 1

    def _deny(self, item: FileItem, root_folder_id: str) -> NoReturn:
        logger.warning(
            "Scope violation: %s is not under root %s", item.file_id, root_folder_id
        )
        raise ForbiddenScopeError(
            "Forbidden: item is outside your folder",
            details={"fileId": item.file_id},
        )
