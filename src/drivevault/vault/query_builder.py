"""
Drive query (`q`) and `orderBy` construction from untrusted request values.

Every ID interpolated into a query is validated against the Drive ID
alphabet first, and every free-text value is escaped, so a request value can
never widen a query beyond the caller's scope.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional, Union

from drivevault.errors import InvalidFolderIdError, InvalidInputError
from drivevault.util.mime import FOLDER_MIME

FOLDER_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,256}")


class View(str, enum.Enum):
    MY_FILES = "my-files"
    RECENT = "recent"
    SHARED = "shared"
    TRASH = "trash"


class SortField(str, enum.Enum):
    NAME = "name"
    CREATED_TIME = "createdTime"
    SIZE = "size"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


# Drive has no plain "size" order key; quotaBytesUsed is the closest proxy.
ORDER_KEYS: dict[SortField, str] = {
    SortField.NAME: "folder,name",
    SortField.CREATED_TIME: "createdTime",
    SortField.SIZE: "quotaBytesUsed",
}

RECENT_ORDER_BY = "createdTime desc"


@dataclass(frozen=True)
class SortSpec:
    field: SortField = SortField.NAME
    order: SortOrder = SortOrder.ASC

    @classmethod
    def parse(cls, field: Optional[str], order: Optional[str]) -> "SortSpec":
        """
        Lenient parse of request values.

        An unknown field falls back to name ascending; an unknown order on a
        known field falls back to ascending.
        """
        try:
            sort_field = SortField(field) if field else SortField.NAME
        except ValueError:
            return cls()
        try:
            sort_order = SortOrder(order.lower()) if order else SortOrder.ASC
        except ValueError:
            sort_order = SortOrder.ASC
        return cls(field=sort_field, order=sort_order)


def validate_folder_id(value: Optional[str], *, field: str = "folderId") -> str:
    """Return `value` if it is a well-formed Drive ID, else raise InvalidFolderIdError."""
    if not isinstance(value, str) or not FOLDER_ID_PATTERN.fullmatch(value):
        raise InvalidFolderIdError(
            f"Invalid {field}",
            details={"field": field},
        )
    return value


def escape_query_value(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def parse_view(raw: Optional[str]) -> View:
    if not raw:
        return View.MY_FILES
    try:
        return View(raw)
    except ValueError as exc:
        raise InvalidInputError(
            f"Unknown view: must be one of {[v.value for v in View]}",
            details={"view": raw},
            cause=exc,
        ) from exc


def build_query(
    view: Union[View, str],
    target_folder_id: Optional[str],
    root_folder_id: str,
) -> str:
    """
    Build the `q` filter for a view.

    - my-files: direct children of the target folder, not trashed
    - recent:   direct children of the root folder, not trashed
    - shared:   items shared with the vault account, not trashed
    - trash:    direct children of the root folder, trashed
    """
    view = parse_view(view.value if isinstance(view, View) else view)
    root = validate_folder_id(root_folder_id, field="rootFolderId")

    if view is View.MY_FILES:
        target = validate_folder_id(target_folder_id, field="folderId")
        return f"'{target}' in parents and trashed = false"
    if view is View.RECENT:
        return f"'{root}' in parents and trashed = false"
    if view is View.SHARED:
        return "sharedWithMe = true and trashed = false"
    return f"'{root}' in parents and trashed = true"


def build_order_by(
    sort_field: Union[SortField, str, None],
    sort_order: Union[SortOrder, str, None] = None,
) -> str:
    field_raw = sort_field.value if isinstance(sort_field, SortField) else sort_field
    order_raw = sort_order.value if isinstance(sort_order, SortOrder) else sort_order
    spec = SortSpec.parse(field_raw, order_raw)
    return f"{ORDER_KEYS[spec.field]} {spec.order.value}"


def order_by_for_view(view: View, sort: SortSpec) -> str:
    """The recent view is always newest first; other views honour `sort`."""
    if view is View.RECENT:
        return RECENT_ORDER_BY
    return build_order_by(sort.field, sort.order)


def build_root_folder_query(folder_name: str, master_folder_id: str) -> str:
    """Query for non-trashed folders named `folder_name` directly under the master folder."""
    master = validate_folder_id(master_folder_id, field="masterFolderId")
    name = escape_query_value(folder_name)
    return (
        f"name = '{name}' and '{master}' in parents "
        f"and mimeType = '{FOLDER_MIME}' and trashed = false"
    )
