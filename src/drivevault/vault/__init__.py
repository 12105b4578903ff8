"""Per-user folder isolation: root resolution, scope guard, query building."""

from __future__ import annotations

from .profile_store import InMemoryProfileStore, JsonFileProfileStore, ProfileStore
from .query_builder import (
    SortField,
    SortOrder,
    SortSpec,
    View,
    build_order_by,
    build_query,
    build_root_folder_query,
    escape_query_value,
    order_by_for_view,
    parse_view,
    validate_folder_id,
)
from .root_resolver import RootResolver, derive_root_folder_name, pick_root_folder
from .scope_guard import ScopeGuard, resolve_target_folder

__all__ = [
    "InMemoryProfileStore",
    "JsonFileProfileStore",
    "ProfileStore",
    "RootResolver",
    "ScopeGuard",
    "SortField",
    "SortOrder",
    "SortSpec",
    "View",
    "build_order_by",
    "build_query",
    "build_root_folder_query",
    "derive_root_folder_name",
    "escape_query_value",
    "order_by_for_view",
    "parse_view",
    "pick_root_folder",
    "resolve_target_folder",
    "validate_folder_id",
]
