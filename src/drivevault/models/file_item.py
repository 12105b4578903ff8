"""Data model for Drive items."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from drivevault.util.mime import is_folder
from drivevault.util.time import to_rfc3339


@dataclass(slots=True)
class FileItem:
    """
    A Drive file or folder as returned to the web client.

    Notes:
        - `file_id` is opaque; nothing in drivevault parses it.
        - `parents` holds immediate parent IDs only.
    """

    file_id: str
    name: str
    mime_type: str
    parents: list[str] = field(default_factory=list)

    trashed: bool = False
    size: Optional[int] = None
    quota_bytes_used: Optional[int] = None
    created_time: Optional[datetime] = None
    modified_time: Optional[datetime] = None

    web_view_link: Optional[str] = None
    web_content_link: Optional[str] = None
    thumbnail_link: Optional[str] = None
    icon_link: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return is_folder(self.mime_type)

    def to_dict(self) -> dict[str, Any]:
        """Render in Drive's camelCase shape, omitting absent optional fields."""
        out: dict[str, Any] = {
            "id": self.file_id,
            "name": self.name,
            "mimeType": self.mime_type,
            "parents": list(self.parents),
            "trashed": self.trashed,
        }
        optional: dict[str, Any] = {
            "size": str(self.size) if self.size is not None else None,
            "quotaBytesUsed": (
                str(self.quota_bytes_used) if self.quota_bytes_used is not None else None
            ),
            "createdTime": to_rfc3339(self.created_time) if self.created_time else None,
            "modifiedTime": to_rfc3339(self.modified_time) if self.modified_time else None,
            "webViewLink": self.web_view_link,
            "webContentLink": self.web_content_link,
            "thumbnailLink": self.thumbnail_link,
            "iconLink": self.icon_link,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out
