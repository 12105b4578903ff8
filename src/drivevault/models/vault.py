"""Per-user vault records and upload inputs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional

from .file_item import FileItem


@dataclass(slots=True, frozen=True)
class RootFolderRecord:
    """Mapping of a caller identity to its private root folder."""

    owner_identity: str
    folder_id: str
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class UploadSource:
    """One uploaded file part, read from `stream` exactly once."""

    filename: str
    stream: BinaryIO
    mime_type: Optional[str] = None


@dataclass(slots=True)
class FileListing:
    """Items of one view, plus the folder context the client navigates with."""

    files: list[FileItem]
    current_folder_id: str
    root_folder_id: str
