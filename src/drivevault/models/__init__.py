"""Public model exports for drivevault."""

from __future__ import annotations

from .file_item import FileItem
from .vault import FileListing, RootFolderRecord, UploadSource

__all__ = [
    "FileItem",
    "FileListing",
    "RootFolderRecord",
    "UploadSource",
]
