"""Field projections for Google Drive API responses."""

from __future__ import annotations

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "parents,"
    "trashed,"
    "createdTime,"
    "modifiedTime,"
    "size,"
    "quotaBytesUsed,"
    "webViewLink,"
    "webContentLink,"
    "thumbnailLink,"
    "iconLink"
)

# Ancestry walks only need the hierarchy.
PARENT_FIELDS: str = "id,name,mimeType,parents,trashed"

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"
LOOKUP_FIELDS: str = "nextPageToken,files(id,name,parents,createdTime)"
