from __future__ import annotations

import mimetypes
from typing import Optional

FOLDER_MIME: str = "application/vnd.google-apps.folder"
DEFAULT_UPLOAD_MIME: str = "application/octet-stream"


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def upload_mime_type(filename: str, declared: Optional[str] = None) -> str:
    """
    Pick the MIME type sent with a media upload.

    The client-declared type wins unless it is empty or the generic
    octet-stream; then the type is guessed from the file extension.
    """
    if declared and declared != DEFAULT_UPLOAD_MIME:
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_UPLOAD_MIME
