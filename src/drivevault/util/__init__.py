from .mime import DEFAULT_UPLOAD_MIME, FOLDER_MIME, is_folder, upload_mime_type
from .time import normalize_dt, parse_rfc3339, parse_rfc3339_or_none, to_rfc3339

__all__ = [
    "FOLDER_MIME",
    "DEFAULT_UPLOAD_MIME",
    "is_folder",
    "upload_mime_type",
    "parse_rfc3339",
    "parse_rfc3339_or_none",
    "to_rfc3339",
    "normalize_dt",
]
