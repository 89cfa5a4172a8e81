"""
theme_admin/errors.py
-----------------------------------------------------------------------------
Error taxonomy shared by the store, the upload/download handlers and the
HTTP layer.

Every error carries the HTTP status it maps to and the message shown to the
client.  ``main.py`` registers a single exception handler for
``ThemeAdminError`` that renders ``{"success": false, "error": message}``,
so domain modules never import FastAPI.

Status mapping
--------------
ValidationError  → 400  (missing required field or file)
NotFound         → 404  (unknown theme id)
StoreError       → 500  (metadata document unreadable, corrupt or unwritable)
UploadFailed     → 500  (unexpected failure while storing an upload)
UploadTooLarge   → 413  (file exceeds the configured upload limit)
DownloadFailed   → 500  (blob missing or unreadable)
PresetFailed     → 500  (starter archive could not be built)
"""

from __future__ import annotations


class ThemeAdminError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ThemeAdminError):
    status_code = 400
    default_message = "All fields are required"


class NotFound(ThemeAdminError):
    status_code = 404
    default_message = "Theme not found"


class StoreError(ThemeAdminError):
    status_code = 500
    default_message = "Theme metadata could not be read or written"


class UploadFailed(ThemeAdminError):
    status_code = 500
    default_message = "Upload failed"


class DownloadFailed(ThemeAdminError):
    status_code = 500
    default_message = "Download failed"


class PresetFailed(ThemeAdminError):
    status_code = 500
    default_message = "Failed to generate preset"


class UploadTooLarge(ThemeAdminError):
    status_code = 413
    default_message = "File too large"
