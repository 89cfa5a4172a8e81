"""
theme_admin/uploads.py
-----------------------------------------------------------------------------
Upload handler: validate an uploaded theme package, persist its bytes under
a generated filename and register its metadata record.

Write sequence
--------------
1. Validate the file and the four descriptive fields (``ValidationError``)
   and the file size against ``MAX_UPLOAD_SIZE`` (``UploadTooLarge``).
2. Ensure the storage directory exists.
3. Write the bytes to a hidden temp file inside the storage directory.
4. Append the ``Theme`` record to the store.
5. ``os.replace`` the temp file onto ``theme_<id><ext>``.

If step 4 or 5 fails the temp file is removed, so a failed upload leaves
neither a record nor an orphaned blob behind.  Everything after validation
surfaces to the caller as ``UploadFailed``.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath, PureWindowsPath

from dotenv import load_dotenv

from theme_admin.errors import UploadFailed, UploadTooLarge, ValidationError
from theme_admin.schema import Theme
from theme_admin.theme_store import ThemeStore

load_dotenv()

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

# Largest accepted theme package in bytes (50 MB unless THEMES_MAX_UPLOAD is set).
MAX_UPLOAD_SIZE: int = int(os.getenv("THEMES_MAX_UPLOAD", str(50 * 1024 * 1024)))

# Stored extensions are echoed into Content-Disposition; anything else is dropped.
_SAFE_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,16}")


def theme_filename(theme_id: str, original_name: str) -> str:
    """
    Build the stored blob name ``theme_<id><ext>``.

    ``<ext>`` is the last suffix of the client-supplied filename (``.zip``
    for ``Dawn.v1.zip``); any directory part the browser sent is ignored.
    A name without an extension, or with an extension containing anything
    but ASCII letters and digits, yields ``theme_<id>``.
    """
    base = PureWindowsPath(PurePosixPath(original_name).name).name
    ext = os.path.splitext(base)[1]
    if not _SAFE_EXTENSION.fullmatch(ext):
        ext = ""
    return f"theme_{theme_id}{ext}"


def upload_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2026-01-05T09:30:00.123Z``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _require(value: str | None) -> str:
    if not value:
        raise ValidationError()
    return value


def save_upload(
    store: ThemeStore,
    *,
    original_name: str | None,
    data: bytes | None,
    name: str | None,
    version: str | None,
    developer: str | None,
    description: str | None,
    now: datetime | None = None,
    max_size: int | None = None,
) -> Theme:
    """
    Store an uploaded theme package and return its new metadata record.

    Parameters
    ----------
    store         : The metadata store the record is appended to.
    original_name : Client-side filename; only its extension is kept.
    data          : Raw uploaded bytes (``None`` when no file was sent).
    name, version, developer, description
                  : Required descriptive fields, stored verbatim.
    now           : Upload time override (tests).
    max_size      : Size limit in bytes; defaults to ``MAX_UPLOAD_SIZE``.

    Returns
    -------
    Theme : The persisted record.

    Raises
    ------
    ValidationError : If the file or any descriptive field is missing or empty.
    UploadTooLarge  : If the file is larger than ``max_size``.
    UploadFailed    : If writing the blob or the metadata fails.
    """
    if data is None or not original_name:
        raise ValidationError()
    fields = [_require(v) for v in (name, version, developer, description)]

    limit = MAX_UPLOAD_SIZE if max_size is None else max_size
    if len(data) > limit:
        logger.warning(
            "Rejected %r: %d bytes exceeds the %d-byte limit", original_name, len(data), limit
        )
        raise UploadTooLarge(f"File too large (limit {limit:,} bytes)")

    now = now or datetime.now(timezone.utc)
    tmp_name: str | None = None
    try:
        store.ensure_directory()
        theme_id = store.new_theme_id(now.timestamp())
        filename = theme_filename(theme_id, original_name)

        fd, tmp_name = tempfile.mkstemp(dir=store.themes_dir, prefix=".upload-", suffix=".part")
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)

        theme = Theme(
            id=theme_id,
            name=fields[0],
            version=fields[1],
            developer=fields[2],
            description=fields[3],
            filename=filename,
            uploadDate=upload_timestamp(now),
            fileSize=len(data),
        )
        store.add_theme(theme)
        os.replace(tmp_name, store.blob_path(filename))
        tmp_name = None
    except Exception as exc:
        logger.exception("Upload of %r failed", original_name)
        raise UploadFailed() from exc
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)

    logger.info("Stored theme %s (%s, %d bytes)", theme.id, theme.filename, theme.fileSize)
    return theme
