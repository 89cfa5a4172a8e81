"""
theme_admin/downloads.py
-----------------------------------------------------------------------------
Download handler: resolve a theme id to its stored blob and return the raw
bytes together with the stored filename.

The caller (``main.py``) wraps the result in a ``Response`` with the zip
content type and an ``attachment`` disposition.  No self-healing is done: a
record whose blob has gone missing is reported as ``DownloadFailed``.
"""

from __future__ import annotations

import logging

from theme_admin.errors import DownloadFailed, NotFound, StoreError
from theme_admin.theme_store import ThemeStore

logger = logging.getLogger(__name__)


def load_theme_file(store: ThemeStore, theme_id: str) -> tuple[bytes, str]:
    """
    Read the stored package for ``theme_id``.

    Returns
    -------
    tuple[bytes, str] : The blob bytes and the stored filename.

    Raises
    ------
    NotFound       : If no record has this id.
    DownloadFailed : If the index cannot be read or the blob cannot be read.
    """
    try:
        theme = store.get_theme(theme_id)
    except StoreError as exc:
        raise DownloadFailed() from exc

    if theme is None:
        logger.warning("Download requested for unknown theme %r", theme_id)
        raise NotFound()

    try:
        data = store.blob_path(theme.filename).read_bytes()
    except (OSError, StoreError) as exc:
        logger.error("Blob for theme %s unavailable: %s", theme_id, exc)
        raise DownloadFailed() from exc

    return data, theme.filename
