"""
theme_admin/theme_store.py
-----------------------------------------------------------------------------
JSON-document-backed registry of uploaded themes.

The store owns one directory containing the uploaded theme blobs and a
single index document (``themes.json`` by default) holding every ``Theme``
record as a flat JSON array in insertion order.

Consistency model
-----------------
• Every operation reads the whole document; there is no partial update.
  The index is expected to stay small (tens to low hundreds of records).
• ``add_theme`` runs its read-modify-write under an ``RLock`` so parallel
  uploads inside one process cannot lose records, and rewrites the document
  through a temp file + ``os.replace`` so a crash mid-write never leaves a
  truncated index behind.
• A missing directory or document means "no data yet" and lists as empty.
  A document that is not valid JSON, or whose records fail ``Theme``
  validation, raises ``StoreError`` instead of being silently discarded.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from threading import RLock

from pydantic import ValidationError as PydanticValidationError

from theme_admin.errors import StoreError
from theme_admin.schema import Theme, ThemeIndex

logger = logging.getLogger(__name__)

DEFAULT_INDEX_NAME: str = "themes.json"


class ThemeStore:
    """File-backed theme metadata store rooted at ``themes_dir``."""

    def __init__(self, themes_dir: Path, index_name: str = DEFAULT_INDEX_NAME) -> None:
        self.themes_dir = Path(themes_dir)
        self.index_path = self.themes_dir / index_name
        self._lock = RLock()
        self._last_id = 0

    # -------------------------------------------------------------------------
    # Directory
    # -------------------------------------------------------------------------

    def ensure_directory(self) -> None:
        """Create the storage directory if it does not exist yet."""
        try:
            self.themes_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create theme directory {self.themes_dir}: {exc}") from exc

    def blob_path(self, filename: str) -> Path:
        """
        Resolve a stored blob name to its path inside the storage directory.

        Raises
        ------
        StoreError
            If ``filename`` is empty or would resolve outside the directory
            (a hand-edited index must not turn downloads into arbitrary reads).
        """
        if not filename or Path(filename).name != filename or filename in (".", ".."):
            raise StoreError(f"Invalid theme filename: {filename!r}")
        return self.themes_dir / filename

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_themes(self) -> list[Theme]:
        """
        Return every theme record in insertion order.

        Returns an empty list when the directory or the index document does
        not exist, or when the document is empty.

        Raises
        ------
        StoreError
            If the document cannot be read, is not valid JSON, or contains
            records that do not validate as ``Theme``.
        """
        try:
            raw = self.index_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StoreError(f"Cannot read {self.index_path}: {exc}") from exc

        if not raw.strip():
            return []

        try:
            return ThemeIndex.validate_python(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            logger.warning("Theme index %s is corrupt: %s", self.index_path, exc)
            raise StoreError(f"Theme index {self.index_path} is corrupt") from exc

    def get_theme(self, theme_id: str) -> Theme | None:
        """Return the record whose ``id`` equals ``theme_id``, or ``None``."""
        for theme in self.list_themes():
            if theme.id == theme_id:
                return theme
        return None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def new_theme_id(self, now: float | None = None) -> str:
        """
        Generate a fresh theme id from the current time in milliseconds.

        The id is bumped past every id already in the index and every id this
        store has issued before, so two uploads inside the same millisecond
        still get distinct ids (and therefore distinct filenames).
        """
        stamp = int((time.time() if now is None else now) * 1000)
        with self._lock:
            taken = {theme.id for theme in self.list_themes()}
            candidate = max(stamp, self._last_id + 1)
            while str(candidate) in taken:
                candidate += 1
            self._last_id = candidate
            return str(candidate)

    def add_theme(self, theme: Theme) -> None:
        """
        Append ``theme`` to the index and rewrite the whole document.

        Raises
        ------
        StoreError
            If the id or filename is already present, or the document
            cannot be read or written.
        """
        with self._lock:
            themes = self.list_themes()
            for existing in themes:
                if existing.id == theme.id:
                    raise StoreError(f"Duplicate theme id {theme.id!r}")
                if existing.filename == theme.filename:
                    raise StoreError(f"Duplicate theme filename {theme.filename!r}")
            themes.append(theme)
            self._write_index(themes)

    def _write_index(self, themes: list[Theme]) -> None:
        """Atomically replace the index document with ``themes``."""
        self.ensure_directory()
        content = ThemeIndex.dump_json(themes, indent=2).decode("utf-8") + "\n"

        fd, tmp_name = tempfile.mkstemp(
            dir=self.themes_dir, prefix=f".{self.index_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_name, self.index_path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Cannot write {self.index_path}: {exc}") from exc
