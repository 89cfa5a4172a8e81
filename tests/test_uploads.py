"""
tests/test_uploads.py
─────────────────────────────────────────────────────────────────────────────
Tests for theme_admin/uploads.py — validation, blob naming, and the
temp-file → record → rename write sequence.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from theme_admin.errors import StoreError, UploadFailed, UploadTooLarge, ValidationError
from theme_admin.theme_store import ThemeStore
from theme_admin.uploads import MAX_UPLOAD_SIZE, save_upload, theme_filename, upload_timestamp

_NOW = datetime(2026, 1, 5, 9, 30, 0, 123000, tzinfo=timezone.utc)


def _upload(store: ThemeStore, **overrides):
    kwargs = {
        "original_name": "a.zip",
        "data": b"0123456789",
        "name": "Dawn",
        "version": "1.0.0",
        "developer": "Ann",
        "description": "x",
    }
    kwargs.update(overrides)
    return save_upload(store, **kwargs)


# ── Helpers ──────────────────────────────────────────────────────────────────


class TestThemeFilename:
    def test_keeps_extension(self) -> None:
        assert theme_filename("1000", "a.zip") == "theme_1000.zip"

    def test_only_last_suffix(self) -> None:
        assert theme_filename("1000", "dawn.v1.tar.gz") == "theme_1000.gz"

    def test_no_extension(self) -> None:
        assert theme_filename("1000", "README") == "theme_1000"

    def test_directory_parts_ignored(self) -> None:
        assert theme_filename("1000", "../../evil/dir.name/pkg.zip") == "theme_1000.zip"
        assert theme_filename("1000", "C:\\Users\\ann\\pkg.zip") == "theme_1000.zip"

    @pytest.mark.parametrize(
        "original",
        ['a.zip"; x=y', "a.zip%22", "a.z ip", "a.zip;", "a.été", "a." + "z" * 17],
    )
    def test_unsafe_extension_dropped(self, original: str) -> None:
        """Only short ASCII alphanumeric suffixes reach Content-Disposition."""
        assert theme_filename("1000", original) == "theme_1000"

    def test_alphanumeric_extension_kept(self) -> None:
        assert theme_filename("1000", "pack.ZIP7") == "theme_1000.ZIP7"


class TestUploadTimestamp:
    def test_millisecond_precision_with_z_suffix(self) -> None:
        assert upload_timestamp(_NOW) == "2026-01-05T09:30:00.123Z"

    def test_defaults_to_now(self) -> None:
        stamp = upload_timestamp()
        assert stamp.endswith("Z")
        datetime.fromisoformat(stamp.replace("Z", "+00:00"))


# ── save_upload ──────────────────────────────────────────────────────────────


class TestSaveUpload:
    def test_returns_record_with_submitted_fields(self, store: ThemeStore) -> None:
        theme = _upload(store, now=_NOW)
        assert theme.name == "Dawn"
        assert theme.version == "1.0.0"
        assert theme.developer == "Ann"
        assert theme.description == "x"
        assert theme.fileSize == 10
        assert theme.uploadDate == "2026-01-05T09:30:00.123Z"
        assert theme.id == str(int(_NOW.timestamp() * 1000))
        assert theme.filename == f"theme_{theme.id}.zip"

    def test_blob_written_byte_identical(self, store: ThemeStore) -> None:
        payload = bytes(range(256)) * 4
        theme = _upload(store, data=payload)
        assert store.blob_path(theme.filename).read_bytes() == payload

    def test_record_appended_to_store(self, store: ThemeStore) -> None:
        theme = _upload(store)
        assert store.list_themes() == [theme]

    def test_fields_stored_verbatim(self, store: ThemeStore) -> None:
        theme = _upload(store, name="  Dawn  ", description="line one\nline two")
        assert theme.name == "  Dawn  "
        assert store.list_themes()[0].description == "line one\nline two"

    def test_same_instant_uploads_get_unique_ids(self, store: ThemeStore) -> None:
        first = _upload(store, now=_NOW)
        second = _upload(store, now=_NOW)
        assert first.id != second.id
        assert first.filename != second.filename
        assert len(store.list_themes()) == 2

    def test_empty_file_is_accepted(self, store: ThemeStore) -> None:
        theme = _upload(store, data=b"")
        assert theme.fileSize == 0

    def test_only_blob_and_index_in_directory(self, store: ThemeStore, themes_dir: Path) -> None:
        theme = _upload(store)
        assert sorted(p.name for p in themes_dir.iterdir()) == sorted(
            [theme.filename, "themes.json"]
        )


class TestUploadValidation:
    @pytest.mark.parametrize("field", ["name", "version", "developer", "description"])
    def test_missing_field(self, store: ThemeStore, themes_dir: Path, field: str) -> None:
        with pytest.raises(ValidationError, match="All fields are required"):
            _upload(store, **{field: None})
        assert not themes_dir.exists()

    @pytest.mark.parametrize("field", ["name", "version", "developer", "description"])
    def test_empty_field(self, store: ThemeStore, themes_dir: Path, field: str) -> None:
        with pytest.raises(ValidationError):
            _upload(store, **{field: ""})
        assert not themes_dir.exists()

    @pytest.mark.parametrize("field", ["name", "version", "developer", "description"])
    def test_whitespace_only_field_accepted(self, store: ThemeStore, field: str) -> None:
        """Only absent or empty values are missing; whitespace is stored as sent."""
        theme = _upload(store, **{field: " "})
        assert getattr(theme, field) == " "

    def test_missing_file(self, store: ThemeStore, themes_dir: Path) -> None:
        with pytest.raises(ValidationError):
            _upload(store, data=None)
        assert not themes_dir.exists()

    def test_missing_filename(self, store: ThemeStore) -> None:
        with pytest.raises(ValidationError):
            _upload(store, original_name="")


class TestUploadFailure:
    def test_metadata_failure_removes_temp_blob(
        self, store: ThemeStore, themes_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_add(theme) -> None:
            raise StoreError("disk full")

        monkeypatch.setattr(store, "add_theme", broken_add)
        with pytest.raises(UploadFailed, match="Upload failed"):
            _upload(store)
        assert list(themes_dir.iterdir()) == []

    def test_existing_records_untouched_on_failure(
        self, store: ThemeStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        kept = _upload(store)

        def broken_add(theme) -> None:
            raise OSError("read-only filesystem")

        monkeypatch.setattr(store, "add_theme", broken_add)
        with pytest.raises(UploadFailed):
            _upload(store)
        assert store.list_themes() == [kept]

    def test_unwritable_directory_is_upload_failed(
        self, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        store = ThemeStore(blocker / "themes")
        with pytest.raises(UploadFailed):
            _upload(store)


class TestUploadSizeLimit:
    def test_default_limit_is_50_mb(self) -> None:
        assert MAX_UPLOAD_SIZE == 50 * 1024 * 1024

    def test_at_limit_accepted(self, store: ThemeStore) -> None:
        theme = _upload(store, data=b"x" * 16, max_size=16)
        assert theme.fileSize == 16

    def test_over_limit_rejected_before_writing(
        self, store: ThemeStore, themes_dir: Path
    ) -> None:
        with pytest.raises(UploadTooLarge) as exc_info:
            _upload(store, data=b"x" * 17, max_size=16)
        assert exc_info.value.status_code == 413
        assert not themes_dir.exists()

    def test_over_limit_keeps_existing_records(self, store: ThemeStore, themes_dir: Path) -> None:
        kept = _upload(store)
        with pytest.raises(UploadTooLarge):
            _upload(store, data=b"x" * 11, max_size=10)
        assert store.list_themes() == [kept]
        assert sorted(p.name for p in themes_dir.iterdir()) == sorted(
            [kept.filename, "themes.json"]
        )
