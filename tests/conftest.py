"""Shared fixtures for the Theme Admin test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from theme_admin.main import app, get_store
from theme_admin.schema import Theme
from theme_admin.theme_store import ThemeStore


@pytest.fixture()
def themes_dir(tmp_path: Path) -> Path:
    """Storage directory that does not exist until something is written."""
    return tmp_path / "themes"


@pytest.fixture()
def store(themes_dir: Path) -> ThemeStore:
    return ThemeStore(themes_dir)


@pytest.fixture()
def client(store: ThemeStore) -> Iterator[TestClient]:
    """FastAPI test client wired to the temporary store."""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_theme():
    """Factory for valid Theme records with overridable fields."""

    def _make(theme_id: str = "1000", **overrides) -> Theme:
        fields = {
            "id": theme_id,
            "name": "Dawn",
            "version": "1.0.0",
            "developer": "Ann",
            "description": "x",
            "filename": f"theme_{theme_id}.zip",
            "uploadDate": "2026-01-05T09:30:00.000Z",
            "fileSize": 10,
        }
        fields.update(overrides)
        return Theme(**fields)

    return _make


@pytest.fixture()
def upload_form() -> dict:
    """The four descriptive form fields of a valid upload."""
    return {
        "themeName": "Dawn",
        "themeVersion": "1.0.0",
        "developerName": "Ann",
        "description": "x",
    }
