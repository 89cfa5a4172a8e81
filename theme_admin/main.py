"""
theme_admin/main.py
-----------------------------------------------------------------------------
FastAPI application entrypoint for Theme Admin.

This module is a **thin routing layer**: each route handler calls into a
domain module and turns the result into an HTTP response.  All storage and
packaging logic lives elsewhere:

Domain modules
~~~~~~~~~~~~~~
- ``theme_admin.schema``      – Pydantic models for records and responses.
- ``theme_admin.errors``      – Error taxonomy with HTTP status codes.
- ``theme_admin.theme_store`` – JSON-document-backed metadata store.
- ``theme_admin.uploads``     – Upload validation and blob persistence.
- ``theme_admin.downloads``   – Theme id → stored blob resolution.
- ``theme_admin.presets``     – Starter-theme files and in-memory zip.

Run with:
    uvicorn theme_admin.main:app --reload --host 127.0.0.1 --port 8300

Endpoints
---------
GET  /                       → serves index.html (admin page)
GET  /themes                 → list every theme record
POST /upload-theme           → multipart upload of a theme package
GET  /download-theme/{id}    → download a stored theme package
GET  /download-preset        → download the starter-theme zip

The four API routes are also served under ``/api`` (``/api/themes`` etc.),
which is what the admin page's JavaScript calls.

Error bodies
------------
Every failure is rendered as ``{"success": false, "error": "<message>"}``
by the ``ThemeAdminError`` handler below; the status code comes from the
error class (400 / 404 / 413 / 500).

Environment variables
---------------------
THEMES_DIR   – Storage directory for blobs and the index (default: ./themes
               next to the project root).
THEMES_INDEX – Name of the index document inside THEMES_DIR
               (default: themes.json).
THEMES_MAX_UPLOAD – Largest accepted theme package in bytes
               (default: 52428800, i.e. 50 MB).
"""

from __future__ import annotations

import logging
import os
import tomllib
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, File, Form, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from theme_admin.downloads import load_theme_file
from theme_admin.errors import (
    DownloadFailed,
    PresetFailed,
    StoreError,
    ThemeAdminError,
    ValidationError,
)
from theme_admin.presets import PRESET_ARCHIVE_NAME, build_preset_zip, generate_theme_preset
from theme_admin.schema import ErrorResponse, ThemeListResponse, UploadResponse
from theme_admin.theme_store import DEFAULT_INDEX_NAME, ThemeStore
from theme_admin.uploads import MAX_UPLOAD_SIZE, save_upload

# -----------------------------------------------------------------------------
# Bootstrap
# -----------------------------------------------------------------------------

load_dotenv()

logger = logging.getLogger(__name__)

# Resolve paths relative to this file so the app works regardless of the
# working directory from which uvicorn is launched.
_HERE = Path(__file__).parent
_TEMPLATES_DIR = _HERE / "templates"
_STATIC_DIR = _HERE / "static"

_THEMES_DIR = Path(os.getenv("THEMES_DIR", str(_HERE.parent / "themes"))).expanduser()
_THEMES_INDEX: str = os.getenv("THEMES_INDEX", DEFAULT_INDEX_NAME)

_ZIP_MEDIA_TYPE = "application/zip"

# Upload cap in bytes; THEMES_MAX_UPLOAD overrides the 50 MB default.
_MAX_UPLOAD_SIZE: int = MAX_UPLOAD_SIZE


def _read_app_version() -> str:
    """Version from pyproject.toml in a source checkout, else installed metadata."""
    pyproject = _HERE.parent / "pyproject.toml"
    if pyproject.is_file():
        with open(pyproject, "rb") as fh:
            return tomllib.load(fh)["project"]["version"]
    try:
        return package_version("theme-admin")
    except PackageNotFoundError:
        return "0.0.0"


_APP_VERSION: str = _read_app_version()

# One store per process; handlers receive it through ``get_store`` so tests
# can point the app at a temporary directory via dependency_overrides.
_store = ThemeStore(_THEMES_DIR, _THEMES_INDEX)


def get_store() -> ThemeStore:
    """FastAPI dependency returning the process-wide theme store."""
    return _store


# -----------------------------------------------------------------------------
# FastAPI app + error handlers
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Theme Admin",
    description=(
        "Small admin tool for uploading, listing and downloading storefront "
        "theme packages, plus a generated starter-theme download."
    ),
    version=_APP_VERSION,
)

app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")

templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))


def _error_response(exc: ThemeAdminError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


@app.exception_handler(ThemeAdminError)
async def theme_admin_error_handler(request: Request, exc: ThemeAdminError) -> JSONResponse:
    """Render any domain error as ``{success: false, error}``."""
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Malformed form data (e.g. ``themeFile`` sent as a plain text field) is
    reported like any other missing field instead of FastAPI's default 422.
    """
    logger.warning("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return _error_response(ValidationError())


# -----------------------------------------------------------------------------
# Page
# -----------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(request: Request) -> HTMLResponse:
    """Serve the admin page; the JS loads the theme list itself."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_version": _APP_VERSION,
            "preset_name": PRESET_ARCHIVE_NAME,
        },
    )


# -----------------------------------------------------------------------------
# API routes
# -----------------------------------------------------------------------------

router = APIRouter()


@router.get("/themes", response_model=ThemeListResponse, summary="List uploaded themes")
def list_themes(store: ThemeStore = Depends(get_store)) -> ThemeListResponse:
    """
    Return every theme record in insertion order.

    A storage directory or index that does not exist yet yields an empty
    list.  A corrupt or unreadable index is a 500.
    """
    try:
        themes = store.list_themes()
    except Exception as exc:
        logger.exception("Failed to load themes from %s", store.index_path)
        raise StoreError("Failed to load themes") from exc
    return ThemeListResponse(themes=themes)


@router.post("/upload-theme", response_model=UploadResponse, summary="Upload a theme package")
async def upload_theme(
    themeFile: UploadFile | None = File(None),
    themeName: str | None = Form(None),
    themeVersion: str | None = Form(None),
    developerName: str | None = Form(None),
    description: str | None = Form(None),
    store: ThemeStore = Depends(get_store),
) -> UploadResponse:
    """
    Store an uploaded theme package and register its metadata.

    The form must carry ``themeFile`` plus non-empty ``themeName``,
    ``themeVersion``, ``developerName`` and ``description``.

    Raises
    ------
    ValidationError (400) : A field or the file is missing.
    UploadTooLarge (413)  : The file exceeds ``THEMES_MAX_UPLOAD`` bytes.
    UploadFailed (500)    : Writing the blob or the index failed.
    """
    data: bytes | None = None
    original_name: str | None = None
    if themeFile is not None and themeFile.filename:
        original_name = themeFile.filename
        # Read at most one byte past the limit so oversized bodies are never
        # held in memory in full.
        data = await themeFile.read(_MAX_UPLOAD_SIZE + 1)

    theme = await run_in_threadpool(
        save_upload,
        store,
        original_name=original_name,
        data=data,
        name=themeName,
        version=themeVersion,
        developer=developerName,
        description=description,
        max_size=_MAX_UPLOAD_SIZE,
    )
    return UploadResponse(themeId=theme.id)


@router.get("/download-theme/{theme_id}", summary="Download a stored theme package")
def download_theme(theme_id: str, store: ThemeStore = Depends(get_store)) -> Response:
    """
    Return the stored zip for ``theme_id`` as an attachment.

    Raises
    ------
    NotFound (404)       : No theme has this id.
    DownloadFailed (500) : The blob or the index could not be read.
    """
    try:
        data, filename = load_theme_file(store, theme_id)
    except ThemeAdminError:
        raise
    except Exception as exc:
        logger.exception("Download of theme %r failed", theme_id)
        raise DownloadFailed() from exc

    return Response(
        content=data,
        media_type=_ZIP_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/download-preset", summary="Download the starter-theme zip")
def download_preset() -> Response:
    """Build the starter theme in memory and return it as ``theme-preset.zip``."""
    try:
        zip_bytes = build_preset_zip(generate_theme_preset())
    except Exception as exc:
        logger.exception("Failed to build preset archive")
        raise PresetFailed() from exc

    return Response(
        content=zip_bytes,
        media_type=_ZIP_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{PRESET_ARCHIVE_NAME}"'},
    )


app.include_router(router)
app.include_router(router, prefix="/api", include_in_schema=False)
