"""
theme_admin/schema.py
-----------------------------------------------------------------------------
Pydantic v2 models for the persisted theme record and every response body
returned by the Theme Admin API.

Design principles
-----------------
• Keep models thin – no I/O or business logic here.
• Field names are the camelCase keys written to ``themes.json`` and sent to
  the browser, so the document stays readable by the existing client page.
• The metadata document is validated on every load through ``ThemeIndex``;
  a record that does not match ``Theme`` is treated as a corrupt document.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, Field, TypeAdapter, field_validator

# -----------------------------------------------------------------------------
# Persisted record
# -----------------------------------------------------------------------------


class Theme(BaseModel):
    """
    Metadata for one uploaded theme package.

    Records are created by the upload handler and never mutated afterwards.
    ``id`` and ``filename`` are generated server-side; the four descriptive
    fields are stored exactly as the uploader submitted them.
    """

    id: str = Field(
        ...,
        description="Millisecond creation timestamp; unique lookup key.",
        examples=["1718031234567"],
    )
    name: str = Field(..., description="Display name supplied by the uploader.")
    version: str = Field(..., description="Free-form version string.", examples=["1.0.0"])
    developer: str = Field(..., description="Name of the uploading developer.")
    description: str = Field(..., description="Free-form description text.")
    filename: str = Field(
        ...,
        description="Stored blob name, ``theme_<id><ext>``.",
        examples=["theme_1718031234567.zip"],
    )
    uploadDate: str = Field(
        ...,
        description="ISO-8601 UTC timestamp assigned by the server at upload.",
    )
    fileSize: int = Field(..., ge=0, description="Size of the uploaded blob in bytes.")

    @field_validator("id", "filename")
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Generated keys must never be blank."""
        if not v:
            raise ValueError("must not be empty")
        return v


# The on-disk document is a flat JSON array of Theme records.
ThemeIndex = TypeAdapter(list[Theme])


# -----------------------------------------------------------------------------
# Preset entries
# -----------------------------------------------------------------------------


class PresetFile(NamedTuple):
    """One file of the starter theme: archive-relative path and text content."""

    path: str
    content: str


# -----------------------------------------------------------------------------
# Response bodies
# -----------------------------------------------------------------------------


class ThemeListResponse(BaseModel):
    """Response body for GET /themes."""

    success: bool = True
    themes: list[Theme] = Field(
        default_factory=list,
        description="All theme records in insertion order.",
    )


class UploadResponse(BaseModel):
    """Response body for a successful POST /upload-theme."""

    success: bool = True
    message: str = "Theme uploaded successfully"
    themeId: str = Field(..., description="Identifier of the newly stored theme.")


class ErrorResponse(BaseModel):
    """Uniform failure body: every error response has this shape."""

    success: bool = False
    error: str = Field(..., description="Human-readable error message.")
