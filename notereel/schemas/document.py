"""
Source note and the render metadata derived from it.

SourceDocument is the note as read from disk: raw text split into the
frontmatter mapping and the body that follows it.
RenderMetadata is what the planner needs from a note; it is derived once
and never mutated.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SourceDocument(BaseModel):
    """A Markdown note read once per render."""
    model_config = ConfigDict(frozen=True)

    path: str
    raw: str
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    body: str = ""


class RenderMetadata(BaseModel):
    """
    body_lines holds either list items or paragraph blocks, never both.
    background_ref / audio_ref are file names inside the asset directories.
    """
    model_config = ConfigDict(frozen=True)

    title: str = ""
    body_lines: list[str] = Field(default_factory=list)
    duration_seconds: float = Field(gt=0)
    background_ref: Optional[str] = None
    audio_ref: Optional[str] = None
