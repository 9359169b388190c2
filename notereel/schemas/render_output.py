"""
RenderOutput / RunSummary — what a run produced.

RenderOutput records one successful render (or, in dry-run mode, one plan
that would have been rendered).  RunSummary is printed by the CLI as JSON
at the end of every run.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RenderOutput(BaseModel):
    """One rendered note."""
    source_path: str
    video_path: str
    duration_seconds: float
    background_path: str
    audio_path: Optional[str] = None   # None → silent output
    mode: str
    rendered_at: str                   # ISO 8601, "dry-run" when nothing was encoded
    ffmpeg_version: str                # "dry-run" when ffmpeg was not invoked


class SkippedDocument(BaseModel):
    """A note that was not rendered, with the reason that was logged."""
    source_path: str
    reason: str


class RunSummary(BaseModel):
    """Counters for one batch run. Only `rendered` counts toward --max."""
    slot: str
    weekday: str
    candidates: int = 0
    rendered: list[RenderOutput] = Field(default_factory=list)
    skipped: list[SkippedDocument] = Field(default_factory=list)
    failed: list[SkippedDocument] = Field(default_factory=list)

    @property
    def rendered_count(self) -> int:
        return len(self.rendered)
