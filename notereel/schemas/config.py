"""
Run configuration and style sidecar models.

RunConfig is built once by the CLI from the invocation flags and passed
explicitly to discovery, the planner and the batch loop.  It is frozen:
tests construct arbitrary configurations without touching process state.

StyleConfig mirrors the optional YAML style sidecar.  Every field has a
built-in default so a missing or partial sidecar still yields a usable style.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FONT_PATH = "assets/fonts/NotoSansJP-Regular.ttf"
DEFAULT_DURATION_SECONDS = 12.0


class OverlayMode(str, Enum):
    """How body lines are put on screen."""

    BLOCK = "block"     # whole list at once, sourced from a text file
    SLICED = "sliced"   # one line at a time, equal time windows


class StyleConfig(BaseModel):
    """
    Text styling read from the style sidecar (YAML mapping).

    Position fields are ffmpeg drawtext expressions (w, h, text_w, text_h).
    """
    model_config = ConfigDict(frozen=True)

    font: Optional[str] = None
    font_size: int = Field(default=56, gt=0)
    title_font_size: int = Field(default=72, gt=0)
    font_color: str = "white"
    line_spacing: int = 10
    x: str = "(w-text_w)/2"
    y: str = "(h-text_h)/2"
    title_y: str = "110"
    shadow_color: Optional[str] = None
    shadow_x: int = 0
    shadow_y: int = 0
    box: bool = True
    box_color: str = "black@0.45"
    title_box_color: str = "black@0.50"
    box_border: int = 24
    title_in_body: bool = False
    mode: OverlayMode = OverlayMode.BLOCK
    watermark: Optional[str] = None
    watermark_font_size: int = Field(default=32, gt=0)
    title_seconds: float = Field(default=2.0, ge=0)
    sliced_y_fraction: float = Field(default=0.5, gt=0, lt=1)
    wrap_width: int = Field(default=960, gt=0)   # px available for body text


class RunConfig(BaseModel):
    """
    Immutable per-run configuration.

    font: explicit --font override; None defers to the style sidecar and
          then to DEFAULT_FONT_PATH (see font_path).
    mode / watermark: explicit CLI overrides of the style sidecar values.
    """
    model_config = ConfigDict(frozen=True)

    slot: str = "morning"
    weekday: str = "auto"
    file: Optional[str] = None
    max_renders: int = 99
    duration_override: float = 0.0
    tz: str = "Asia/Tokyo"
    data_dir: str = "data"
    out_root: str = "videos/queue"
    bg_dir: str = "assets/bg"
    bgm_dir: str = "assets/bgm"
    font: Optional[str] = None
    mode: Optional[OverlayMode] = None
    watermark: Optional[str] = None
    seed: Optional[int] = None
    dry_run: bool = False
    style: StyleConfig = Field(default_factory=StyleConfig)

    @property
    def font_path(self) -> str:
        return self.font or self.style.font or DEFAULT_FONT_PATH

    @property
    def overlay_mode(self) -> OverlayMode:
        return self.mode or self.style.mode

    @property
    def watermark_text(self) -> Optional[str]:
        text = self.watermark if self.watermark is not None else self.style.watermark
        return text or None
