"""
RenderPlan — one fully-specified ffmpeg invocation for one note.

Produced by renderer.planner.RenderPlanner, consumed exactly once by
renderer.batch.  The plan is complete before ffmpeg runs: inputs, the
ordered overlay descriptors, text files to materialise and the destination
path are all fixed here.  renderer.filtergraph turns it into the argument
list; nothing else builds ffmpeg syntax.

text_files lists the UTF-8 files referenced by `textfile=` overlays.  They
are written by the batch executor right before ffmpeg starts and removed
after it exits.
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from schemas.config import OverlayMode


class Resolution(BaseModel):
    """Output resolution. Vertical 9:16 by default."""
    width: int = 1080
    height: int = 1920


class BackgroundInput(BaseModel):
    """Looped background: `-loop 1` for stills, `-stream_loop -1` for clips."""
    path: str
    kind: Literal["image", "video"] = "image"


class AudioInput(BaseModel):
    """Background music, volume-scaled with fade in/out."""
    path: str
    volume: float = 0.27
    fade_seconds: float = 0.8


class DrawTextOverlay(BaseModel):
    """
    One drawtext clause.  Exactly one of text / textfile is set.

    role: "title" | "body" | "line" | "watermark"
    start / end: visibility window in seconds (enable=between(t,start,end)).
    """
    role: str
    text: Optional[str] = None
    textfile: Optional[str] = None
    fontfile: str
    fontsize: int
    fontcolor: str = "white"
    line_spacing: int = 0
    x: str = "(w-text_w)/2"
    y: str = "(h-text_h)/2"
    start: float = 0.0
    end: float
    box: bool = False
    boxcolor: str = "black@0.45"
    boxborderw: int = 0
    shadowcolor: Optional[str] = None
    shadowx: int = 0
    shadowy: int = 0

    @model_validator(mode="after")
    def _one_text_source(self) -> "DrawTextOverlay":
        if (self.text is None) == (self.textfile is None):
            raise ValueError("DrawTextOverlay needs exactly one of text or textfile")
        if self.end < self.start:
            raise ValueError(f"overlay window ends before it starts ({self.start} > {self.end})")
        return self


class TextFile(BaseModel):
    """Scratch text file backing a `textfile=` overlay."""
    path: str
    content: str


class EncodingSettings(BaseModel):
    """Output codec parameters (8-bit H.264, optional AAC)."""
    video_codec: str = "libx264"
    crf: int = 18
    pix_fmt: str = "yuv420p"
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"


class RenderPlan(BaseModel):
    """
    Render plan for a single note.

    output_path: <out_root>/<date>/<slug>.<slot>.<suffix>.mp4
    """
    source_path: str
    title: str = ""
    mode: OverlayMode = OverlayMode.BLOCK
    resolution: Resolution = Field(default_factory=Resolution)
    fps: int = 30
    duration_seconds: float = Field(gt=0)
    background: BackgroundInput
    audio: Optional[AudioInput] = None
    overlays: list[DrawTextOverlay] = Field(default_factory=list)
    text_files: list[TextFile] = Field(default_factory=list)
    encoding: EncodingSettings = Field(default_factory=EncodingSettings)
    output_path: str
