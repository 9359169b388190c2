"""
Render Planner — Markdown note → RenderPlan.

Steps per note:
  1. read + split frontmatter, derive RenderMetadata   (renderer.markdown)
  2. resolve background (required) and music (optional) (renderer.assets)
  3. build overlay descriptors for the configured mode   (renderer.overlays)
  4. choose a collision-free destination path

The planner has no side effects: it does not create directories, write the
overlay text files or run ffmpeg.  The returned plan lists the text files
it expects; renderer.batch materialises and removes them around the encode.
"""
from __future__ import annotations

import logging
import random
import re
import unicodedata
import uuid
from pathlib import Path
from typing import Optional

from renderer.assets import AssetResolver, is_video
from renderer.clock import Clock, date_stamp, local_now, system_clock
from renderer.markdown import extract_metadata, read_document
from renderer.overlays import block_overlays, sliced_overlays, watermark_overlay
from schemas.config import OverlayMode, RunConfig
from schemas.render_plan import AudioInput, BackgroundInput, RenderPlan

logger = logging.getLogger(__name__)

_SLUG_INVALID_RE = re.compile(r"[^\w\-]")
_SLUG_REPEAT_RE = re.compile(r"_+")
_SLUG_MAX_LEN = 40
_SUFFIX_MODULUS = 1_000_000


class EmptyContent(Exception):
    """The note has no list items or paragraphs to show; skip it."""


def slugify(value: str) -> str:
    """File-name-safe form of *value*: NFKC, word chars and '-' only, max 40 chars."""
    slug = unicodedata.normalize("NFKC", str(value))
    slug = _SLUG_INVALID_RE.sub("_", slug)
    slug = _SLUG_REPEAT_RE.sub("_", slug).strip("_")
    return slug[:_SLUG_MAX_LEN] or "note"


class RenderPlanner:
    """
    Builds one RenderPlan per note for a single run.

    resolver: asset source; defaults to the configured directories with a
              random.Random seeded from config.seed (None → OS entropy).
    clock:    returns an aware datetime; drives the dated output directory
              and the numeric filename suffix.
    work_dir: where overlay text files will be written (default: the parent
              of config.out_root, i.e. "videos/").
    """

    def __init__(
        self,
        config: RunConfig,
        resolver: Optional[AssetResolver] = None,
        clock: Clock = system_clock,
        work_dir: Optional[Path] = None,
    ) -> None:
        self.config = config
        self.resolver = resolver or AssetResolver(
            Path(config.bg_dir),
            Path(config.bgm_dir),
            rng=random.Random(config.seed),
        )
        self._clock = clock
        self.work_dir = Path(work_dir) if work_dir else Path(config.out_root).parent
        self._claimed: set[Path] = set()

    def plan(self, document_path: Path) -> RenderPlan:
        """
        Raises:
            EmptyContent:            note yields no body lines.
            MissingBackgroundAsset:  no background could be resolved.
            OSError / yaml.YAMLError: note unreadable or frontmatter invalid.
        """
        document_path = Path(document_path)
        document = read_document(document_path)
        meta = extract_metadata(document, self.config.duration_override)
        if not meta.body_lines:
            raise EmptyContent(f"No list items or paragraphs in {document_path}")

        background = self.resolver.background(meta.background_ref)
        music = self.resolver.audio(meta.audio_ref)

        config = self.config
        style = config.style
        font_path = config.font_path
        duration = meta.duration_seconds

        text_files = []
        if config.overlay_mode is OverlayMode.SLICED:
            overlays = sliced_overlays(meta, style, font_path)
        else:
            overlays, text_file = block_overlays(
                meta, style, font_path, self._text_file_path()
            )
            text_files.append(text_file)

        watermark = watermark_overlay(config.watermark_text, style, font_path, duration)
        if watermark is not None:
            overlays.append(watermark)

        plan = RenderPlan(
            source_path=str(document_path),
            title=meta.title,
            mode=config.overlay_mode,
            duration_seconds=duration,
            background=BackgroundInput(
                path=str(background),
                kind="video" if is_video(background) else "image",
            ),
            audio=AudioInput(path=str(music)) if music is not None else None,
            overlays=overlays,
            text_files=text_files,
            output_path=str(self.output_path(document_path)),
        )
        logger.debug(
            "Planned %s | mode=%s | dur=%.2fs | bg=%s | bgm=%s | overlays=%d",
            document_path, plan.mode.value, duration, background, music, len(overlays),
        )
        return plan

    def output_path(self, document_path: Path) -> Path:
        """
        <out_root>/<YYYY-MM-DD>/<slug>.<slot>.<NNNNNN>.mp4

        NNNNNN is the last six digits of the current epoch milliseconds,
        bumped while the name is already taken in this run or on disk.
        """
        now = local_now(self.config.tz, self._clock)
        out_dir = Path(self.config.out_root) / date_stamp(now)
        stem = slugify(Path(document_path).stem)
        suffix = int(now.timestamp() * 1000) % _SUFFIX_MODULUS
        while True:
            candidate = out_dir / f"{stem}.{self.config.slot}.{suffix:06d}.mp4"
            if candidate not in self._claimed and not candidate.exists():
                self._claimed.add(candidate)
                return candidate
            suffix = (suffix + 1) % _SUFFIX_MODULUS

    def _text_file_path(self) -> Path:
        return self.work_dir / f".txt_{uuid.uuid4().hex}.utf8.txt"
