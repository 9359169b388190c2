"""
Background / music asset resolution.

Priority for both kinds:
  1. explicit file name from frontmatter (bg / bgm), if it exists in the dir
  2. uniform random pick among matching files in the dir
A background is mandatory (MissingBackgroundAsset); music is optional and
degrades to silence.

Randomness comes from an injected random.Random so tests can pass a seeded
or stubbed source.  Candidates are sorted before picking, so a seeded source
gives the same choice regardless of directory listing order.
"""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

BACKGROUND_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".mp4", ".mov", ".webm"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".webm"})
AUDIO_EXTENSIONS = frozenset({".mp3", ".wav"})


class MissingBackgroundAsset(Exception):
    """No background image/video could be resolved for a note."""


class AssetResolver:
    """
    Resolves background and music paths for one run.

    Usage::

        resolver = AssetResolver(Path("assets/bg"), Path("assets/bgm"), rng=random.Random(7))
        bg = resolver.background("beach.png")
        music = resolver.audio(None)
    """

    def __init__(
        self,
        bg_dir: Path,
        bgm_dir: Path,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.bg_dir = Path(bg_dir)
        self.bgm_dir = Path(bgm_dir)
        self._rng = rng or random.Random()

    def background(self, ref: Optional[str] = None) -> Path:
        """Return the background path; raise MissingBackgroundAsset if none."""
        path = self._resolve(self.bg_dir, ref, BACKGROUND_EXTENSIONS)
        if path is None:
            raise MissingBackgroundAsset(f"No background in {self.bg_dir}")
        return path

    def audio(self, ref: Optional[str] = None) -> Optional[Path]:
        """Return the music path, or None for a silent render."""
        path = self._resolve(self.bgm_dir, ref, AUDIO_EXTENSIONS)
        if path is None:
            logger.debug("No music in %s — rendering silent.", self.bgm_dir)
        return path

    def _resolve(
        self,
        directory: Path,
        ref: Optional[str],
        extensions: frozenset[str],
    ) -> Optional[Path]:
        if ref:
            explicit = directory / ref
            if explicit.is_file():
                return explicit
            logger.warning("%s not found — picking at random from %s.", explicit, directory)

        candidates = list_candidates(directory, extensions)
        if not candidates:
            return None
        return self._rng.choice(candidates)


def list_candidates(directory: Path, extensions: frozenset[str]) -> list[Path]:
    """Files directly inside *directory* whose suffix (any case) is in *extensions*."""
    try:
        entries = sorted(Path(directory).iterdir())
    except OSError as exc:
        logger.debug("Cannot list %s: %s", directory, exc)
        return []
    return [p for p in entries if p.is_file() and p.suffix.lower() in extensions]


def is_video(path: Path) -> bool:
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS
