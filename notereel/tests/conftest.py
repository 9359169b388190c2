"""
Shared pytest fixtures for notereel/tests/.

Provides:
  - workspace: a temp project root with data/, assets/bg, assets/bgm
    (background PNGs generated with Pillow, not committed binaries)
  - require_ffmpeg: skip-marker for tests that need the ffmpeg binary
"""
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest
from PIL import Image

# Small solid-colour stills; ffmpeg scales them to 1080x1920.
_BACKGROUND_COLORS: dict[str, tuple[int, int, int]] = {
    "a.png": (200, 60, 60),
    "b.jpg": (60, 200, 60),
}


def make_background(path: Path, color: tuple[int, int, int] = (60, 60, 200)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (108, 192), color=color).save(str(path))
    return path


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    """
    Temp project root:

        assets/bg/a.png, assets/bg/b.jpg, assets/bg/notes.txt (ignored)
        assets/bgm/            (empty → silent renders)
        data/
    """
    bg_dir = tmp_path / "assets" / "bg"
    for name, color in _BACKGROUND_COLORS.items():
        make_background(bg_dir / name, color)
    (bg_dir / "notes.txt").write_text("not an asset", encoding="utf-8")
    (tmp_path / "assets" / "bgm").mkdir(parents=True)
    (tmp_path / "data").mkdir()
    return tmp_path


# ---------------------------------------------------------------------------
# FFmpeg availability check
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def require_ffmpeg():
    """Skip the test if ffmpeg is not available on PATH."""
    if shutil.which("ffmpeg") is None:
        pytest.skip("ffmpeg not available — skipping render test.")
    result = subprocess.run(
        ["ffmpeg", "-version"], capture_output=True, timeout=5
    )
    if result.returncode != 0:
        pytest.skip("ffmpeg not available — skipping render test.")
