"""
Line wrapping for overlay text, measured with the render font.

ffmpeg's drawtext does not wrap; long bullets would run off the 1080 px
frame.  Lines are wrapped here with Pillow font metrics before they reach
the plan.  Text with spaces wraps on word boundaries; text without spaces
(e.g. Japanese) wraps per character, as does any single word wider than a
row.

If the font file cannot be loaded, Pillow's built-in font is used for
measuring so wrapping still happens (widths are then approximate).
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Union

from PIL import ImageFont

logger = logging.getLogger(__name__)

_Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


def wrap_line(text: str, font_path: str, font_size: int, max_width: int) -> list[str]:
    """Break *text* into rows no wider than *max_width* pixels."""
    font = _load_font(font_path, font_size)
    if _width(font, text) <= max_width:
        return [text]

    tokens = text.split(" ") if " " in text.strip() else list(text)
    joiner = " " if " " in text.strip() else ""

    rows: list[str] = []
    current = ""
    for token in tokens:
        candidate = f"{current}{joiner}{token}" if current else token
        if _width(font, candidate) <= max_width:
            current = candidate
        elif _width(font, token) > max_width:
            # e.g. "• " + an unspaced Japanese sentence: continue the row per character
            prefix = f"{current}{joiner}" if current else ""
            broken = _break_chars(font, prefix, token, max_width)
            rows.extend(broken[:-1])
            current = broken[-1]
        else:
            rows.append(current)
            current = token
    if current:
        rows.append(current)
    return rows


def wrap_text(text: str, font_path: str, font_size: int, max_width: int) -> str:
    """wrap_line() applied to every line of *text*; rows joined with newlines."""
    return "\n".join(
        row
        for line in text.split("\n")
        for row in (wrap_line(line, font_path, font_size, max_width) if line else [""])
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

@lru_cache(maxsize=16)
def _load_font(font_path: str, font_size: int) -> _Font:
    """Load a TrueType font or fall back to Pillow's built-in."""
    try:
        return ImageFont.truetype(font_path, size=font_size)
    except OSError as exc:
        logger.debug("Could not load font %r: %s — measuring with built-in", font_path, exc)

    try:
        return ImageFont.load_default(size=font_size)
    except TypeError:
        return ImageFont.load_default()


def _break_chars(font: _Font, prefix: str, token: str, max_width: int) -> list[str]:
    """Append *token* to *prefix* one character at a time, opening rows as needed."""
    rows: list[str] = []
    current = prefix
    for ch in token:
        if current.strip() and _width(font, current + ch) > max_width:
            rows.append(current)
            current = ch
        else:
            current += ch
    rows.append(current)
    return rows


def _width(font: _Font, text: str) -> float:
    return font.getlength(text)
