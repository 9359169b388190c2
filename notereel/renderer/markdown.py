"""
Markdown note reader: frontmatter split + render metadata extraction.

Frontmatter is a leading YAML block fenced by `---` lines, parsed with
PyYAML.  Anything that does not parse to a mapping is treated as "no
frontmatter"; a YAML syntax error propagates to the caller (the batch loop
logs it as a failed document).

Resolution rules:
  title     frontmatter `title` → first `# Heading` in the body → file stem
  duration  frontmatter `duration` → --dur override → 12 s
            (non-numeric / non-positive values fall through, never raise)
  lines     bullet / numbered list items if any, else blank-line separated
            paragraphs with whitespace collapsed
"""
from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from schemas.config import DEFAULT_DURATION_SECONDS
from schemas.document import RenderMetadata, SourceDocument

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<header>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)
_HEADING_RE = re.compile(r"^#\s+(.+)", re.MULTILINE)
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+\.)\s+(\S.*?)\s*$")
_PARAGRAPH_BREAK_RE = re.compile(r"\r?\n[ \t]*\r?\n")
_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_document(text: str, path: str) -> SourceDocument:
    """Split *text* into frontmatter mapping and body."""
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return SourceDocument(path=path, raw=text, frontmatter={}, body=text)

    header = match.group("header")
    data = yaml.safe_load(header) if header.strip() else None
    if not isinstance(data, dict):
        if data is not None:
            logger.debug("Frontmatter in %s is not a mapping — ignored.", path)
        data = {}
    frontmatter = {str(k): v for k, v in data.items()}
    return SourceDocument(
        path=path, raw=text, frontmatter=frontmatter, body=text[match.end():],
    )


def read_document(path: Path) -> SourceDocument:
    """Read a note from disk (UTF-8) and split its frontmatter."""
    path = Path(path)
    return parse_document(path.read_text(encoding="utf-8"), str(path))


def extract_metadata(
    document: SourceDocument,
    duration_override: float = 0.0,
) -> RenderMetadata:
    """Derive title, body lines, duration and asset refs from *document*."""
    fm = document.frontmatter
    return RenderMetadata(
        title=resolve_title(document),
        body_lines=extract_lines(document.body),
        duration_seconds=resolve_duration(fm.get("duration"), duration_override),
        background_ref=_optional_ref(fm.get("bg")),
        audio_ref=_optional_ref(fm.get("bgm")),
    )


def resolve_title(document: SourceDocument) -> str:
    title = document.frontmatter.get("title")
    if title is not None and str(title).strip():
        return str(title).strip()
    heading = _HEADING_RE.search(document.body)
    if heading:
        return heading.group(1).strip()
    return Path(document.path).stem


def resolve_duration(
    frontmatter_value: Any,
    override: float = 0.0,
    default: float = DEFAULT_DURATION_SECONDS,
) -> float:
    for candidate in (frontmatter_value, override):
        seconds = _positive_float(candidate)
        if seconds is not None:
            return seconds
    return default


def extract_lines(body: str) -> list[str]:
    """
    List items (markers stripped) in source order; if the body has none,
    paragraphs with internal whitespace collapsed.
    """
    items: list[str] = []
    for line in body.splitlines():
        m = _LIST_ITEM_RE.match(line)
        if m:
            items.append(m.group(1))
    if items:
        return items

    paragraphs = (
        _WHITESPACE_RE.sub(" ", block).strip()
        for block in _PARAGRAPH_BREAK_RE.split(body)
    )
    return [p for p in paragraphs if p]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _positive_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


def _optional_ref(value: Any) -> Optional[str]:
    if value is None:
        return None
    ref = str(value).strip()
    return ref or None
