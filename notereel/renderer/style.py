"""
Style sidecar loader.

The sidecar is a YAML mapping whose keys are StyleConfig fields, e.g.::

    font: assets/fonts/NotoSansJP-Bold.ttf
    font_size: 60
    line_spacing: 14
    y: (h-text_h)/2+80
    shadow_color: black@0.6
    shadow_x: 3
    shadow_y: 3
    title_in_body: true
    mode: sliced

A missing, unreadable or invalid sidecar falls back to the built-in
defaults; the reason is logged at debug level only.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from schemas.config import StyleConfig

logger = logging.getLogger(__name__)

DEFAULT_STYLE_PATH = "assets/style.yaml"


def load_style(path: Optional[str] = None) -> StyleConfig:
    """Load the style sidecar at *path* (default: assets/style.yaml)."""
    style_path = Path(path or DEFAULT_STYLE_PATH)
    try:
        raw = yaml.safe_load(style_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        logger.debug("Style %s not loaded (%s) — using defaults.", style_path, exc)
        return StyleConfig()

    if raw is None:
        return StyleConfig()
    if not isinstance(raw, dict):
        logger.debug("Style %s is not a mapping — using defaults.", style_path)
        return StyleConfig()

    try:
        style = StyleConfig.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Style %s is invalid (%d error(s)) — using defaults.", style_path, exc.error_count())
        return StyleConfig()

    logger.debug("Loaded style %s", style_path)
    return style
