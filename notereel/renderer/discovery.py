"""
Candidate note discovery.

With an explicit file, that file is the only candidate.  Otherwise every
`.md` file (any case) directly inside these roots, in this order:

    <data>/<slot>/<weekday>
    <data>/<slot>/_default
    <data>/<slot>

All roots are scanned (no short-circuit); the combined list is sorted by
path.  Missing roots are ignored; unreadable roots are logged and ignored.
"""
from __future__ import annotations

import logging
from pathlib import Path

from renderer.clock import Clock, local_now, system_clock, weekday_code
from schemas.config import RunConfig

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "_default"


def resolve_weekday(config: RunConfig, clock: Clock = system_clock) -> str:
    """config.weekday, or today's weekday in config.tz when empty / "auto"."""
    weekday = (config.weekday or "").strip().lower()
    if not weekday or weekday == "auto":
        return weekday_code(local_now(config.tz, clock))
    return weekday


def candidate_roots(config: RunConfig, weekday: str) -> list[Path]:
    base = Path(config.data_dir) / config.slot
    return [base / weekday, base / DEFAULT_ROOT, base]


def list_candidates(config: RunConfig, weekday: str) -> list[Path]:
    if config.file:
        return [Path(config.file)]

    found: list[Path] = []
    for root in candidate_roots(config, weekday):
        if not root.is_dir():
            continue
        try:
            entries = list(root.iterdir())
        except OSError as exc:
            logger.warning("Cannot list %s: %s", root, exc)
            continue
        found.extend(p for p in entries if p.is_file() and p.name.lower().endswith(".md"))
    return sorted(found, key=str)
