#!/usr/bin/env python3
"""
notereel — render Markdown notes into vertical (1080x1920) videos.

Usage::

    notereel --slot=morning --weekday=auto --max=2 --dur=12 --tz=Asia/Tokyo
    notereel --slot=night --weekday=mon --max=2 --mode=sliced --watermark=@me
    notereel --file=data/morning/mon/example.md --dry-run

Notes come from data/<slot>/<weekday>, data/<slot>/_default and data/<slot>;
videos land in videos/queue/<YYYY-MM-DD>/.  A RunSummary JSON document is
printed to stdout.  Per-note errors are logged, never turned into a
non-zero exit code.

sys.path is patched so that the flat imports used by renderer/, schemas/,
and tests/ resolve correctly from the installed package directory.
"""
from __future__ import annotations

import sys
from pathlib import Path

# When installed via pip, __file__ is inside site-packages/notereel/.
# Adding that directory to sys.path lets the sibling sub-packages
# (renderer, schemas, tests) be imported with their flat-import style.
_PKG_DIR = Path(__file__).resolve().parent
if str(_PKG_DIR) not in sys.path:
    sys.path.insert(0, str(_PKG_DIR))

import argparse
import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from renderer.batch import BatchRenderer, Runner
from renderer.clock import Clock, system_clock
from renderer.ffmpeg_runner import run_ffmpeg
from renderer.style import load_style
from schemas.config import OverlayMode, RunConfig

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# Argument parsing
# =============================================================================

def _timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise argparse.ArgumentTypeError(f"unknown timezone {value!r}")
    return value


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notereel",
        description="Render Markdown notes into vertical videos with ffmpeg.",
    )
    parser.add_argument("--slot", default="morning", help="Time-slot label (default: morning)")
    parser.add_argument(
        "--weekday", default="auto",
        help="mon..sun, or auto for today's weekday in --tz (default: auto)",
    )
    parser.add_argument("--file", default=None, metavar="PATH",
                        help="Render this note only (skips discovery)")
    parser.add_argument("--max", dest="max_renders", type=_non_negative_int, default=99,
                        help="Maximum successful renders per run (default: 99)")
    parser.add_argument("--dur", dest="duration", type=float, default=0.0,
                        help="Fallback duration in seconds when a note has none (default: 12)")
    parser.add_argument("--tz", type=_timezone, default="Asia/Tokyo",
                        help="IANA timezone for date/weekday (default: Asia/Tokyo)")
    parser.add_argument("--dataDir", dest="data_dir", default="data", metavar="DIR")
    parser.add_argument("--outDir", dest="out_root", default="videos/queue", metavar="DIR")
    parser.add_argument("--bgDir", dest="bg_dir", default="assets/bg", metavar="DIR")
    parser.add_argument("--bgmDir", dest="bgm_dir", default="assets/bgm", metavar="DIR")
    parser.add_argument("--font", default=None, metavar="PATH",
                        help="Font file (default: style font, then assets/fonts/NotoSansJP-Regular.ttf)")
    parser.add_argument("--style", default=None, metavar="PATH",
                        help="Style sidecar YAML (default: assets/style.yaml if present)")
    parser.add_argument("--mode", type=OverlayMode, choices=list(OverlayMode), default=None,
                        help="Overlay strategy: block (default) or sliced")
    parser.add_argument("--watermark", default=None, help="Corner watermark text")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for background/music selection")
    parser.add_argument("--dry-run", action="store_true",
                        help="Plan and log ffmpeg commands without encoding")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def build_config(args: argparse.Namespace) -> RunConfig:
    """Turn parsed flags into the immutable RunConfig (loads the style sidecar)."""
    return RunConfig(
        slot=(args.slot or "morning").lower(),
        weekday=(args.weekday or "auto").lower(),
        file=args.file or None,
        max_renders=args.max_renders,
        duration_override=args.duration,
        tz=args.tz,
        data_dir=args.data_dir,
        out_root=args.out_root,
        bg_dir=args.bg_dir,
        bgm_dir=args.bgm_dir,
        font=args.font,
        mode=args.mode,
        watermark=args.watermark,
        seed=args.seed,
        dry_run=args.dry_run,
        style=load_style(args.style),
    )


# =============================================================================
# cmd_render
# =============================================================================

def cmd_render(
    config: RunConfig,
    runner: Runner = run_ffmpeg,
    clock: Clock = system_clock,
    ffmpeg_version: Optional[str] = None,
) -> int:
    """Run one batch and print the RunSummary JSON. Always returns 0."""
    summary = BatchRenderer(
        config,
        runner=runner,
        clock=clock,
        ffmpeg_version=ffmpeg_version,
    ).run()
    print(summary.model_dump_json(indent=2))
    return 0


# =============================================================================
# CLI entry point
# =============================================================================

def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=_LOG_FORMAT, datefmt=_LOG_DATEFMT)
    sys.exit(cmd_render(build_config(args)))


if __name__ == "__main__":
    main()
