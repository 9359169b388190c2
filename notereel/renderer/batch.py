"""
Batch loop: discover notes, plan and render them one at a time.

Per-note cycle (strictly sequential, no overlap):
  plan → mkdir output dir → write overlay text files → ffmpeg → delete
  text files (always, even when ffmpeg fails)

Any per-note failure is logged with the note path and does not stop the
run; only successful renders count toward config.max_renders.  EmptyContent
is a skip, not a failure.  Nothing is retried.
"""
from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Callable, Optional

from renderer.assets import MissingBackgroundAsset
from renderer.clock import Clock, system_clock
from renderer.discovery import list_candidates, resolve_weekday
from renderer.ffmpeg_runner import ExternalToolFailure, run_ffmpeg, validate_ffmpeg
from renderer.filtergraph import build_command
from renderer.planner import EmptyContent, RenderPlanner
from schemas.config import RunConfig
from schemas.render_output import RenderOutput, RunSummary, SkippedDocument
from schemas.render_plan import RenderPlan

logger = logging.getLogger(__name__)

Runner = Callable[[list[str]], None]


class BatchRenderer:
    """
    Usage::

        config = RunConfig(slot="morning", weekday="auto", max_renders=2)
        summary = BatchRenderer(config).run()
        print(summary.model_dump_json(indent=2))

    runner:         executes one ffmpeg argv; run_ffmpeg by default.
    ffmpeg_version: recorded in RenderOutput; probed from the binary on the
                    first real render when not given.
    """

    def __init__(
        self,
        config: RunConfig,
        planner: Optional[RenderPlanner] = None,
        runner: Runner = run_ffmpeg,
        clock: Clock = system_clock,
        ffmpeg_bin: str = "ffmpeg",
        ffmpeg_version: Optional[str] = None,
    ) -> None:
        self.config = config
        self.planner = planner or RenderPlanner(config, clock=clock)
        self._runner = runner
        self._clock = clock
        self.ffmpeg_bin = ffmpeg_bin
        self._ffmpeg_version = ffmpeg_version

    def run(self) -> RunSummary:
        config = self.config
        weekday = resolve_weekday(config, self._clock)
        candidates = list_candidates(config, weekday)
        summary = RunSummary(slot=config.slot, weekday=weekday, candidates=len(candidates))

        if not candidates:
            logger.info(
                "[no md] %s/%s/{%s,_default,.} has no notes — nothing to render.",
                config.data_dir, config.slot, weekday,
            )
            return summary

        logger.info(
            "Rendering up to %d of %d note(s) | slot=%s | weekday=%s",
            config.max_renders, len(candidates), config.slot, weekday,
        )
        for path in candidates:
            if summary.rendered_count >= config.max_renders:
                logger.info("Reached --max=%d; stopping.", config.max_renders)
                break
            try:
                summary.rendered.append(self.render_one(path))
            except EmptyContent as exc:
                logger.warning("[skip empty] %s", path)
                summary.skipped.append(SkippedDocument(source_path=str(path), reason=str(exc)))
            except (MissingBackgroundAsset, ExternalToolFailure) as exc:
                logger.warning("[render fail] %s: %s", path, exc)
                summary.failed.append(SkippedDocument(source_path=str(path), reason=str(exc)))
            except Exception as exc:  # noqa: BLE001
                logger.warning("[render fail] %s: %s: %s", path, type(exc).__name__, exc)
                summary.failed.append(SkippedDocument(source_path=str(path), reason=str(exc)))

        logger.info(
            "[done] %d video(s) -> %s/<date>/ (skipped=%d, failed=%d)",
            summary.rendered_count, config.out_root, len(summary.skipped), len(summary.failed),
        )
        return summary

    def render_one(self, document_path: Path) -> RenderOutput:
        """Plan and encode one note; return its RenderOutput."""
        plan = self.planner.plan(document_path)
        cmd = build_command(plan, self.ffmpeg_bin)

        if self.config.dry_run:
            logger.info("[dry-run] %s\n%s", document_path, shlex.join(cmd))
            return _render_output(plan, rendered_at="dry-run", ffmpeg_version="dry-run")

        if self._ffmpeg_version is None:
            self._ffmpeg_version = validate_ffmpeg(self.ffmpeg_bin)

        Path(plan.output_path).parent.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        try:
            for text_file in plan.text_files:
                path = Path(text_file.path)
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text_file.content, encoding="utf-8")
                written.append(path)
            self._runner(cmd)
        finally:
            for path in written:
                path.unlink(missing_ok=True)

        logger.info("[rendered] %s -> %s", document_path, plan.output_path)
        return _render_output(
            plan,
            rendered_at=self._clock().isoformat(),
            ffmpeg_version=self._ffmpeg_version,
        )


def _render_output(plan: RenderPlan, rendered_at: str, ffmpeg_version: str) -> RenderOutput:
    return RenderOutput(
        source_path=plan.source_path,
        video_path=plan.output_path,
        duration_seconds=plan.duration_seconds,
        background_path=plan.background.path,
        audio_path=plan.audio.path if plan.audio else None,
        mode=plan.mode.value,
        rendered_at=rendered_at,
        ffmpeg_version=ffmpeg_version,
    )
