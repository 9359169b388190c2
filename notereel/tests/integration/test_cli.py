"""
Integration tests for cli.py: flags → RunConfig → batch → summary JSON.

ffmpeg is replaced by RecordingRunner (or --dry-run); no binary required.
"""
from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from cli import build_config, build_parser, cmd_render, main
from schemas.config import OverlayMode
from tests._fixture_builders import FIXED_DATE, RecordingRunner, fixed_clock, write_note

_FOO = "---\ntitle: Good Morning\nduration: 10\nbg: a.png\n---\n- Drink water\n- Stretch\n"


def _args(workspace: Path, *extra: str) -> list[str]:
    return [
        f"--dataDir={workspace / 'data'}",
        f"--outDir={workspace / 'videos' / 'queue'}",
        f"--bgDir={workspace / 'assets' / 'bg'}",
        f"--bgmDir={workspace / 'assets' / 'bgm'}",
        f"--style={workspace / 'assets' / 'style.yaml'}",
        "--font=/nonexistent/font.ttf",
        *extra,
    ]


def _run(workspace: Path, capsys, *extra: str, runner=None) -> tuple[int, dict]:
    config = build_config(build_parser().parse_args(_args(workspace, *extra)))
    code = cmd_render(config, runner=runner or RecordingRunner(), clock=fixed_clock, ffmpeg_version="test")
    return code, json.loads(capsys.readouterr().out)


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.slot == "morning"
        assert args.weekday == "auto"
        assert args.max_renders == 99
        assert args.tz == "Asia/Tokyo"
        assert args.mode is None
        assert args.dry_run is False

    def test_max_zero_allowed(self):
        assert build_parser().parse_args(["--max=0"]).max_renders == 0

    def test_mode_parsed_to_enum(self):
        assert build_parser().parse_args(["--mode=sliced"]).mode is OverlayMode.SLICED

    @pytest.mark.parametrize("argv", [["--tz=Mars/Olympus"], ["--max=-1"], ["--mode=scroll"]])
    def test_rejects_bad_values(self, argv):
        with pytest.raises(SystemExit):
            build_parser().parse_args(argv)

    def test_slot_and_weekday_lowercased(self, tmp_path: Path):
        args = build_parser().parse_args(["--slot=Night", "--weekday=MON", f"--style={tmp_path / 'x.yaml'}"])
        config = build_config(args)
        assert (config.slot, config.weekday) == ("night", "mon")

    def test_style_sidecar_loaded(self, tmp_path: Path):
        style = tmp_path / "style.yaml"
        style.write_text("mode: sliced\nfont: bold.ttf\n", encoding="utf-8")
        config = build_config(build_parser().parse_args([f"--style={style}"]))
        assert config.overlay_mode is OverlayMode.SLICED
        assert config.font_path == "bold.ttf"


class TestCmdRender:

    def test_single_note_end_to_end(self, workspace: Path, capsys):
        write_note(workspace / "data" / "morning" / "mon", "foo.md", _FOO)
        runner = RecordingRunner()
        code, summary = _run(workspace, capsys, "--slot=morning", "--weekday=mon", runner=runner)

        assert code == 0
        assert summary["weekday"] == "mon"
        assert len(summary["rendered"]) == 1

        produced = list((workspace / "videos" / "queue" / FIXED_DATE).iterdir())
        assert len(produced) == 1
        assert re.fullmatch(r"foo\.morning\.\d{6}\.mp4", produced[0].name)

        cmd = runner.calls[0]
        assert cmd[cmd.index("-t") + 1] == "10"
        assert str(workspace / "assets" / "bg" / "a.png") in cmd
        fc = cmd[cmd.index("-filter_complex") + 1]
        assert "text='Good Morning'" in fc
        assert "[aout]" not in fc
        assert list(runner.text_snapshots[0].values()) == ["• Drink water\n• Stretch"]

    def test_max_one_with_two_notes(self, workspace: Path, capsys):
        base = workspace / "data" / "morning" / "_default"
        write_note(base, "a.md", "- one")
        write_note(base, "b.md", "- two")
        runner = RecordingRunner()
        code, summary = _run(workspace, capsys, "--max=1", runner=runner)
        assert code == 0
        assert summary["candidates"] == 2
        assert len(summary["rendered"]) == 1
        assert len(runner.calls) == 1

    def test_no_candidates_exits_zero(self, workspace: Path, capsys):
        runner = RecordingRunner()
        code, summary = _run(workspace, capsys, "--slot=night", runner=runner)
        assert code == 0
        assert summary["candidates"] == 0
        assert summary["weekday"] == "fri"
        assert runner.calls == []

    def test_failed_render_still_exits_zero(self, workspace: Path, capsys):
        from renderer.ffmpeg_runner import FFmpegError

        write_note(workspace / "data" / "morning", "a.md", "- one")
        code, summary = _run(
            workspace, capsys, runner=RecordingRunner(fail_with=FFmpegError("FFmpeg exited 1.")),
        )
        assert code == 0
        assert summary["rendered"] == []
        assert summary["failed"][0]["reason"] == "FFmpeg exited 1."

    def test_explicit_file(self, workspace: Path, capsys):
        note = write_note(workspace / "notes", "solo.md", "- only me")
        write_note(workspace / "data" / "morning", "ignored.md", "- not me")
        _, summary = _run(workspace, capsys, f"--file={note}")
        assert [r["source_path"] for r in summary["rendered"]] == [str(note)]


class TestMain:

    def test_dry_run_prints_summary_and_exits_zero(self, workspace: Path, capsys, monkeypatch):
        monkeypatch.chdir(workspace)
        write_note(workspace / "data" / "morning", "foo.md", _FOO)
        with pytest.raises(SystemExit) as info:
            main(["--dry-run", "--font=/nonexistent/font.ttf", "--log-level=WARNING"])
        assert info.value.code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["rendered"][0]["rendered_at"] == "dry-run"
        assert not (workspace / "videos").exists()
