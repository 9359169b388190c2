"""
ffmpeg serialisation for RenderPlan.

This is the only module that knows ffmpeg's filter-graph syntax.  Overlay
descriptors become drawtext clauses; the plan becomes one argument list.

Escaping: every value embedded inline in a filter clause goes through
escape_filter_text(), which handles the five characters the filter
mini-language reserves.  Backslash is replaced first so the backslashes
added for the other four are not doubled.  Arbitrary-length body text is
passed via `textfile=` instead and never inlined; those clauses also set
`expansion=none` so `%` and `\\` in the file reach the screen as written.
"""
from __future__ import annotations

from schemas.render_plan import DrawTextOverlay, RenderPlan

# Order matters: backslash must come first.
_FILTER_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    (":", "\\:"),
    ("'", "\\'"),
    ("%", "\\%"),
    ("[", "\\["),
    ("]", "\\]"),
)


# ---------------------------------------------------------------------------
# Escaping / number formatting
# ---------------------------------------------------------------------------

def escape_filter_text(value: str) -> str:
    """Escape ``\\ : ' % [ ]`` for inline use in a filter-graph clause."""
    out = str(value)
    for raw, escaped in _FILTER_ESCAPES:
        out = out.replace(raw, escaped)
    return out


def format_seconds(value: float) -> str:
    """Compact seconds: 10.0 → "10", 9.2 → "9.2", 0.8333… → "0.833"."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------

def drawtext_clause(overlay: DrawTextOverlay) -> str:
    """Serialise one overlay to a `drawtext=...` clause."""
    parts = [f"fontfile='{escape_filter_text(overlay.fontfile)}'"]
    if overlay.textfile is not None:
        # file contents are shown verbatim: no %{...} expansion, no escapes
        parts += ["expansion=none", f"textfile='{escape_filter_text(overlay.textfile)}'"]
    else:
        parts.append(f"text='{escape_filter_text(overlay.text)}'")
    parts += [
        f"fontsize={overlay.fontsize}",
        f"fontcolor={overlay.fontcolor}",
    ]
    if overlay.box:
        parts += [
            "box=1",
            f"boxcolor={overlay.boxcolor}",
            f"boxborderw={overlay.boxborderw}",
        ]
    if overlay.shadowcolor:
        parts += [
            f"shadowcolor={overlay.shadowcolor}",
            f"shadowx={overlay.shadowx}",
            f"shadowy={overlay.shadowy}",
        ]
    if overlay.line_spacing:
        parts.append(f"line_spacing={overlay.line_spacing}")
    parts += [
        f"x={overlay.x}",
        f"y={overlay.y}",
        f"enable='between(t,{overlay.start:.2f},{overlay.end:.2f})'",
        "fix_bounds=1",
    ]
    return "drawtext=" + ":".join(parts)


def video_chain(plan: RenderPlan) -> list[str]:
    """Background cover-fit to the output frame, then every overlay in order."""
    w, h = plan.resolution.width, plan.resolution.height
    chain = [
        f"[0:v]scale={w}:{h}:force_original_aspect_ratio=increase,"
        f"crop={w}:{h},setsar=1,format=yuv420p[v0]"
    ]
    overlays = ",".join(drawtext_clause(o) for o in plan.overlays) or "null"
    chain.append(f"[v0]{overlays}[vout]")
    return chain


def audio_chain(plan: RenderPlan) -> str:
    """Volume + fade in/out for the music input; empty string when silent."""
    if plan.audio is None:
        return ""
    fade = plan.audio.fade_seconds
    fade_out_start = max(0.0, plan.duration_seconds - fade)
    return (
        f"[1:a]volume={plan.audio.volume:g},"
        f"afade=t=in:st=0:d={format_seconds(fade)},"
        f"afade=t=out:st={format_seconds(fade_out_start)}:d={format_seconds(fade)}"
        f"[aout]"
    )


def filter_complex(plan: RenderPlan) -> str:
    """Join video and audio graphs into one -filter_complex expression."""
    parts = video_chain(plan)
    audio = audio_chain(plan)
    if audio:
        parts.append(audio)
    return ";".join(parts)


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

def build_command(plan: RenderPlan, ffmpeg_bin: str = "ffmpeg") -> list[str]:
    """
    Full ffmpeg argv for *plan*.

    Stills loop with `-loop 1`, clips with `-stream_loop -1`; both are cut
    to the plan duration with `-t`.  `-shortest` is always set.
    """
    enc = plan.encoding
    loop = ["-stream_loop", "-1"] if plan.background.kind == "video" else ["-loop", "1"]

    cmd: list[str] = [ffmpeg_bin, "-y"]
    cmd += loop
    cmd += ["-t", format_seconds(plan.duration_seconds), "-i", plan.background.path]
    if plan.audio is not None:
        cmd += ["-i", plan.audio.path]
    cmd += [
        "-r", str(plan.fps),
        "-filter_complex", filter_complex(plan),
        "-map", "[vout]",
    ]
    if plan.audio is not None:
        cmd += ["-map", "[aout]"]
    cmd += [
        "-shortest",
        "-c:v", enc.video_codec,
        "-crf", str(enc.crf),
        "-pix_fmt", enc.pix_fmt,
    ]
    if plan.audio is not None:
        cmd += ["-c:a", enc.audio_codec, "-b:a", enc.audio_bitrate]
    cmd.append(plan.output_path)
    return cmd
