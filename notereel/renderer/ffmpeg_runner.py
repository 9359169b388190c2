"""
FFmpeg runner for the note renderer.

One synchronous ffmpeg process per note, run in its own process group.
There is no timeout by default: a render runs until ffmpeg exits.  Callers
that want one (tests, ad-hoc scripts) pass it explicitly.

Failures are raised as ExternalToolFailure subclasses so the batch loop can
catch the whole family at one boundary.
"""
from __future__ import annotations

import logging
import os
import re
import signal
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)

# Minimum ffmpeg version (MAJOR.MINOR) with the drawtext options we emit
# (boxborderw, fix_bounds, textfile with UTF-8).
FFMPEG_MIN_VERSION = "4.4"


class ExternalToolFailure(Exception):
    """The external encoder could not be spawned or did not succeed."""


class FFmpegError(ExternalToolFailure):
    """FFmpeg subprocess exited with a non-zero return code (or timed out)."""


class FFmpegNotFound(ExternalToolFailure):
    """ffmpeg binary is not available on PATH."""


# ---------------------------------------------------------------------------
# Version helpers
# ---------------------------------------------------------------------------

def get_ffmpeg_version(ffmpeg_bin: str = "ffmpeg") -> str:
    """
    Return the installed ffmpeg version string (e.g. "6.1.1").

    Raises:
        FFmpegNotFound: if ffmpeg is not on PATH or fails to respond.
    """
    try:
        result = subprocess.run(
            [ffmpeg_bin, "-version"],
            capture_output=True,
            text=True,
            timeout=10,
            check=True,
        )
    except FileNotFoundError:
        raise FFmpegNotFound(
            f"{ffmpeg_bin} not found on PATH. "
            f"Install ffmpeg >= {FFMPEG_MIN_VERSION} (e.g. `apt install ffmpeg`)."
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as exc:
        raise FFmpegNotFound(f"{ffmpeg_bin} -version failed: {exc}")

    # First line format: "ffmpeg version X.Y.Z[-suffix] ..."
    lines = result.stdout.splitlines()
    first_line = lines[0] if lines else ""
    parts = first_line.split()
    if len(parts) >= 3 and parts[1] == "version":
        return parts[2]
    return first_line


def validate_ffmpeg(ffmpeg_bin: str = "ffmpeg") -> str:
    """
    Check that ffmpeg is present; warn if it is older than FFMPEG_MIN_VERSION.

    Returns:
        The version string.

    Raises:
        FFmpegNotFound: if ffmpeg is absent.
    """
    version = get_ffmpeg_version(ffmpeg_bin)
    m = re.match(r"n?(\d+)\.(\d+)", version)
    if m:
        major, minor = int(m.group(1)), int(m.group(2))
        req_major, req_minor = (int(x) for x in FFMPEG_MIN_VERSION.split(".", 1))
        if (major, minor) < (req_major, req_minor):
            logger.warning(
                "ffmpeg %s is below minimum supported %s; "
                "drawtext options may be rejected.",
                version,
                FFMPEG_MIN_VERSION,
            )
    return version


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def run_ffmpeg(cmd: list[str], timeout: Optional[float] = None) -> None:
    """
    Run an FFmpeg command synchronously in its own process group.

    Args:
        cmd: Complete FFmpeg command as a list of strings.
        timeout: Wall-clock limit in seconds; None waits indefinitely.

    Raises:
        FFmpegNotFound: if the ffmpeg binary is missing.
        FFmpegError:    if FFmpeg exits non-zero or exceeds *timeout*.
    """
    logger.debug("ffmpeg cmd: %s", " ".join(cmd[:10]) + (" ..." if len(cmd) > 10 else ""))

    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,  # own process group → clean kill on timeout
        )
    except FileNotFoundError:
        raise FFmpegNotFound(
            f"{cmd[0]} not found on PATH. Install ffmpeg >= {FFMPEG_MIN_VERSION}."
        )

    try:
        _, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_group(process)
        process.communicate()
        raise FFmpegError(
            f"FFmpeg exceeded timeout of {timeout}s — killed. "
            f"Command: {' '.join(cmd[:6])} ..."
        )

    if process.returncode != 0:
        # Surface the tail of stderr for diagnosis
        tail = stderr[-3000:] if len(stderr) > 3000 else stderr
        raise FFmpegError(
            f"FFmpeg exited {process.returncode}.\n"
            f"Command: {' '.join(cmd[:8])} ...\n"
            f"stderr (last 3000 chars):\n{tail}"
        )

    logger.debug("FFmpeg finished OK (rc=0)")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _kill_group(process: subprocess.Popen) -> None:
    """Kill the process and its entire process group (SIGKILL)."""
    try:
        os.killpg(os.getpgid(process.pid), signal.SIGKILL)
    except ProcessLookupError:
        pass  # already dead
    except OSError as exc:
        logger.warning("Could not kill ffmpeg process group: %s", exc)
        process.kill()
