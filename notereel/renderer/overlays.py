"""
Overlay strategies: RenderMetadata + StyleConfig → DrawTextOverlay list.

block   title for the whole duration (boxed, near the top) plus the full
        bullet list as one centred clause read from a text file.
        With style.title_in_body the title heads the list instead.
sliced  title for a lead-in window, then each line alone for an equal
        share of the remaining time.  If title_seconds is 0 the title
        stays for the whole duration and the lines share all of it.

Either mode may add a corner watermark for the full duration.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from renderer.text_layout import wrap_text
from schemas.config import StyleConfig
from schemas.document import RenderMetadata
from schemas.render_plan import DrawTextOverlay, TextFile

BULLET = "• "
_TITLE_BORDER = 20
_TITLE_LINE_SPACING = 6


def title_overlay(
    title: str,
    style: StyleConfig,
    font_path: str,
    start: float,
    end: float,
) -> DrawTextOverlay:
    return DrawTextOverlay(
        role="title",
        text=wrap_text(title, font_path, style.title_font_size, style.wrap_width),
        fontfile=font_path,
        fontsize=style.title_font_size,
        fontcolor=style.font_color,
        line_spacing=_TITLE_LINE_SPACING,
        x="(w-text_w)/2",
        y=style.title_y,
        start=start,
        end=end,
        box=style.box,
        boxcolor=style.title_box_color,
        boxborderw=_TITLE_BORDER,
        shadowcolor=style.shadow_color,
        shadowx=style.shadow_x,
        shadowy=style.shadow_y,
    )


def block_overlays(
    meta: RenderMetadata,
    style: StyleConfig,
    font_path: str,
    text_file_path: Path,
) -> tuple[list[DrawTextOverlay], TextFile]:
    """Title clause (unless folded into the body) + one textfile body clause."""
    duration = meta.duration_seconds
    overlays: list[DrawTextOverlay] = []

    rows = [f"{BULLET}{line}" for line in meta.body_lines]
    if meta.title and style.title_in_body:
        rows = [meta.title, ""] + rows
    elif meta.title:
        overlays.append(title_overlay(meta.title, style, font_path, 0.0, duration))

    content = wrap_text("\n".join(rows), font_path, style.font_size, style.wrap_width)
    overlays.append(
        DrawTextOverlay(
            role="body",
            textfile=str(text_file_path),
            fontfile=font_path,
            fontsize=style.font_size,
            fontcolor=style.font_color,
            line_spacing=style.line_spacing,
            x=style.x,
            y=style.y,
            start=0.0,
            end=duration,
            box=style.box,
            boxcolor=style.box_color,
            boxborderw=style.box_border,
            shadowcolor=style.shadow_color,
            shadowx=style.shadow_x,
            shadowy=style.shadow_y,
        )
    )
    return overlays, TextFile(path=str(text_file_path), content=content)


def sliced_overlays(
    meta: RenderMetadata,
    style: StyleConfig,
    font_path: str,
) -> list[DrawTextOverlay]:
    """Title lead-in, then equal time windows covering the rest, one per line."""
    duration = meta.duration_seconds
    overlays: list[DrawTextOverlay] = []

    lead = 0.0
    if meta.title:
        lead = min(style.title_seconds, duration / 2)
        overlays.append(
            title_overlay(meta.title, style, font_path, 0.0, lead if lead > 0 else duration)
        )

    count = len(meta.body_lines)
    share = (duration - lead) / count if count else 0.0
    y = f"h*{style.sliced_y_fraction:g}-text_h/2"
    for index, line in enumerate(meta.body_lines):
        start = lead + index * share
        end = duration if index == count - 1 else lead + (index + 1) * share
        overlays.append(
            DrawTextOverlay(
                role="line",
                text=wrap_text(line, font_path, style.font_size, style.wrap_width),
                fontfile=font_path,
                fontsize=style.font_size,
                fontcolor=style.font_color,
                line_spacing=style.line_spacing,
                x=style.x,
                y=y,
                start=start,
                end=end,
                box=style.box,
                boxcolor=style.box_color,
                boxborderw=style.box_border,
                shadowcolor=style.shadow_color,
                shadowx=style.shadow_x,
                shadowy=style.shadow_y,
            )
        )
    return overlays


def watermark_overlay(
    text: Optional[str],
    style: StyleConfig,
    font_path: str,
    duration: float,
) -> Optional[DrawTextOverlay]:
    """Fixed bottom-right label for the full duration; None when unset."""
    if not text:
        return None
    return DrawTextOverlay(
        role="watermark",
        text=text,
        fontfile=font_path,
        fontsize=style.watermark_font_size,
        fontcolor="white@0.6",
        x="w-text_w-40",
        y="h-text_h-60",
        start=0.0,
        end=duration,
    )
