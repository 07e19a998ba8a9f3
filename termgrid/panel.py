"""Single-record detail box and HTML-to-text cleanup.

A detail box shows one record as a wrapped title, ``label: value`` metadata,
and a wrapped body inside the same rounded border used by tables.
"""

from __future__ import annotations

import html
import os
import re
import shutil
from collections.abc import Callable, Sequence

from .ansi import pad, word_wrap
from .table import stdout_write
from .theme import DEFAULT_THEME, GridTheme

MIN_BOX_WIDTH = 50
BOX_MARGIN = 4

_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_END_RE = re.compile(r"</(?:p|div|li|h[1-6])>", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"<li[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_SPACE_RUN_RE = re.compile(r"[ \t]+")


def html_to_text(markup: str) -> str:
    """Convert simple HTML into readable plain text.

    Line breaks and block closers become newlines, list items become bullets,
    remaining tags are dropped and entities decoded. Runs of blank lines
    collapse to one paragraph break.
    """
    text = _BREAK_RE.sub("\n", markup)
    text = _BLOCK_END_RE.sub("\n", text)
    text = _LIST_ITEM_RE.sub("• ", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")
    text = _SPACE_RUN_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


def render_detail_box(
    title: str,
    metadata: Sequence[tuple[str, str]],
    body: str,
    *,
    terminal_width: int,
    theme: GridTheme = DEFAULT_THEME,
) -> list[str]:
    """Return the lines of a detail box sized to ``terminal_width``."""
    # Never wider than the terminal, even below the preferred minimum.
    box_width = max(5, min(terminal_width, max(MIN_BOX_WIDTH, terminal_width - BOX_MARGIN)))
    content_width = box_width - 4
    rule = "─" * (box_width - 2)
    bar = theme.paint(theme.border, "│")

    def content_line(text: str, style: str) -> str:
        return f"{bar} {theme.paint(style, pad(text, content_width))} {bar}"

    lines = [theme.paint(theme.border, f"╭{rule}╮")]
    lines.extend(content_line(line, theme.breadcrumb_current) for line in word_wrap(title or "Untitled", content_width))
    lines.append(theme.paint(theme.border, f"├{rule}┤"))
    for label, value in metadata:
        for line in word_wrap(f"{label}: {value}", content_width):
            lines.append(content_line(line, theme.muted))
    lines.append(theme.paint(theme.border, f"├{rule}┤"))
    lines.extend(content_line(line, theme.cell) for line in word_wrap(body or "No content", content_width))
    lines.append(theme.paint(theme.border, f"╰{rule}╯"))
    return lines


def print_detail_box(
    title: str,
    metadata: Sequence[tuple[str, str]],
    body: str,
    *,
    write: Callable[[str], None] = stdout_write,
    get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
    theme: GridTheme = DEFAULT_THEME,
) -> None:
    """Write a detail box framed by blank lines."""
    terminal_width = get_terminal_size((80, 24)).columns
    lines = render_detail_box(title, metadata, body, terminal_width=terminal_width, theme=theme)
    write("\n" + "\n".join(lines) + "\n\n")


__all__ = [
    "html_to_text",
    "render_detail_box",
    "print_detail_box",
]
