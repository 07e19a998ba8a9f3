"""ANSI-aware text measurement and line shaping utilities.

Provides stripping, padding, truncation, and word wrapping measured in visible
characters. These helpers keep box-drawing columns aligned when cell text
carries color codes.
"""

from __future__ import annotations

import re

# OSC/DCS/APC/PM strings run until BEL or ST; CSI ends at its final byte;
# anything else is a two-character escape.
ANSI_ESCAPE_RE = re.compile(
    r"\x1b[\]P_^][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b\[[0-9;?<=>]*[ -/]*[@-~]"
    r"|\x1b[0-Z\\-~]"
)
ELLIPSIS = "..."
TAB_STOP = 8

_LINE_BREAK_RE = re.compile(r"\r\n|[\r\n]")


def strip_formatting(text: str) -> str:
    """Remove every escape-sequence run, leaving all other characters intact."""
    if "\x1b" not in text:
        return text
    return ANSI_ESCAPE_RE.sub("", text)


def visible_length(text: str) -> int:
    return len(strip_formatting(text))


def single_line_text(text: str) -> str:
    """Flatten ``text`` onto one terminal line.

    Line breaks become spaces and tabs expand to the next 8-column stop, so the
    visible length matches the cells the text occupies when printed.
    """
    return _LINE_BREAK_RE.sub(" ", text).expandtabs(TAB_STOP)


def pad(text: str, width: int, align: str = "left") -> str:
    """Pad ``text`` with spaces to ``width`` visible columns.

    Padding is computed from :func:`visible_length`, so styled text occupies
    exactly ``width`` columns once escape bytes are discarded by the terminal.
    Text already wider than ``width`` is returned unchanged.
    """
    padding = max(0, width - visible_length(text))
    if align == "right":
        return " " * padding + text
    if align == "center":
        left = padding // 2
        return " " * left + text + " " * (padding - left)
    return text + " " * padding


def truncate(text: str, max_len: int) -> str:
    """Shorten ``text`` to ``max_len`` visible characters.

    Fitting text is returned as-is, styling included. Otherwise the result is
    built from the stripped text: a hard cut for ``max_len <= 3``, else the
    leading ``max_len - 3`` characters followed by ``...``. Callers reapply
    styling after truncation.
    """
    visible = strip_formatting(text)
    if len(visible) <= max_len:
        return text
    if max_len <= 0:
        return ""
    if max_len <= len(ELLIPSIS):
        return visible[:max_len]
    return visible[: max_len - len(ELLIPSIS)] + ELLIPSIS


def word_wrap(text: str, max_width: int) -> list[str]:
    """Greedily pack words into lines of at most ``max_width`` characters.

    Paragraphs are split on newlines and blank paragraphs are kept as empty
    lines. A word longer than ``max_width`` is hard-split into chunks.
    """
    max_width = max(1, max_width)
    lines: list[str] = []
    for paragraph in strip_formatting(text).split("\n"):
        if not paragraph.strip():
            lines.append("")
            continue

        current = ""
        for word in paragraph.split():
            if len(word) > max_width:
                if current:
                    lines.append(current)
                    current = ""
                for start in range(0, len(word), max_width):
                    lines.append(word[start : start + max_width])
                continue

            candidate = f"{current} {word}" if current else word
            if len(candidate) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        if current:
            lines.append(current)
    return lines or [""]


def count_visual_lines(text: str, width: int) -> int:
    """Return how many terminal rows ``text`` occupies at ``width`` columns.

    Each logical line takes at least one row and wraps every ``width``
    visible characters. A trailing newline ends the last line rather than
    opening a new one.
    """
    if not text:
        return 0
    width = max(1, width)
    body = text[:-1] if text.endswith("\n") else text
    total = 0
    for line in body.split("\n"):
        length = visible_length(line)
        total += max(1, -(-length // width))
    return total


__all__ = [
    "ANSI_ESCAPE_RE",
    "ELLIPSIS",
    "TAB_STOP",
    "strip_formatting",
    "visible_length",
    "single_line_text",
    "pad",
    "truncate",
    "word_wrap",
    "count_visual_lines",
]
