"""Public package surface for termgrid.

Box-drawn tables that fit the live terminal width, in-place redraw on resize,
and a raw-keyboard multi-select file browser.
"""

from __future__ import annotations

from .ansi import pad, strip_formatting, truncate, visible_length, word_wrap
from .browser import FileBrowser, select_files_keyboard
from .layout import ColumnSpec, compute_column_widths
from .table import Table, TableOptions, render, render_with_resize


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "ColumnSpec",
    "FileBrowser",
    "Table",
    "TableOptions",
    "compute_column_widths",
    "main",
    "pad",
    "render",
    "render_with_resize",
    "select_files_keyboard",
    "strip_formatting",
    "truncate",
    "visible_length",
    "word_wrap",
]
