"""Box-drawn table rendering with optional live resize.

A ``Table`` owns its columns, rows, and the last block of text it wrote, so a
resize can erase exactly that block and draw a fresh one at the new width.
"""

from __future__ import annotations

import os
import shutil
import sys
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .ansi import count_visual_lines, pad, single_line_text, truncate, word_wrap
from .layout import (
    MAX_TERMINAL_WIDTH,
    ColumnSpec,
    Row,
    cell_text,
    compute_column_widths,
    row_number_width,
    table_width,
)
from .resize import (
    DEFAULT_DEBOUNCE_SECONDS,
    ResizeWatcher,
    Scheduler,
    Subscribe,
    stdout_is_interactive,
    subscribe_sigwinch,
)
from .terminal import erase_lines_sequence
from .theme import DEFAULT_THEME, GridTheme

DEFAULT_TERMINAL_SIZE = (100, 24)

H = "─"
V = "│"


@dataclass(frozen=True)
class TableOptions:
    title: str | None = None
    show_row_numbers: bool = True
    row_number_header: str = "#"
    wrap_mode: bool = False


@dataclass(frozen=True)
class RenderState:
    """Exact block written by the last render plus the geometry it used."""

    text: str
    line_count: int
    terminal_width: int
    table_width: int


def stdout_write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


class Table:
    """Tabular data rendered as a rounded box that fits the terminal width."""

    def __init__(
        self,
        columns: Sequence[ColumnSpec],
        options: TableOptions | None = None,
        *,
        write: Callable[[str], None] = stdout_write,
        get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
        theme: GridTheme = DEFAULT_THEME,
        max_terminal_width: int = MAX_TERMINAL_WIDTH,
    ) -> None:
        self.columns = list(columns)
        self.options = options if options is not None else TableOptions()
        self.rows: list[Row] = []
        self.state: RenderState | None = None
        self._write = write
        self._get_terminal_size = get_terminal_size
        self._theme = theme
        self._max_terminal_width = max_terminal_width
        self._render_lock = threading.RLock()
        self._watcher: ResizeWatcher | None = None
        self._trailer = ""

    def add_row(self, row: Row) -> "Table":
        self.rows.append(row)
        return self

    def add_rows(self, rows: Iterable[Row]) -> "Table":
        self.rows.extend(rows)
        return self

    def terminal_width(self) -> int:
        """Read the live terminal width; never cached between renders."""
        return max(1, self._get_terminal_size(DEFAULT_TERMINAL_SIZE).columns)

    def column_widths(self, terminal_width: int | None = None) -> list[int]:
        if terminal_width is None:
            terminal_width = self.terminal_width()
        return compute_column_widths(
            self.columns,
            self.rows,
            terminal_width,
            self.options.show_row_numbers,
            self._max_terminal_width,
        )

    def build_lines(self, terminal_width: int | None = None) -> list[str]:
        """Return every line of the table for ``terminal_width`` without writing."""
        widths = self.column_widths(terminal_width)
        theme = self._theme
        gutter = row_number_width(len(self.rows)) if self.options.show_row_numbers else None

        lines: list[str] = []
        if self.options.title:
            lines.append("")
            lines.append(theme.paint(theme.title, self.options.title))
        lines.append(self._border(widths, gutter, "╭", "┬", "╮"))
        lines.append(self._header_line(widths, gutter))
        lines.append(self._border(widths, gutter, "├", "┼", "┤"))
        last_index = len(self.rows) - 1
        for index, row in enumerate(self.rows):
            if self.options.wrap_mode:
                lines.extend(self._wrapped_row_lines(row, index, widths, gutter))
                if index != last_index:
                    lines.append(self._spacer_line(widths, gutter))
            else:
                lines.append(self._row_line(row, index, widths, gutter))
        lines.append(self._border(widths, gutter, "╰", "┴", "╯"))
        return lines

    def render(self) -> None:
        """Write the table once and remember the block for later redraws."""
        with self._render_lock:
            width = self.terminal_width()
            self._trailer = ""
            self._write_block(width)

    def render_with_resize(
        self,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        subscribe: Subscribe = subscribe_sigwinch,
        scheduler: Scheduler | None = None,
        is_interactive: Callable[[], bool] = stdout_is_interactive,
        trailer: str = "",
    ) -> "Table":
        """Render, then redraw in place on terminal resize until ``stop_watching``.

        ``trailer`` is written right after the table (typically the prompt the
        caller is about to wait on) and is re-printed below every redraw.
        """
        self.render()
        if trailer:
            self.write_trailer(trailer)
        if self._watcher is None:
            self._watcher = ResizeWatcher(
                self._redraw_if_watching,
                debounce_seconds=debounce_seconds,
                subscribe=subscribe,
                scheduler=scheduler,
                is_interactive=is_interactive,
            )
        self._watcher.start()
        return self

    def write_trailer(self, text: str) -> None:
        """Write ``text`` below the table and keep it there across redraws."""
        with self._render_lock:
            self._write(text)
            self._trailer += text

    def stop_watching(self) -> None:
        """Stop live redraws; call before reading further input.

        Returns only after any redraw already in progress has finished writing.
        """
        if self._watcher is None:
            return
        self._watcher.stop()
        with self._render_lock:
            pass

    @property
    def watching(self) -> bool:
        return self._watcher is not None and self._watcher.watching

    def redraw(self) -> None:
        """Erase the previously written block at the current width and render again."""
        with self._render_lock:
            width = self.terminal_width()
            if self.state is not None:
                self._write(erase_lines_sequence(self._rows_above_cursor(width)))
            self._write_block(width)
            if self._trailer:
                self._write(self._trailer)

    def _redraw_if_watching(self) -> None:
        with self._render_lock:
            if not self.watching:
                return
            self.redraw()

    def _rows_above_cursor(self, width: int) -> int:
        """Rows between the top of the written block and the cursor line."""
        block = self.state.text + self._trailer
        rows = count_visual_lines(block, width)
        # Without a final newline the cursor still sits on the block's last row.
        return rows if block.endswith("\n") else rows - 1

    def _write_block(self, width: int) -> None:
        lines = self.build_lines(width)
        text = "\n".join(lines) + "\n"
        self._write(text)
        self.state = RenderState(
            text=text,
            line_count=count_visual_lines(text, width),
            terminal_width=width,
            table_width=table_width(
                self.column_widths(width),
                self.options.show_row_numbers,
                len(self.rows),
            ),
        )

    def _bar(self) -> str:
        return self._theme.paint(self._theme.border, V)

    def _border(self, widths: Sequence[int], gutter: int | None, left: str, junction: str, right: str) -> str:
        segments = [H * (width + 2) for width in widths]
        if gutter is not None:
            segments.insert(0, H * (gutter + 2))
        return self._theme.paint(self._theme.border, left + junction.join(segments) + right)

    def _compose(self, gutter_cell: str | None, cells: Sequence[str]) -> str:
        bar = self._bar()
        parts = [f"{bar} {cell} " for cell in cells]
        if gutter_cell is not None:
            parts.insert(0, f"{bar} {gutter_cell} ")
        return "".join(parts) + bar

    def _header_line(self, widths: Sequence[int], gutter: int | None) -> str:
        theme = self._theme
        gutter_cell = None
        if gutter is not None:
            gutter_cell = theme.paint(theme.header, pad(truncate(self.options.row_number_header, gutter), gutter))
        cells = [
            theme.paint(theme.header, pad(truncate(single_line_text(column.header), width), width, column.align))
            for column, width in zip(self.columns, widths)
        ]
        return self._compose(gutter_cell, cells)

    def _style_cell(self, column: ColumnSpec, text: str, row: Row) -> str:
        if column.color_fn is not None:
            return column.color_fn(text, row)
        return self._theme.paint(self._theme.cell, text)

    def _row_number_cell(self, index: int, gutter: int | None) -> str | None:
        if gutter is None:
            return None
        return self._theme.paint(self._theme.row_number, pad(truncate(f"{index + 1}.", gutter), gutter))

    def _row_line(self, row: Row, index: int, widths: Sequence[int], gutter: int | None) -> str:
        cells = []
        for column, width in zip(self.columns, widths):
            text = pad(truncate(single_line_text(cell_text(row, column.key)), width), width, column.align)
            cells.append(self._style_cell(column, text, row))
        return self._compose(self._row_number_cell(index, gutter), cells)

    def _wrapped_row_lines(self, row: Row, index: int, widths: Sequence[int], gutter: int | None) -> list[str]:
        wrapped = [word_wrap(cell_text(row, column.key), width) for column, width in zip(self.columns, widths)]
        height = max((len(cell_lines) for cell_lines in wrapped), default=1)
        lines: list[str] = []
        for line_idx in range(height):
            if line_idx == 0:
                gutter_cell = self._row_number_cell(index, gutter)
            else:
                gutter_cell = None if gutter is None else " " * gutter
            cells = []
            for column, width, cell_lines in zip(self.columns, widths, wrapped):
                piece = cell_lines[line_idx] if line_idx < len(cell_lines) else ""
                text = pad(piece, width, column.align)
                if line_idx == 0:
                    cells.append(self._style_cell(column, text, row))
                else:
                    cells.append(self._theme.paint(self._theme.cell, text))
            lines.append(self._compose(gutter_cell, cells))
        return lines

    def _spacer_line(self, widths: Sequence[int], gutter: int | None) -> str:
        gutter_cell = None if gutter is None else " " * gutter
        return self._compose(gutter_cell, [" " * width for width in widths])


def render(
    columns: Sequence[ColumnSpec],
    rows: Iterable[Row],
    options: TableOptions | None = None,
    **table_kwargs,
) -> Table:
    """Render ``rows`` once as a table and return the table for inspection."""
    table = Table(columns, options, **table_kwargs).add_rows(rows)
    table.render()
    return table


def render_with_resize(
    columns: Sequence[ColumnSpec],
    rows: Iterable[Row],
    options: TableOptions | None = None,
    *,
    trailer: str = "",
    **table_kwargs,
) -> Table:
    """Render ``rows`` and keep redrawing on resize until ``stop_watching()``."""
    table = Table(columns, options, **table_kwargs).add_rows(rows)
    return table.render_with_resize(trailer=trailer)


__all__ = [
    "TableOptions",
    "RenderState",
    "Table",
    "render",
    "render_with_resize",
    "stdout_write",
]
