"""Column width allocation for box-drawn tables.

Widths are computed in three passes: content sizing, flex distribution of the
leftover terminal width, and a force-fit shrink that keeps the rendered table
within the terminal no matter how the column constraints combine.

Every column is drawn as ``"│ " + cell + " "`` and the row closes with one
``"│"``, so ``n`` columns cost ``3n + 1`` cells of chrome. The optional
row-number gutter is drawn the same way.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .ansi import single_line_text, visible_length

MIN_COLUMN_WIDTH = 4
MAX_TERMINAL_WIDTH = 240
CELL_CHROME = 3
ROW_NUMBER_MIN_WIDTH = 3

Row = Mapping[str, Any]
ColorFn = Callable[[str, Row], str]


@dataclass(frozen=True)
class ColumnSpec:
    """One table column and its sizing constraints.

    ``width`` makes the column fixed, ``flex`` makes it absorb leftover space,
    and with neither the column fits its widest value.
    """

    key: str
    header: str
    width: int | None = None
    min_width: int | None = None
    max_width: int | None = None
    flex: float | None = None
    align: str = "left"
    color_fn: ColorFn | None = None

    @property
    def is_fixed(self) -> bool:
        return bool(self.width)

    @property
    def is_flex(self) -> bool:
        return not self.is_fixed and bool(self.flex)


def cell_text(row: Row, key: str) -> str:
    """Return the display string for ``row[key]``; missing values render empty."""
    value = row.get(key)
    if value is None:
        return ""
    return str(value)


def border_overhead(column_count: int) -> int:
    if column_count <= 0:
        return 0
    return CELL_CHROME * column_count + 1


def row_number_width(row_count: int) -> int:
    return max(ROW_NUMBER_MIN_WIDTH, len(str(row_count)) + 1)


def row_number_overhead(show_row_numbers: bool, row_count: int) -> int:
    if not show_row_numbers:
        return 0
    return row_number_width(row_count) + CELL_CHROME


def available_width(
    column_count: int,
    terminal_width: int,
    show_row_numbers: bool,
    row_count: int,
    max_terminal_width: int = MAX_TERMINAL_WIDTH,
) -> int:
    """Return the cell budget shared by all columns after chrome is paid for."""
    effective = min(terminal_width, max_terminal_width)
    budget = effective - border_overhead(column_count) - row_number_overhead(show_row_numbers, row_count)
    return max(column_count * MIN_COLUMN_WIDTH, budget)


def content_width(column: ColumnSpec, rows: Sequence[Row]) -> int:
    """Return the widest visible value among header and row cells, as printed on one line."""
    widest = visible_length(single_line_text(column.header))
    for row in rows:
        widest = max(widest, visible_length(single_line_text(cell_text(row, column.key))))
    return widest


def compute_column_widths(
    columns: Sequence[ColumnSpec],
    rows: Sequence[Row],
    terminal_width: int,
    show_row_numbers: bool = False,
    max_terminal_width: int = MAX_TERMINAL_WIDTH,
) -> list[int]:
    """Allocate one width per column so the table fits ``terminal_width``."""
    column_count = len(columns)
    if column_count == 0:
        return []

    budget = available_width(
        column_count,
        terminal_width,
        show_row_numbers,
        len(rows),
        max_terminal_width,
    )

    widths: list[int] = []
    total_flex = 0.0
    for column in columns:
        if column.is_fixed:
            widths.append(max(0, int(column.width)))
            continue
        min_width = column.min_width or MIN_COLUMN_WIDTH
        if column.is_flex:
            widths.append(min_width)
            total_flex += column.flex
            continue
        width = max(min_width, content_width(column, rows))
        if column.max_width:
            width = min(width, column.max_width)
        widths.append(width)

    remaining = max(0, budget - sum(widths))
    if total_flex > 0 and remaining > 0:
        for idx, column in enumerate(columns):
            if not column.is_flex:
                continue
            grown = widths[idx] + int(remaining * column.flex // total_flex)
            if column.max_width:
                grown = min(grown, column.max_width)
            widths[idx] = grown

    return force_fit(widths, budget)


def force_fit(widths: list[int], budget: int) -> list[int]:
    """Shrink the widest column one cell at a time until ``widths`` fit ``budget``.

    Shrinking stops once the widest column is at ``MIN_COLUMN_WIDTH``.
    """
    fitted = list(widths)
    floor_total = len(fitted) * MIN_COLUMN_WIDTH
    total = sum(fitted)
    while total > budget and total > floor_total:
        widest_idx = max(range(len(fitted)), key=lambda idx: (fitted[idx], -idx))
        if fitted[widest_idx] <= MIN_COLUMN_WIDTH:
            break
        fitted[widest_idx] -= 1
        total -= 1
    return fitted


def table_width(widths: Sequence[int], show_row_numbers: bool, row_count: int) -> int:
    """Return the full rendered line width for ``widths``."""
    return sum(widths) + border_overhead(len(widths)) + row_number_overhead(show_row_numbers, row_count)


__all__ = [
    "MIN_COLUMN_WIDTH",
    "MAX_TERMINAL_WIDTH",
    "ColumnSpec",
    "Row",
    "ColorFn",
    "cell_text",
    "border_overhead",
    "row_number_width",
    "row_number_overhead",
    "available_width",
    "content_width",
    "compute_column_widths",
    "force_fit",
    "table_width",
]
