"""Raw-keyboard file browser with multi-select.

``FileBrowser`` holds the per-session state (current directory, listing,
cursor, selection) and turns key tokens into state changes and frames.
``select_files_keyboard`` wraps one session in an exclusive input scope and
returns the chosen absolute paths.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from .ansi import count_visual_lines, pad, truncate
from .fs import (
    DIRECTORY,
    PARENT,
    BrowserItem,
    DirectoryLister,
    OSDirectoryLister,
    build_browser_items,
    is_within_root,
    normalize_extensions,
    safe_file_size,
)
from .input import KeyReader, KeySource
from .layout import ColumnSpec
from .table import Table, TableOptions, stdout_write
from .terminal import TerminalController, erase_lines_sequence, fd_is_tty
from .theme import DEFAULT_THEME, GridTheme

LOGGER = logging.getLogger(__name__)

BROWSING = "browsing"
EXITING = "exiting"

GRID_MARGIN = 4
ITEM_WIDTH_MIN = 15
ITEM_WIDTH_MAX = 25
ITEM_NAME_PADDING = 4
MAX_DISPLAY_ITEMS = 50
DEFAULT_TERMINAL_SIZE = (80, 24)

KEY_HINTS = (
    "↑↓←→:Navigate  Space:Select  Enter:Open/Finish  Backspace:Up  "
    "a:All  c:Clear  r:Reload  Esc/Ctrl+C:Exit"
)


def format_size(size: int) -> str:
    return f"{size / 1024:.1f} KB"


class BrowserSelection:
    """Insertion-ordered set of selected file paths."""

    def __init__(self, paths: Iterable[Path] = ()) -> None:
        self._paths: dict[Path, None] = dict.fromkeys(paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def add(self, path: Path) -> bool:
        """Add ``path``; return whether it was new."""
        if path in self._paths:
            return False
        self._paths[path] = None
        return True

    def toggle(self, path: Path) -> bool:
        """Flip membership of ``path``; return whether it is now selected."""
        if path in self._paths:
            del self._paths[path]
            return False
        self._paths[path] = None
        return True

    def clear(self) -> None:
        self._paths.clear()

    def paths(self) -> list[str]:
        return [str(path) for path in self._paths]

    def total_size(self) -> int:
        """Sum sizes of selected files that can still be stat-ed."""
        total = 0
        for path in self._paths:
            size = safe_file_size(path)
            if size is not None:
                total += size
        return total


class FileBrowser:
    """State machine for one browsing session rooted at ``root``."""

    def __init__(
        self,
        root: Path,
        allowed_extensions: Iterable[str] | None = None,
        *,
        lister: DirectoryLister | None = None,
        write: Callable[[str], None] = stdout_write,
        get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
        theme: GridTheme = DEFAULT_THEME,
    ) -> None:
        self.root = Path(root)
        self.allowed_extensions = normalize_extensions(allowed_extensions)
        self.lister: DirectoryLister = lister if lister is not None else OSDirectoryLister()
        self.current_path = self.root
        self.items: list[BrowserItem] = []
        self.selection = BrowserSelection()
        self.current_index = 0
        self.scan_error: Exception | None = None
        self.status = BROWSING
        self._write = write
        self._get_terminal_size = get_terminal_size
        self._theme = theme
        self._last_frame = ""

    # -- listing -------------------------------------------------------------

    def reload(self) -> None:
        """Rescan the current directory, keeping the cursor in bounds."""
        self.items, self.scan_error = build_browser_items(
            self.lister,
            self.current_path,
            self.root,
            self.allowed_extensions,
        )
        if self.current_index >= len(self.items):
            self.current_index = max(0, len(self.items) - 1)

    def navigate(self, target: Path) -> bool:
        """Enter ``target`` when it lies under the root; reset cursor and rescan."""
        if not is_within_root(target, self.root):
            return False
        self.current_path = target
        self.current_index = 0
        self.reload()
        return True

    def current_item(self) -> BrowserItem | None:
        if 0 <= self.current_index < len(self.items):
            return self.items[self.current_index]
        return None

    # -- geometry ------------------------------------------------------------

    def terminal_width(self) -> int:
        return max(1, self._get_terminal_size(DEFAULT_TERMINAL_SIZE).columns)

    def item_cell_width(self) -> int:
        longest = max((len(item.name) for item in self.items), default=0)
        return min(max(longest + ITEM_NAME_PADDING, ITEM_WIDTH_MIN), ITEM_WIDTH_MAX)

    def grid_columns(self, terminal_width: int | None = None) -> int:
        if terminal_width is None:
            terminal_width = self.terminal_width()
        return max(1, (terminal_width - GRID_MARGIN) // self.item_cell_width())

    def visible_window(self, columns: int) -> tuple[int, int]:
        """Return ``[start, end)`` of the items shown, aligned to grid rows."""
        total = len(self.items)
        rows_visible = max(1, MAX_DISPLAY_ITEMS // columns)
        cursor_row = self.current_index // columns
        first_row = max(0, cursor_row - rows_visible // 2)
        last_row = max(0, -(-total // columns) - rows_visible)
        first_row = min(first_row, last_row)
        start = first_row * columns
        return start, min(total, start + rows_visible * columns)

    # -- keys ----------------------------------------------------------------

    def _move_to(self, index: int) -> bool:
        if not self.items:
            return False
        index = max(0, min(len(self.items) - 1, index))
        if index == self.current_index:
            return False
        self.current_index = index
        return True

    def select_all(self) -> int:
        """Add every listed file to the selection; return how many were new."""
        return sum(1 for item in self.items if item.is_file and self.selection.add(item.path))

    def handle_key(self, key: str) -> bool:
        """Apply one key token; return whether the frame must be redrawn."""
        if self.status == EXITING:
            return False

        if key in {"UP", "DOWN", "LEFT", "RIGHT"}:
            step = {"LEFT": -1, "RIGHT": 1}.get(key)
            if step is None:
                columns = self.grid_columns()
                step = -columns if key == "UP" else columns
            return self._move_to(self.current_index + step)

        if key == "SPACE":
            item = self.current_item()
            if item is None or not item.is_file:
                return False
            self.selection.toggle(item.path)
            return True

        if key == "ENTER":
            item = self.current_item()
            if item is not None and item.is_navigable:
                return self.navigate(item.path)
            if len(self.selection) > 0:
                self.status = EXITING
            return False

        if key == "BACKSPACE":
            if self.current_path == self.root:
                return False
            return self.navigate(self.current_path.parent)

        if key == "a":
            return self.select_all() > 0

        if key == "c":
            self.selection.clear()
            return True

        if key == "r":
            self.reload()
            return True

        if key == "CTRL_C":
            self.selection.clear()
            self.status = EXITING
            return False

        if key in {"ESC", ""}:
            self.status = EXITING
        return False

    # -- frames --------------------------------------------------------------

    def _breadcrumb(self) -> str:
        parts = self.current_path.relative_to(self.root).parts
        if not parts:
            return ""
        theme = self._theme
        styled = [theme.paint(theme.muted, part) for part in parts[:-1]]
        styled.append(theme.paint(theme.breadcrumb_current, parts[-1]))
        return theme.paint(theme.warning, "In: ") + theme.paint(theme.muted, " › ").join(styled)

    def _item_cell(self, item: BrowserItem, index: int, width: int) -> str:
        theme = self._theme
        selected = item.path in self.selection
        label = item.name + "/" if item.type == DIRECTORY else item.name
        text = f"{'✓' if selected else ' '} {truncate(label, width - 3)}"

        if index == self.current_index:
            if selected:
                style = theme.browser_cursor_selected
            elif item.type == PARENT:
                style = theme.browser_cursor_parent
            elif item.type == DIRECTORY:
                style = theme.browser_cursor_dir
            else:
                style = theme.browser_cursor_file
            return theme.paint(style, pad(text, width - 1)) + " "

        if selected:
            style = theme.browser_selected
        elif item.type == PARENT:
            style = theme.browser_parent
        elif item.type == DIRECTORY:
            style = theme.browser_dir
        else:
            style = theme.browser_file
        return theme.paint(style, pad(text, width))

    def render_frame(self, terminal_width: int | None = None) -> str:
        """Return the full browser viewport as text ending in a newline."""
        if terminal_width is None:
            terminal_width = self.terminal_width()
        theme = self._theme
        lines: list[str] = []

        breadcrumb = self._breadcrumb()
        if breadcrumb:
            lines.append(breadcrumb)
        lines.append(theme.paint(theme.muted, KEY_HINTS))
        if self.allowed_extensions:
            lines.append(theme.paint(theme.warning, "Allowed: " + ", ".join(self.allowed_extensions)))
        if len(self.selection) > 0:
            lines.append(
                theme.paint(
                    theme.success,
                    f"✓ Selected: {len(self.selection)} files "
                    f"({format_size(self.selection.total_size())}) - Press Enter to finish",
                )
            )
        lines.append("")

        if not self.items:
            lines.append(theme.paint(theme.warning, "No files found in this directory."))
            return "\n".join(lines) + "\n"

        columns = self.grid_columns(terminal_width)
        width = self.item_cell_width()
        start, end = self.visible_window(columns)
        if start > 0:
            lines.append(theme.paint(theme.muted, f"    ⋮ ({start} items above)"))
        for row_start in range(start, end, columns):
            row_end = min(end, row_start + columns)
            lines.append(
                "".join(self._item_cell(self.items[idx], idx, width) for idx in range(row_start, row_end))
            )
        if end < len(self.items):
            lines.append(theme.paint(theme.muted, f"    ⋮ ({len(self.items) - end} items below)"))
        lines.append("")

        position = f"Current: {self.current_index + 1}"
        if len(self.items) > MAX_DISPLAY_ITEMS:
            lines.append(theme.paint(theme.muted, f"Showing {start + 1}-{end} of {len(self.items)} items | {position}"))
        else:
            lines.append(theme.paint(theme.muted, f"{len(self.items)} items | {position}"))
        lines.append(
            theme.paint(
                theme.muted,
                f"Grid: {columns} columns × {width} chars | Terminal width: {terminal_width}",
            )
        )
        return "\n".join(lines) + "\n"

    def draw(self) -> None:
        """Erase the previous frame and write the current one."""
        width = self.terminal_width()
        frame = self.render_frame(width)
        self._write(erase_lines_sequence(count_visual_lines(self._last_frame, width)) + frame)
        self._last_frame = frame

    def run(self, keys: KeySource) -> list[str]:
        """Process keys until the session ends; return selected paths in order.

        An empty key token means input was closed and ends the session.
        """
        self.status = BROWSING
        self.reload()
        self.draw()
        while self.status != EXITING:
            if self.handle_key(keys.read_key()) and self.status != EXITING:
                self.draw()
        return self.selection.paths()


def _stdin_fd() -> int | None:
    try:
        return sys.stdin.fileno()
    except (AttributeError, ValueError, OSError):
        return None


def _stdout_fd() -> int:
    try:
        return sys.stdout.fileno()
    except (AttributeError, ValueError, OSError):
        return 1


def write_selection_summary(
    paths: list[str],
    *,
    write: Callable[[str], None] = stdout_write,
    get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
    theme: GridTheme = DEFAULT_THEME,
) -> None:
    """Print a table of chosen files with sizes; unreadable files are flagged."""
    rows = []
    total = 0
    for raw in paths:
        size = safe_file_size(Path(raw))
        if size is not None:
            total += size
        rows.append(
            {
                "name": Path(raw).name,
                "size": format_size(size) if size is not None else "Error reading file",
                "_missing": size is None,
            }
        )

    def size_color(text: str, row) -> str:
        return theme.paint(theme.error if row["_missing"] else theme.muted, text)

    write(theme.paint(theme.success, "✓ File Selection Complete!") + "\n")
    table = Table(
        [
            ColumnSpec(key="name", header="File", flex=1, min_width=10, max_width=60),
            ColumnSpec(key="size", header="Size", align="right", color_fn=size_color),
        ],
        TableOptions(title=f"Selected {len(paths)} files ({format_size(total)} total)"),
        write=write,
        get_terminal_size=get_terminal_size,
        theme=theme,
    )
    table.add_rows(rows).render()


def select_files_keyboard(
    root_dir: str | os.PathLike[str] | None = None,
    allowed_extensions: Iterable[str] | None = None,
    *,
    lister: DirectoryLister | None = None,
    keys: KeySource | None = None,
    write: Callable[[str], None] = stdout_write,
    get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
    theme: GridTheme = DEFAULT_THEME,
    show_summary: bool = True,
) -> list[str]:
    """Run one interactive browsing session and return chosen absolute paths.

    Without an injected key source the session reads the process's stdin in
    raw mode; tty state and signal handlers are restored on every exit path.
    Non-interactive stdin returns an empty list without browsing.
    """
    root = Path(root_dir if root_dir is not None else Path.cwd()).resolve()
    browser = FileBrowser(
        root,
        allowed_extensions,
        lister=lister,
        write=write,
        get_terminal_size=get_terminal_size,
        theme=theme,
    )

    if keys is not None:
        paths = browser.run(keys)
    else:
        stdin_fd = _stdin_fd()
        if stdin_fd is None or not fd_is_tty(stdin_fd):
            LOGGER.warning("file browser needs an interactive terminal; nothing selected")
            return []
        terminal = TerminalController(stdin_fd, _stdout_fd())
        with terminal.exclusive_input():
            paths = browser.run(KeyReader(stdin_fd))

    if show_summary and paths:
        write_selection_summary(paths, write=write, get_terminal_size=get_terminal_size, theme=theme)
    return paths


__all__ = [
    "BROWSING",
    "EXITING",
    "BrowserSelection",
    "FileBrowser",
    "format_size",
    "select_files_keyboard",
    "write_selection_summary",
]
