"""UI theme definitions and selection helpers.

Themes are ANSI palettes for table chrome, cell text, status lines, and the
file browser grid.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GridTheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    border: str
    title: str
    header: str
    cell: str
    row_number: str
    muted: str
    success: str
    error: str
    warning: str
    info: str
    browser_cursor_file: str
    browser_cursor_dir: str
    browser_cursor_parent: str
    browser_cursor_selected: str
    browser_selected: str
    browser_dir: str
    browser_parent: str
    browser_file: str
    breadcrumb_current: str

    def paint(self, style: str, text: str) -> str:
        """Wrap ``text`` in ``style`` and a reset, or return it bare when unstyled."""
        if not style or not text:
            return text
        return f"{style}{text}{self.reset}"


DEFAULT_THEME = GridTheme(
    name="default",
    reset="\033[0m",
    border="\033[90m",
    title="\033[1;36m",
    header="\033[1;36m",
    cell="\033[37m",
    row_number="\033[37m",
    muted="\033[90m",
    success="\033[32m",
    error="\033[31m",
    warning="\033[33m",
    info="\033[1;36m",
    browser_cursor_file="\033[30;47m",
    browser_cursor_dir="\033[30;46m",
    browser_cursor_parent="\033[37;44m",
    browser_cursor_selected="\033[30;42m",
    browser_selected="\033[32m",
    browser_dir="\033[36m",
    browser_parent="\033[34m",
    browser_file="\033[37m",
    breadcrumb_current="\033[1;37m",
)

OCEAN_THEME = GridTheme(
    name="ocean",
    reset="\033[0m",
    border="\033[2;38;5;31m",
    title="\033[1;38;5;45m",
    header="\033[1;38;5;45m",
    cell="\033[38;5;252m",
    row_number="\033[38;5;153m",
    muted="\033[2;38;5;110m",
    success="\033[38;5;84m",
    error="\033[38;5;203m",
    warning="\033[38;5;215m",
    info="\033[1;38;5;39m",
    browser_cursor_file="\033[30;48;5;153m",
    browser_cursor_dir="\033[30;48;5;45m",
    browser_cursor_parent="\033[38;5;255;48;5;24m",
    browser_cursor_selected="\033[30;48;5;84m",
    browser_selected="\033[38;5;84m",
    browser_dir="\033[1;38;5;45m",
    browser_parent="\033[38;5;39m",
    browser_file="\033[38;5;252m",
    breadcrumb_current="\033[1;38;5;153m",
)

PLAIN_THEME = GridTheme(
    name="plain",
    reset="",
    border="",
    title="",
    header="",
    cell="",
    row_number="",
    muted="",
    success="",
    error="",
    warning="",
    info="",
    browser_cursor_file="",
    browser_cursor_dir="",
    browser_cursor_parent="",
    browser_cursor_selected="",
    browser_selected="",
    browser_dir="",
    browser_parent="",
    browser_file="",
    breadcrumb_current="",
)

_THEMES: dict[str, GridTheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> GridTheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "GridTheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
