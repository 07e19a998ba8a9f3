"""One-line styled status output shared by command handlers."""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable

from .table import stdout_write
from .theme import DEFAULT_THEME, GridTheme

HEADER_RULE_WIDTH = 60


class MessagePrinter:
    """Write success/error/warning/info lines through one sink and theme."""

    def __init__(
        self,
        *,
        write: Callable[[str], None] = stdout_write,
        get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
        theme: GridTheme = DEFAULT_THEME,
    ) -> None:
        self._write = write
        self._get_terminal_size = get_terminal_size
        self._theme = theme

    def _line(self, style: str, text: str) -> None:
        self._write(self._theme.paint(style, text) + "\n")

    def success(self, message: str) -> None:
        self._line(self._theme.success, f"✓ {message}")

    def error(self, message: str) -> None:
        self._line(self._theme.error, f"Error: {message}")

    def warning(self, message: str) -> None:
        self._line(self._theme.warning, message)

    def info(self, message: str) -> None:
        self._line(self._theme.info, message)

    def separator(self, char: str = "─", length: int | None = None) -> None:
        if length is None:
            length = self._get_terminal_size((60, 24)).columns
        self._line(self._theme.info, char * max(1, length))

    def header(self, title: str) -> None:
        rule = "─" * HEADER_RULE_WIDTH
        self._write("\n")
        self._line(self._theme.info, rule)
        self._line(self._theme.info, title)
        self._line(self._theme.info, rule)


def print_success(message: str) -> None:
    MessagePrinter().success(message)


def print_error(message: str) -> None:
    MessagePrinter().error(message)


def print_warning(message: str) -> None:
    MessagePrinter().warning(message)


def print_info(message: str) -> None:
    MessagePrinter().info(message)


def print_separator(char: str = "─", length: int | None = None) -> None:
    MessagePrinter().separator(char, length)


def print_header(title: str) -> None:
    MessagePrinter().header(title)


__all__ = [
    "MessagePrinter",
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "print_separator",
    "print_header",
]
