from __future__ import annotations

import io
import os
import unittest
from unittest import mock

from termgrid import messages
from termgrid.messages import MessagePrinter
from termgrid.theme import DEFAULT_THEME, PLAIN_THEME, normalize_theme_name, resolve_theme


class MessagePrinterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.writes: list[str] = []

    def _printer(self, theme=PLAIN_THEME) -> MessagePrinter:
        return MessagePrinter(
            write=self.writes.append,
            get_terminal_size=lambda _fallback=None: os.terminal_size((30, 24)),
            theme=theme,
        )

    def test_status_prefixes(self) -> None:
        printer = self._printer()
        printer.success("saved")
        printer.error("bad input")
        printer.warning("careful")
        printer.info("fyi")
        self.assertEqual(self.writes, ["✓ saved\n", "Error: bad input\n", "careful\n", "fyi\n"])

    def test_styled_lines_reset_after_text(self) -> None:
        self._printer(DEFAULT_THEME).error("x")
        self.assertEqual(self.writes, [f"{DEFAULT_THEME.error}Error: x{DEFAULT_THEME.reset}\n"])

    def test_separator_defaults_to_terminal_width(self) -> None:
        printer = self._printer()
        printer.separator()
        printer.separator("=", 5)
        self.assertEqual(self.writes, ["─" * 30 + "\n", "=====\n"])

    def test_header_is_ruled(self) -> None:
        self._printer().header("Grades")
        self.assertEqual(self.writes, ["\n", "─" * 60 + "\n", "Grades\n", "─" * 60 + "\n"])

    def test_module_helpers_write_to_stdout(self) -> None:
        with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout:
            messages.print_info("hello")
        self.assertIn("hello", stdout.getvalue())

    def test_module_helpers_use_a_fresh_printer_per_call(self) -> None:
        self.assertFalse(hasattr(messages, "_DEFAULT_PRINTER"))
        with mock.patch.object(messages, "MessagePrinter") as printer_cls:
            messages.print_warning("one")
            messages.print_error("two")
        self.assertEqual(printer_cls.call_count, 2)
        printer_cls.return_value.warning.assert_called_once_with("one")
        printer_cls.return_value.error.assert_called_once_with("two")


class ThemeSelectionTests(unittest.TestCase):
    def test_unknown_names_fall_back_to_default(self) -> None:
        self.assertEqual(normalize_theme_name(" OCEAN "), "ocean")
        self.assertEqual(normalize_theme_name("nope"), "default")
        self.assertEqual(normalize_theme_name(None), "default")

    def test_no_color_wins_over_name(self) -> None:
        self.assertIs(resolve_theme("ocean", no_color=True), PLAIN_THEME)
        self.assertEqual(PLAIN_THEME.paint(PLAIN_THEME.error, "x"), "x")


if __name__ == "__main__":
    unittest.main()
