"""Tests for the keyboard file browser state machine and its frames."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from termgrid import browser as browser_mod
from termgrid.ansi import count_visual_lines
from termgrid.browser import EXITING, BrowserSelection, FileBrowser, format_size, select_files_keyboard
from termgrid.fs import DirectoryChild
from termgrid.terminal import erase_lines_sequence
from termgrid.theme import PLAIN_THEME

ROOT = Path("/virtual/root")


class FakeLister:
    """In-memory directory tree; directories listed as ``None`` are unreadable."""

    def __init__(self, tree: dict[Path, list[DirectoryChild] | None]) -> None:
        self.tree = tree
        self.calls: list[Path] = []

    def list_directory(self, directory: Path) -> list[DirectoryChild]:
        self.calls.append(directory)
        children = self.tree.get(directory)
        if children is None:
            raise PermissionError(13, "Permission denied", str(directory))
        return list(children)


class ScriptedKeys:
    def __init__(self, keys: list[str]) -> None:
        self.keys = list(keys)

    def read_key(self) -> str:
        return self.keys.pop(0) if self.keys else ""


def _file(parent: Path, name: str, size: int = 0) -> DirectoryChild:
    return DirectoryChild(name=name, path=parent / name, is_dir=False, file_size=size)


def _dir(parent: Path, name: str) -> DirectoryChild:
    return DirectoryChild(name=name, path=parent / name, is_dir=True)


def sample_tree() -> dict[Path, list[DirectoryChild] | None]:
    return {
        ROOT: [
            _file(ROOT, "c.pdf", 512),
            _file(ROOT, "b.txt", 2048),
            _dir(ROOT, "sub2"),
            _file(ROOT, "a.pdf", 1024),
            _dir(ROOT, "sub1"),
        ],
        ROOT / "sub1": [_file(ROOT / "sub1", "note.pdf", 10)],
        ROOT / "sub2": None,
    }


def terminal_size(columns: int = 80):
    return lambda _fallback=None: os.terminal_size((columns, 24))


class FileBrowserTests(unittest.TestCase):
    def setUp(self) -> None:
        self.writes: list[str] = []

    def _browser(self, tree=None, allowed=None, columns: int = 80) -> FileBrowser:
        browser = FileBrowser(
            ROOT,
            allowed,
            lister=FakeLister(tree if tree is not None else sample_tree()),
            write=self.writes.append,
            get_terminal_size=terminal_size(columns),
            theme=PLAIN_THEME,
        )
        browser.reload()
        return browser

    def _names(self, browser: FileBrowser) -> list[str]:
        return [item.name for item in browser.items]

    def test_listing_puts_directories_first_then_files_by_name(self) -> None:
        browser = self._browser()
        self.assertEqual(self._names(browser), ["sub1", "sub2", "a.pdf", "b.txt", "c.pdf"])
        self.assertEqual(browser.grid_columns(), 5)
        self.assertEqual(browser.item_cell_width(), 15)

    def test_extension_filter_keeps_directories(self) -> None:
        browser = self._browser(allowed=[".PDF"])
        self.assertEqual(self._names(browser), ["sub1", "sub2", "a.pdf", "c.pdf"])
        self.assertIn("Allowed: .pdf", browser.render_frame())

    def test_select_all_adds_only_files(self) -> None:
        browser = self._browser()
        self.assertTrue(browser.handle_key("a"))
        self.assertEqual(browser.selection.paths(), [str(ROOT / n) for n in ("a.pdf", "b.txt", "c.pdf")])
        self.assertFalse(browser.handle_key("a"))

    def test_space_toggles_files_and_ignores_directories(self) -> None:
        browser = self._browser()
        self.assertFalse(browser.handle_key("SPACE"))
        browser.current_index = 2
        self.assertTrue(browser.handle_key("SPACE"))
        self.assertIn(ROOT / "a.pdf", browser.selection)
        browser.handle_key("SPACE")
        self.assertEqual(len(browser.selection), 0)

    def test_arrows_clamp_to_listing_bounds(self) -> None:
        browser = self._browser()
        self.assertFalse(browser.handle_key("LEFT"))
        self.assertFalse(browser.handle_key("UP"))
        self.assertTrue(browser.handle_key("DOWN"))
        self.assertEqual(browser.current_index, 4)
        self.assertFalse(browser.handle_key("RIGHT"))
        self.assertTrue(browser.handle_key("UP"))
        self.assertEqual(browser.current_index, 0)
        browser.handle_key("RIGHT")
        self.assertEqual(browser.current_index, 1)

    def test_enter_opens_directory_and_backspace_returns(self) -> None:
        browser = self._browser()
        self.assertTrue(browser.handle_key("ENTER"))
        self.assertEqual(browser.current_path, ROOT / "sub1")
        self.assertEqual(self._names(browser), ["..", "note.pdf"])
        self.assertIn("In: sub1", browser.render_frame())

        self.assertTrue(browser.handle_key("BACKSPACE"))
        self.assertEqual(browser.current_path, ROOT)
        self.assertEqual(browser.current_index, 0)
        self.assertFalse(browser.handle_key("BACKSPACE"))

    def test_parent_entry_navigates_up(self) -> None:
        browser = self._browser()
        browser.handle_key("ENTER")
        self.assertTrue(browser.handle_key("ENTER"))
        self.assertEqual(browser.current_path, ROOT)

    def test_navigation_never_leaves_root(self) -> None:
        browser = self._browser()
        self.assertFalse(browser.navigate(ROOT.parent))
        self.assertFalse(browser.navigate(Path("/elsewhere")))
        self.assertEqual(browser.current_path, ROOT)

    def test_unreadable_directory_shows_empty_listing(self) -> None:
        browser = self._browser()
        browser.current_index = 1
        browser.handle_key("ENTER")
        self.assertEqual(browser.current_path, ROOT / "sub2")
        self.assertEqual(browser.items, [])
        self.assertIsInstance(browser.scan_error, PermissionError)
        self.assertIn("No files found in this directory.", browser.render_frame())
        self.assertFalse(browser.handle_key("SPACE"))
        self.assertTrue(browser.handle_key("BACKSPACE"))

    def test_enter_without_selection_keeps_browsing(self) -> None:
        browser = self._browser()
        browser.current_index = 3
        self.assertFalse(browser.handle_key("ENTER"))
        self.assertNotEqual(browser.status, EXITING)

    def test_reload_picks_up_changes_and_clamps_cursor(self) -> None:
        tree = sample_tree()
        browser = self._browser(tree=tree)
        browser.current_index = 4
        tree[ROOT] = [_file(ROOT, "only.txt")]
        self.assertTrue(browser.handle_key("r"))
        self.assertEqual(self._names(browser), ["only.txt"])
        self.assertEqual(browser.current_index, 0)

    def test_clear_key_empties_selection(self) -> None:
        browser = self._browser()
        browser.handle_key("a")
        self.assertTrue(browser.handle_key("c"))
        self.assertEqual(len(browser.selection), 0)

    def test_frame_shows_selection_state(self) -> None:
        browser = self._browser()
        browser.handle_key("a")
        frame = browser.render_frame(80)
        self.assertIn("✓ Selected: 3 files", frame)
        self.assertIn("Press Enter to finish", frame)
        self.assertIn("✓ a.pdf", frame)
        self.assertIn("  sub1/", frame)
        self.assertIn("5 items | Current: 1", frame)
        self.assertIn("Grid: 5 columns × 15 chars | Terminal width: 80", frame)

    def test_large_directory_is_windowed_around_cursor(self) -> None:
        tree = {ROOT: [_file(ROOT, f"file{i:03d}.txt") for i in range(120)]}
        browser = self._browser(tree=tree)
        self.assertEqual(browser.visible_window(5), (0, 50))
        frame = browser.render_frame(80)
        self.assertIn("⋮ (70 items below)", frame)
        self.assertIn("Showing 1-50 of 120 items | Current: 1", frame)

        browser.current_index = 119
        self.assertEqual(browser.visible_window(5), (70, 120))
        frame = browser.render_frame(80)
        self.assertIn("⋮ (70 items above)", frame)
        self.assertNotIn("items below", frame)

        browser.current_index = 60
        start, end = browser.visible_window(5)
        self.assertEqual(start % 5, 0)
        self.assertTrue(start <= 60 < end)
        self.assertLessEqual(end - start, 50)

    def test_draw_erases_previous_frame(self) -> None:
        browser = self._browser()
        browser.draw()
        first = self.writes[0]
        browser.handle_key("RIGHT")
        browser.draw()
        self.assertTrue(self.writes[1].startswith(erase_lines_sequence(count_visual_lines(first, 80))))

    def test_run_returns_selection_in_order(self) -> None:
        browser = FileBrowser(
            ROOT,
            lister=FakeLister(sample_tree()),
            write=self.writes.append,
            get_terminal_size=terminal_size(),
            theme=PLAIN_THEME,
        )
        keys = ScriptedKeys(["RIGHT", "RIGHT", "RIGHT", "RIGHT", "SPACE", "LEFT", "LEFT", "SPACE", "ENTER"])
        self.assertEqual(browser.run(keys), [str(ROOT / "c.pdf"), str(ROOT / "a.pdf")])
        self.assertEqual(browser.status, EXITING)

    def test_ctrl_c_discards_selection(self) -> None:
        browser = FileBrowser(ROOT, lister=FakeLister(sample_tree()), write=self.writes.append, theme=PLAIN_THEME)
        self.assertEqual(browser.run(ScriptedKeys(["a", "CTRL_C"])), [])

    def test_escape_and_closed_input_keep_selection(self) -> None:
        for final in ("ESC", ""):
            browser = FileBrowser(
                ROOT,
                lister=FakeLister(sample_tree()),
                write=self.writes.append,
                get_terminal_size=terminal_size(),
                theme=PLAIN_THEME,
            )
            self.assertEqual(len(browser.run(ScriptedKeys(["a", final]))), 3)

    def test_unknown_keys_are_ignored(self) -> None:
        browser = self._browser()
        self.assertFalse(browser.handle_key("UNKNOWN"))
        self.assertFalse(browser.handle_key("z"))
        self.assertNotEqual(browser.status, EXITING)


class BrowserSelectionTests(unittest.TestCase):
    def test_preserves_insertion_order_without_duplicates(self) -> None:
        selection = BrowserSelection()
        self.assertTrue(selection.add(Path("/b")))
        self.assertTrue(selection.add(Path("/a")))
        self.assertFalse(selection.add(Path("/b")))
        self.assertEqual(selection.paths(), ["/b", "/a"])

    def test_total_size_skips_unreadable_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            present = Path(tmp) / "present.bin"
            present.write_bytes(b"x" * 2048)
            selection = BrowserSelection([present, Path(tmp) / "gone.bin"])
            self.assertEqual(selection.total_size(), 2048)

    def test_format_size(self) -> None:
        self.assertEqual(format_size(2048), "2.0 KB")
        self.assertEqual(format_size(0), "0.0 KB")


class SelectFilesKeyboardTests(unittest.TestCase):
    def test_real_directory_session_with_summary(self) -> None:
        writes: list[str] = []
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "report.pdf").write_bytes(b"x" * 2048)
            (root / "notes.txt").write_text("hello", encoding="utf-8")
            (root / "nested").mkdir()

            paths = select_files_keyboard(
                root,
                [".pdf"],
                keys=ScriptedKeys(["RIGHT", "SPACE", "ENTER"]),
                write=writes.append,
                get_terminal_size=terminal_size(),
                theme=PLAIN_THEME,
            )

            self.assertEqual(paths, [str(root.resolve() / "report.pdf")])
        output = "".join(writes)
        self.assertIn("✓ File Selection Complete!", output)
        self.assertIn("Selected 1 files (2.0 KB total)", output)
        self.assertIn("report.pdf", output)

    def test_summary_flags_unreadable_files(self) -> None:
        writes: list[str] = []
        paths = select_files_keyboard(
            ROOT,
            lister=FakeLister(sample_tree()),
            keys=ScriptedKeys(["a", "ESC"]),
            write=writes.append,
            get_terminal_size=terminal_size(),
            theme=PLAIN_THEME,
        )
        self.assertEqual(len(paths), 3)
        self.assertIn("Error reading file", "".join(writes))

    def test_quiet_session_writes_no_summary(self) -> None:
        writes: list[str] = []
        select_files_keyboard(
            ROOT,
            lister=FakeLister(sample_tree()),
            keys=ScriptedKeys(["a", "ESC"]),
            write=writes.append,
            get_terminal_size=terminal_size(),
            theme=PLAIN_THEME,
            show_summary=False,
        )
        self.assertNotIn("File Selection Complete", "".join(writes))

    def test_non_interactive_stdin_selects_nothing(self) -> None:
        writes: list[str] = []
        with mock.patch.object(browser_mod, "fd_is_tty", return_value=False):
            with self.assertLogs("termgrid.browser", level="WARNING"):
                paths = select_files_keyboard(ROOT, lister=FakeLister(sample_tree()), write=writes.append)
        self.assertEqual(paths, [])
        self.assertEqual(writes, [])

    def test_interactive_session_runs_inside_exclusive_input(self) -> None:
        controller = mock.MagicMock()
        reader = ScriptedKeys(["a", "ESC"])
        with mock.patch.object(browser_mod, "_stdin_fd", return_value=7), mock.patch.object(
            browser_mod, "fd_is_tty", return_value=True
        ), mock.patch.object(browser_mod, "TerminalController", return_value=controller) as controller_cls, mock.patch.object(
            browser_mod, "KeyReader", return_value=reader
        ) as reader_cls:
            paths = select_files_keyboard(
                ROOT,
                lister=FakeLister(sample_tree()),
                write=lambda _text: None,
                get_terminal_size=terminal_size(),
                theme=PLAIN_THEME,
                show_summary=False,
            )
        self.assertEqual(len(paths), 3)
        self.assertEqual(controller_cls.call_args.args[0], 7)
        reader_cls.assert_called_once_with(7)
        controller.exclusive_input.assert_called_once_with()
        controller.exclusive_input.return_value.__exit__.assert_called_once()


if __name__ == "__main__":
    unittest.main()
