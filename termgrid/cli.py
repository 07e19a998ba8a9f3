"""Command-line front door for termgrid.

``table`` renders a JSON array of records, ``detail`` renders one record in a
detail box, and ``pick`` runs the interactive file browser and prints the
chosen paths.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from . import config
from .browser import select_files_keyboard
from .layout import ColumnSpec
from .messages import MessagePrinter
from .panel import html_to_text, print_detail_box
from .table import Table, TableOptions
from .theme import GridTheme, available_theme_names, resolve_theme

CONTENT_COLUMN_MAX_WIDTH = 40


def _load_json(source: str) -> object:
    """Read JSON from a path or ``-`` for stdin, exiting with a message on failure."""
    try:
        if source == "-":
            return json.load(sys.stdin)
        path = Path(source)
        if not path.exists():
            raise SystemExit(f"Path not found: {path}")
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {source}: {exc}") from exc


def _record_keys(records: list[dict]) -> list[str]:
    keys: list[str] = []
    for record in records:
        for key in record:
            if isinstance(key, str) and not key.startswith("_") and key not in keys:
                keys.append(key)
    return keys


def build_columns(keys: list[str]) -> list[ColumnSpec]:
    """First column flexes to fill the terminal; the rest fit their content."""
    columns: list[ColumnSpec] = []
    for idx, key in enumerate(keys):
        header = key.replace("_", " ").title()
        if idx == 0:
            columns.append(ColumnSpec(key=key, header=header, flex=1, min_width=15))
        else:
            columns.append(ColumnSpec(key=key, header=header, max_width=CONTENT_COLUMN_MAX_WIDTH))
    return columns


def _stderr_write(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def _use_plain_output(no_color: bool) -> bool:
    if no_color or "NO_COLOR" in os.environ:
        return True
    try:
        return not sys.stdout.isatty()
    except (AttributeError, ValueError):
        return True


def _run_table(args: argparse.Namespace, theme: GridTheme) -> None:
    data = _load_json(args.file)
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise SystemExit("Table input must be a JSON array of objects.")
    keys = args.columns.split(",") if args.columns else _record_keys(data)
    options = TableOptions(
        title=args.title,
        show_row_numbers=not args.no_row_numbers,
        wrap_mode=args.wrap or config.load_wrap_mode(),
    )
    table = Table(
        build_columns([key.strip() for key in keys if key.strip()]),
        options,
        theme=theme,
        max_terminal_width=config.load_max_table_width(),
    ).add_rows(data)
    if not args.watch:
        table.render()
        return
    table.render_with_resize(
        debounce_seconds=config.load_resize_debounce_seconds(),
        trailer=theme.paint(theme.info, "\nPress Enter to continue: "),
    )
    try:
        input()
    except EOFError:
        pass
    finally:
        table.stop_watching()


def _run_detail(args: argparse.Namespace, theme: GridTheme) -> None:
    data = _load_json(args.file)
    if not isinstance(data, dict):
        raise SystemExit("Detail input must be a JSON object.")
    title = str(data.get(args.title_key) or "Untitled")
    body = str(data.get(args.body_key) or "")
    if args.html:
        body = html_to_text(body)
    metadata = [
        (key.replace("_", " ").title(), str(value))
        for key, value in data.items()
        if key not in {args.title_key, args.body_key} and not str(key).startswith("_")
    ]
    print_detail_box(title, metadata, body, theme=theme)


def _run_pick(args: argparse.Namespace, theme: GridTheme) -> None:
    root = Path(args.directory or Path.cwd())
    if not root.is_dir():
        raise SystemExit(f"Not a directory: {root}")
    paths = select_files_keyboard(root, args.ext or None, theme=theme, show_summary=not args.quiet)
    if not paths:
        MessagePrinter(write=_stderr_write, theme=theme).warning("No files selected.")
        return
    for path in paths:
        print(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termgrid",
        description="Render tables and pick files in the terminal.",
    )
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--debug", action="store_true", help="Log debug messages to stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    table = sub.add_parser("table", help="Render a JSON array of objects as a table.")
    table.add_argument("file", help="JSON file path, or - for stdin.")
    table.add_argument("--title", default=None, help="Title printed above the table.")
    table.add_argument("--columns", default=None, help="Comma-separated keys to show, in order.")
    table.add_argument("--wrap", action="store_true", help="Wrap long cells instead of truncating.")
    table.add_argument("--no-row-numbers", action="store_true", help="Hide the row-number gutter.")
    table.add_argument("--watch", action="store_true", help="Redraw on terminal resize until Enter.")

    detail = sub.add_parser("detail", help="Render one JSON object as a detail box.")
    detail.add_argument("file", help="JSON file path, or - for stdin.")
    detail.add_argument("--title-key", default="title", help="Key holding the title.")
    detail.add_argument("--body-key", default="message", help="Key holding the body text.")
    detail.add_argument("--html", action="store_true", help="Convert an HTML body to plain text.")

    pick = sub.add_parser("pick", help="Select files interactively and print their paths.")
    pick.add_argument("directory", nargs="?", default=None, help="Root directory. Defaults to cwd.")
    pick.add_argument(
        "--ext",
        action="append",
        default=None,
        help="Allowed file extension (repeatable), e.g. --ext .pdf.",
    )
    pick.add_argument("--quiet", action="store_true", help="Skip the selection summary table.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the chosen subcommand."""
    args = build_parser().parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    theme = resolve_theme(
        args.theme or config.load_theme_name(),
        no_color=_use_plain_output(args.no_color),
    )
    if args.command == "table":
        _run_table(args, theme)
    elif args.command == "detail":
        _run_detail(args, theme)
    elif args.command == "pick":
        _run_pick(args, theme)


if __name__ == "__main__":
    main()
