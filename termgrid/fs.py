"""Filesystem listing and browser-item construction.

Listing goes through a one-level ``DirectoryLister`` so the browser can be
driven by a fake in tests. Scan and stat failures degrade the listing instead
of aborting it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

LOGGER = logging.getLogger(__name__)

FILE = "file"
DIRECTORY = "directory"
PARENT = "parent"
PARENT_NAME = ".."


@dataclass(frozen=True)
class DirectoryChild:
    """One directory child observed by a lister."""

    name: str
    path: Path
    is_dir: bool
    file_size: int | None = None


@dataclass(frozen=True)
class BrowserItem:
    """One entry shown in the browser grid."""

    type: str
    path: Path
    name: str
    size: int | None = None

    @property
    def is_file(self) -> bool:
        return self.type == FILE

    @property
    def is_navigable(self) -> bool:
        return self.type in (DIRECTORY, PARENT)


class DirectoryLister(Protocol):
    def list_directory(self, directory: Path) -> list[DirectoryChild]: ...


def safe_file_size(path: Path) -> int | None:
    """Return file size in bytes or ``None`` on stat failure."""
    try:
        return int(path.stat().st_size)
    except OSError:
        return None


class OSDirectoryLister:
    """List one directory level with ``os.scandir``.

    Raises ``OSError`` when the directory itself cannot be scanned; per-entry
    stat failures only drop that entry's size.
    """

    def __init__(self, show_hidden: bool = True) -> None:
        self.show_hidden = show_hidden

    def list_directory(self, directory: Path) -> list[DirectoryChild]:
        children: list[DirectoryChild] = []
        with os.scandir(directory) as entries:
            for child in entries:
                name = child.name
                if not self.show_hidden and name.startswith("."):
                    continue
                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False

                file_size: int | None = None
                if not is_dir:
                    try:
                        file_size = int(child.stat().st_size)
                    except OSError:
                        pass
                children.append(
                    DirectoryChild(
                        name=name,
                        path=Path(child.path),
                        is_dir=is_dir,
                        file_size=file_size,
                    )
                )
        return children


def normalize_extensions(extensions: Iterable[str] | None) -> tuple[str, ...] | None:
    """Return lower-case, dot-prefixed extensions, or ``None`` for "allow all"."""
    if extensions is None:
        return None
    normalized: list[str] = []
    for ext in extensions:
        value = str(ext).strip().lower()
        if not value:
            continue
        if not value.startswith("."):
            value = "." + value
        if value not in normalized:
            normalized.append(value)
    return tuple(normalized) or None


def extension_allowed(name: str, allowed: tuple[str, ...] | None) -> bool:
    if allowed is None:
        return True
    return Path(name).suffix.lower() in allowed


def is_within_root(path: Path, root: Path) -> bool:
    return path.is_relative_to(root)


def build_browser_items(
    lister: DirectoryLister,
    directory: Path,
    root: Path,
    allowed_extensions: tuple[str, ...] | None = None,
) -> tuple[list[BrowserItem], Exception | None]:
    """Build the full listing for ``directory``.

    Returns ``(items, scan_error)``. The parent entry comes first unless
    ``directory`` is ``root``, then directories, then allowed files, each group
    ordered by case-folded name. An unreadable directory yields an empty
    listing and the error.
    """
    items: list[BrowserItem] = []
    if directory != root:
        items.append(BrowserItem(type=PARENT, path=directory.parent, name=PARENT_NAME))

    try:
        children = lister.list_directory(directory)
    except OSError as exc:
        LOGGER.debug("cannot list %s: %s", directory, exc)
        return [], exc

    children = sorted(children, key=lambda child: (not child.is_dir, child.name.casefold(), child.name))
    for child in children:
        if child.is_dir:
            items.append(BrowserItem(type=DIRECTORY, path=child.path, name=child.name))
            continue
        if not extension_allowed(child.name, allowed_extensions):
            continue
        items.append(BrowserItem(type=FILE, path=child.path, name=child.name, size=child.file_size))
    return items, None


__all__ = [
    "FILE",
    "DIRECTORY",
    "PARENT",
    "PARENT_NAME",
    "DirectoryChild",
    "BrowserItem",
    "DirectoryLister",
    "OSDirectoryLister",
    "safe_file_size",
    "normalize_extensions",
    "extension_allowed",
    "is_within_root",
    "build_browser_items",
]
