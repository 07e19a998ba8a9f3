"""Persistent JSON config helpers.

Stores the UI theme, the table width cap, the resize debounce delay, and the
default wrap mode. All access is defensive: malformed or missing config falls
back to defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from .layout import MAX_TERMINAL_WIDTH
from .resize import DEFAULT_DEBOUNCE_SECONDS

LOGGER = logging.getLogger(__name__)

APP_NAME = "termgrid"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

TABLE_WIDTH_BOUNDS = (40, 1000)
DEBOUNCE_MS_BOUNDS = (10, 2000)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        LOGGER.debug("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON; write failures are ignored."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        LOGGER.debug("cannot write config %s: %s", CONFIG_PATH, exc)


def _load_bounded_int(key: str, bounds: tuple[int, int], default: int) -> int:
    """Read an integer constrained to ``bounds``; booleans and other types are rejected."""
    value = load_config().get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    low, high = bounds
    if value < low or value > high:
        return default
    return value


def load_theme_name() -> str | None:
    """Load persisted UI theme name, returning ``None`` when unset/invalid."""
    value = load_config().get("theme")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def save_theme_name(theme_name: str) -> None:
    stripped = str(theme_name).strip()
    if not stripped:
        return
    config = load_config()
    config["theme"] = stripped
    save_config(config)


def load_max_table_width() -> int:
    return _load_bounded_int("max_table_width", TABLE_WIDTH_BOUNDS, MAX_TERMINAL_WIDTH)


def load_resize_debounce_seconds() -> float:
    default_ms = int(DEFAULT_DEBOUNCE_SECONDS * 1000)
    return _load_bounded_int("resize_debounce_ms", DEBOUNCE_MS_BOUNDS, default_ms) / 1000.0


def load_wrap_mode() -> bool:
    """Return persisted default wrap mode; only explicit booleans count."""
    value = load_config().get("wrap_mode")
    return value if isinstance(value, bool) else False


def save_wrap_mode(wrap_mode: bool) -> None:
    config = load_config()
    config["wrap_mode"] = bool(wrap_mode)
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "load_config",
    "save_config",
    "load_theme_name",
    "save_theme_name",
    "load_max_table_width",
    "load_resize_debounce_seconds",
    "load_wrap_mode",
    "save_wrap_mode",
]
