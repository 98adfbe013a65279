"""Persistent JSON config helpers.

Stores the change-watch debounce delay, the deep-tree warning depth, and the
CLI log level. All access is defensive: malformed or missing config falls
back safely.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from .file_tree_model import DEFAULT_MAX_SCAN_DEPTH
from .watch import DEFAULT_DEBOUNCE_SECONDS

APP_NAME = "projecttree"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_LOG_LEVEL = "WARNING"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def load_debounce_seconds() -> float:
    """Return the watcher quiet period; non-positive or non-numeric values fall back."""
    value = load_config().get("debounce_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return DEFAULT_DEBOUNCE_SECONDS
    return float(value)


def save_debounce_seconds(value: float) -> None:
    if value <= 0:
        return
    config = load_config()
    config["debounce_seconds"] = round(float(value), 3)
    save_config(config)


def load_max_scan_depth() -> int:
    """Return the depth past which a scan logs a deep-tree warning; integers >= 1 only."""
    value = load_config().get("max_scan_depth")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return DEFAULT_MAX_SCAN_DEPTH
    return value


def load_log_level() -> str:
    """Return a valid ``logging`` level name, defaulting to ``WARNING``."""
    value = load_config().get("log_level")
    if not isinstance(value, str):
        return DEFAULT_LOG_LEVEL
    name = value.strip().upper()
    return name if isinstance(logging.getLevelName(name), int) else DEFAULT_LOG_LEVEL
