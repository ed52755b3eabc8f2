"""Persistent JSON config helpers.

Stores the hidden-file preference, the high-churn folder names that default
to modified-date sorting, and search tuning values. Also derives the default
locations of the tag store and the folder-size cache.
Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_cache_dir, user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "duxfiles"
CONFIG_FILENAME = "config.json"
TAG_STORE_FILENAME = "color-labels.json"
FOLDER_SIZE_CACHE_FILENAME = "folder-sizes.json"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME

DEFAULT_HIGH_CHURN_FOLDERS = ("Downloads", "Desktop")
DEFAULT_SEARCH_DEBOUNCE_MS = 200
DEFAULT_SEARCH_MAX_RESULTS = 200


def default_tag_store_path() -> Path:
    """Return the tag store path inside the user config directory."""
    return CONFIG_DIR / TAG_STORE_FILENAME


def default_folder_size_cache_path() -> Path:
    """Return the advisory folder-size cache path inside the user cache directory."""
    return Path(user_cache_dir(APP_NAME, appauthor=False)) / FOLDER_SIZE_CACHE_FILENAME


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
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> bool:
    """Persist config data as pretty-printed JSON.

    Filesystem/serialization errors are logged and reported through the
    return value so runtime behavior stays non-fatal.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("could not save config %s: %s", CONFIG_PATH, exc)
        return False
    return True


def load_show_hidden() -> bool:
    """Return persisted hidden-file visibility preference.

    Only explicit boolean values are accepted; any other type falls back to
    ``False``.
    """
    value = load_config().get("show_hidden")
    return value if isinstance(value, bool) else False


def save_show_hidden(show_hidden: bool) -> bool:
    """Persist hidden-file visibility preference as a boolean."""
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    return save_config(config)


def load_high_churn_folders() -> frozenset[str]:
    """Return casefolded folder names that default to modified-date sorting."""
    value = load_config().get("high_churn_folders")
    if not isinstance(value, list):
        names = DEFAULT_HIGH_CHURN_FOLDERS
    else:
        names = tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    return frozenset(name.casefold() for name in names)


def _load_positive_int(key: str, default: int) -> int:
    """Read a positive integer; booleans and other types fall back to ``default``."""
    value = load_config().get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def load_search_debounce_seconds() -> float:
    return _load_positive_int("search_debounce_ms", DEFAULT_SEARCH_DEBOUNCE_MS) / 1000.0


def load_search_max_results() -> int:
    return _load_positive_int("search_max_results", DEFAULT_SEARCH_MAX_RESULTS)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_HIGH_CHURN_FOLDERS",
    "default_folder_size_cache_path",
    "default_tag_store_path",
    "load_config",
    "load_high_churn_folders",
    "load_search_debounce_seconds",
    "load_search_max_results",
    "load_show_hidden",
    "save_config",
    "save_show_hidden",
]
