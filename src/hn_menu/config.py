from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
HN_API_BASE = "https://hacker-news.firebaseio.com/v0"
TOP_STORIES_URL = f"{HN_API_BASE}/topstories.json"
ITEM_URL = HN_API_BASE + "/item/{id}.json"
HN_ITEM_PAGE_URL = "https://news.ycombinator.com/item?id={id}"
HTTP_TIMEOUT = 15

NUM_POSTS = 500
RELOAD_INTERVAL = 3600.0
FETCH_TIMEOUT = 60.0
FILTER_DEBOUNCE = 0.5
MAX_WORKERS = 32
MAX_TITLE_CHARS = 40
DEFAULT_THEME = "textual-dark"

HEADLINE_PLACEHOLDER = "Reading HN…"
HEADLINE_HIDDEN = "ℏ"

CONFIG_PATH = os.path.expanduser("~/.config/hn-menu/config.json")
STATE_DIR = os.environ.get(
    "HN_MENU_STATE_DIR", os.path.expanduser("~/.local/state/hn-menu")
)

REQUEST_HEADERS = {
    "User-Agent": "hn-menu/0.1 (+https://news.ycombinator.com)",
    "Accept": "application/json",
}

DEFAULT_CONFIG: Dict[str, Any] = {
    "num_posts": NUM_POSTS,
    "reload_interval": RELOAD_INTERVAL,
    "fetch_timeout": FETCH_TIMEOUT,
    "filter_debounce": FILTER_DEBOUNCE,
    "max_workers": MAX_WORKERS,
    "theme": DEFAULT_THEME,
}

# --- Logging ---
logger = logging.getLogger("hn_menu")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/hn_menu_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(threadName)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def ensure_config_file_exists(path: str = CONFIG_PATH) -> None:
    """Write the default config file if the user's config file is not found."""
    if os.path.exists(path):
        return
    logger.info("Config file not found at %s, creating default.", path)
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            json.dump(DEFAULT_CONFIG, f, indent=2)
    except (IOError, OSError) as e:
        logger.error("Failed to create default config file: %s", e)


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load the main configuration file."""
    ensure_config_file_exists(path)
    try:
        with open(path, "r") as f:
            config = json.load(f)
            logger.info("Loaded config from %s", path)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        return {}
    if not isinstance(config, dict):
        logger.error("Ignoring config at %s: expected a JSON object", path)
        return {}
    return config


@dataclass(frozen=True)
class Settings:
    num_posts: int = NUM_POSTS
    reload_interval: float = RELOAD_INTERVAL
    fetch_timeout: float = FETCH_TIMEOUT
    filter_debounce: float = FILTER_DEBOUNCE
    max_workers: int = MAX_WORKERS
    theme: str = DEFAULT_THEME

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Settings":
        """Resolve settings from a loaded config dict.

        Missing keys fall back to the defaults. Values that cannot be coerced
        to the expected type, or that are not positive, are ignored with a
        warning.
        """
        values: Dict[str, Any] = {}
        for name, cast in (
            ("num_posts", int),
            ("reload_interval", float),
            ("fetch_timeout", float),
            ("filter_debounce", float),
            ("max_workers", int),
        ):
            if name not in config:
                continue
            try:
                value = cast(config[name])
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid %s in config: %r", name, config[name])
                continue
            # A zero debounce means "filter on every keystroke"; nothing else may be zero.
            if value < 0 or (value == 0 and name != "filter_debounce"):
                logger.warning("Ignoring out of range %s in config: %r", name, value)
                continue
            values[name] = value

        theme = config.get("theme")
        if isinstance(theme, str) and theme:
            values["theme"] = theme

        return cls(**values)
