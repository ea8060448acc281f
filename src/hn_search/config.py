from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
API_ENDPOINT = "https://hn.algolia.com/api/v1/"
HN_ITEM_URL = "https://news.ycombinator.com/item?id="
HTTP_TIMEOUT = 15

CONFIG_PATH = os.path.expanduser("~/.config/hn_search/config.json")
STORAGE_FILE = os.path.expanduser("~/.config/hn_search/storage.json")
STORED_SEARCH_KEY = "storedSearch"

REQUEST_HEADERS = {
    "User-Agent": "hn-search-tui/0.1 (+https://hn.algolia.com/api)",
    "Accept": "application/json",
}

# Default UI settings
UI_DEFAULTS = {
    "statusbar_keybindings": (
        "[b {color}]ctrl+r[/] reset, [b {color}]ctrl+t[/] theme, "
        "[b {color}]ctrl+o[/] comments"
    ),
}

DEFAULT_CONFIG: Dict[str, Any] = {
    "endpoint": API_ENDPOINT,
    "timeout": HTTP_TIMEOUT,
    "sort_field": "points",
    "discard_stale_responses": False,
    "theme": "auto",
    "ui": dict(UI_DEFAULTS),
}

# --- Logging ---
logger = logging.getLogger("hn_search")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/hn_search_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def ensure_config_file_exists() -> None:
    """Write the default config file if the user's config file is not found."""
    if not os.path.exists(CONFIG_PATH):
        logger.info("Config file not found at %s, creating default.", CONFIG_PATH)
        save_config(DEFAULT_CONFIG)


def load_config() -> Dict[str, Any]:
    """Load the main configuration file, layered over the defaults."""
    ensure_config_file_exists()
    config = dict(DEFAULT_CONFIG)
    try:
        with open(CONFIG_PATH, "r") as f:
            user_config = json.load(f)
        if not isinstance(user_config, dict):
            raise ValueError("top-level value is not an object")
        config.update(user_config)
        logger.info("Loaded config from %s", CONFIG_PATH)
    except (IOError, ValueError) as e:
        logger.error("Failed to load config from %s: %s", CONFIG_PATH, e)
    return config


def save_config(config: Dict[str, Any]) -> None:
    """Save the main configuration file."""
    try:
        os.makedirs(os.path.dirname(CONFIG_PATH), exist_ok=True)
        with open(CONFIG_PATH, "w") as f:
            json.dump(config, f, indent=2)
        logger.info("Saved config to %s", CONFIG_PATH)
    except IOError as e:
        logger.error("Failed to save config to %s: %s", CONFIG_PATH, e)
