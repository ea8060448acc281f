#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys

from .app import HNSearchApp
from .client import HNSearchClient
from .config import STORAGE_FILE, STORED_SEARCH_KEY, load_config, setup_logging
from .datamodels import SORT_FIELDS
from .state import initial_state
from .storage import KeyValueStore
from .themes import default_theme_on

logger = logging.getLogger("hn_search")


# --- Entrypoint ---
def main() -> None:
    parser = argparse.ArgumentParser(description="Hacker News search TUI")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    theme_group = parser.add_mutually_exclusive_group()
    theme_group.add_argument(
        "--light", action="store_const", const="light", dest="theme", help="Start in light mode"
    )
    theme_group.add_argument(
        "--dark", action="store_const", const="dark", dest="theme", help="Start in dark mode"
    )
    parser.add_argument(
        "--sort",
        choices=SORT_FIELDS,
        help="Initial sort column (default from config, else points)",
    )
    args = parser.parse_args()

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()
    theme_on = default_theme_on(args.theme or config.get("theme", "auto"))
    logger.info("Starting in %s mode", "light" if theme_on else "dark")

    storage = KeyValueStore(STORAGE_FILE)
    state = initial_state(
        storage.get(STORED_SEARCH_KEY),
        theme_on=theme_on,
        sort_field=args.sort or config.get("sort_field", "points"),
    )

    try:
        app = HNSearchApp(
            state=state, storage=storage, client=HNSearchClient(config), config=config
        )
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)


if __name__ == "__main__":
    main()
