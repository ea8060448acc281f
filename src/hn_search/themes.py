from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from textual.theme import Theme

logger = logging.getLogger("hn_search")

# --- Theme Configuration ---
USER_THEMES_PATH = Path.home() / ".config/hn_search/themes.json"

LIGHT_THEME = "hn-light"
DARK_THEME = "hn-dark"

DEFAULT_THEMES: Dict[str, Dict[str, Any]] = {
    LIGHT_THEME: {
        "primary": "#ff6600",
        "secondary": "#828282",
        "accent": "#ff6600",
        "foreground": "#303030",
        "background": "#f6f6ef",
        "surface": "#f6f6ef",
        "panel": "#e8e8df",
        "error": "#b00020",
        "dark": False,
    },
    DARK_THEME: {
        "primary": "#ff6600",
        "secondary": "#9da5b4",
        "accent": "#ffa657",
        "foreground": "#ffffff",
        "background": "#282c34",
        "surface": "#2c313a",
        "panel": "#21252b",
        "error": "#e06c75",
        "dark": True,
    },
}


def load_themes() -> Dict[str, Theme]:
    """
    Build the light and dark themes, letting the user's themes file override
    individual colours.
    """
    definitions = {name: dict(d) for name, d in DEFAULT_THEMES.items()}

    if USER_THEMES_PATH.exists():
        try:
            with open(USER_THEMES_PATH, "r") as f:
                user_defs = json.load(f)
            for name, overrides in user_defs.items():
                if name in definitions and isinstance(overrides, dict):
                    definitions[name].update(overrides)
        except (IOError, json.JSONDecodeError, AttributeError) as e:
            logger.warning("Ignoring themes file %s: %s", USER_THEMES_PATH, e)

    themes = {}
    for name, definition in definitions.items():
        try:
            themes[name] = Theme(name=name, **definition)
        except TypeError as e:
            logger.warning("Invalid theme definition for '%s': %s", name, e)
            themes[name] = Theme(name=name, **DEFAULT_THEMES[name])
    return themes


def is_daytime(now: datetime) -> bool:
    """Daylight hours run from 07:00 up to 20:00 local time."""
    return 7 <= now.hour < 20


def default_theme_on(setting: str = "auto", now: Optional[datetime] = None) -> bool:
    """Resolve the initial light/dark flag from a ``light|dark|auto`` setting."""
    if setting == "light":
        return True
    if setting == "dark":
        return False
    return is_daytime(now or datetime.now())


def theme_name_for(theme_on: bool) -> str:
    return LIGHT_THEME if theme_on else DARK_THEME
