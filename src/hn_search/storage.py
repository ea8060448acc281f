from __future__ import annotations

import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger("hn_search")


class KeyValueStore:
    """String key/value slots kept in a single JSON file."""

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (IOError, ValueError) as e:
            logger.warning("Failed to read storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed storage file %s", self.path)
            return {}
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            logger.debug("Stored %s in %s", key, self.path)
        except IOError as e:
            logger.warning("Failed to write storage file %s: %s", self.path, e)
