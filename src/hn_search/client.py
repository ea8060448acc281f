from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urljoin

import requests

from .config import API_ENDPOINT, HTTP_TIMEOUT, REQUEST_HEADERS
from .datamodels import StoryRecord

logger = logging.getLogger("hn_search")

LATEST_STORIES_PATH = "search_by_date?tags=story"


class FetchFailure(RuntimeError):
    """Raised when the search API can't be reached or answers with an error."""


def search_path(term: str) -> str:
    return f"search?query={quote(term)}"


class HNSearchClient:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.endpoint = self.config.get("endpoint") or API_ENDPOINT
        if not self.endpoint.endswith("/"):
            self.endpoint += "/"
        self.timeout = self.config.get("timeout", HTTP_TIMEOUT)
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        return s

    def fetch_stories(self, query_path: str) -> List[StoryRecord]:
        """
        GET ``query_path`` relative to the endpoint and return its hits.

        A single attempt is made; any failure is logged and raised as
        ``FetchFailure``.
        """
        url = urljoin(self.endpoint, query_path)
        try:
            logger.debug("Fetching %s", url)
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            logger.error("Fetch failed for %s: %s", url, e)
            raise FetchFailure(str(e)) from e
        except ValueError as e:
            logger.error("Invalid JSON from %s: %s", url, e)
            raise FetchFailure(f"Invalid response from {url}") from e

        hits = payload.get("hits") if isinstance(payload, dict) else None
        if not isinstance(hits, list):
            logger.error("Response from %s has no hits array", url)
            raise FetchFailure(f"Unexpected response from {url}")

        stories = [StoryRecord.from_hit(hit) for hit in hits if isinstance(hit, dict)]
        logger.debug("Fetched %d stories from %s", len(stories), url)
        return stories
