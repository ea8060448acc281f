from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import HN_ITEM_URL

# --- Data models ---
SORT_FIELDS = ("title", "author", "points", "created_at")
DESCENDING_FIELDS = frozenset({"points", "created_at"})


@dataclass(frozen=True)
class StoryRecord:
    title: str
    author: str
    url: Optional[str]
    points: int
    created_at: str
    object_id: str

    @classmethod
    def from_hit(cls, hit: Dict[str, Any]) -> StoryRecord:
        """Build a record from one entry of the API's ``hits`` array."""
        return cls(
            title=hit.get("title") or "",
            author=hit.get("author") or "",
            url=hit.get("url") or None,
            points=hit.get("points") or 0,
            created_at=hit.get("created_at") or "",
            object_id=str(hit.get("objectID", "")),
        )

    @property
    def comments_url(self) -> str:
        return f"{HN_ITEM_URL}{self.object_id}"

    @property
    def link(self) -> str:
        # Ask HN and similar posts have no url of their own
        return self.url or self.comments_url

    @property
    def date(self) -> str:
        return self.created_at.split("T")[0]
