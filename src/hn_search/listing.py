from __future__ import annotations

from typing import Iterable, Tuple

from .datamodels import DESCENDING_FIELDS, SORT_FIELDS, StoryRecord


def sort_stories(stories: Iterable[StoryRecord], field: str) -> Tuple[StoryRecord, ...]:
    """
    Return the stories ordered by ``field``.

    Points and dates run newest/largest first; title and author run
    alphabetically. Ties keep their incoming order.
    """
    if field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {field}")
    return tuple(
        sorted(
            stories,
            key=lambda s: getattr(s, field),
            reverse=field in DESCENDING_FIELDS,
        )
    )


def matches_prefix(story: StoryRecord, query: str) -> bool:
    query = query.lower()
    return story.title.lower().startswith(query) or story.author.lower().startswith(
        query
    )


def filter_stories(stories: Iterable[StoryRecord], query: str) -> Tuple[StoryRecord, ...]:
    """Keep stories whose title or author starts with ``query``, ignoring case."""
    if not query:
        return tuple(stories)
    return tuple(s for s in stories if matches_prefix(s, query))
