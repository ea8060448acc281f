from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from .client import LATEST_STORIES_PATH, search_path
from .datamodels import SORT_FIELDS, StoryRecord
from .listing import filter_stories, sort_stories

logger = logging.getLogger("hn_search")

DEFAULT_SORT_FIELD = "points"


@dataclass(frozen=True)
class SearchState:
    search_term: str = ""
    filter_query: str = ""
    sort_field: str = DEFAULT_SORT_FIELD
    theme_on: bool = True
    stories: Tuple[StoryRecord, ...] = ()
    error: Optional[str] = None
    last_request_id: int = 0
    in_flight: int = 0

    @property
    def loading(self) -> bool:
        return self.in_flight > 0


# --- Actions ---
@dataclass(frozen=True)
class Startup:
    pass


@dataclass(frozen=True)
class SearchEdited:
    term: str


@dataclass(frozen=True)
class SearchSubmitted:
    pass


@dataclass(frozen=True)
class FilterEdited:
    text: str


@dataclass(frozen=True)
class ResetRequested:
    pass


@dataclass(frozen=True)
class ColumnSelected:
    field: str


@dataclass(frozen=True)
class ThemeToggled:
    pass


@dataclass(frozen=True)
class FetchSucceeded:
    request_id: int
    stories: Tuple[StoryRecord, ...]


@dataclass(frozen=True)
class FetchFailed:
    request_id: int
    message: str


@dataclass(frozen=True)
class ErrorDismissed:
    pass


Action = Union[
    Startup,
    SearchEdited,
    SearchSubmitted,
    FilterEdited,
    ResetRequested,
    ColumnSelected,
    ThemeToggled,
    FetchSucceeded,
    FetchFailed,
    ErrorDismissed,
]


# --- Effects ---
@dataclass(frozen=True)
class FetchStories:
    query_path: str
    request_id: int


@dataclass(frozen=True)
class StoreSearchTerm:
    term: str


Effect = Union[FetchStories, StoreSearchTerm]


def initial_state(
    stored_term: Optional[str],
    theme_on: bool = True,
    sort_field: str = DEFAULT_SORT_FIELD,
) -> SearchState:
    if sort_field not in SORT_FIELDS:
        logger.warning("Unknown sort field %r, using %s", sort_field, DEFAULT_SORT_FIELD)
        sort_field = DEFAULT_SORT_FIELD
    return SearchState(
        search_term=stored_term or "", theme_on=theme_on, sort_field=sort_field
    )


def visible_stories(state: SearchState) -> Tuple[StoryRecord, ...]:
    """The rows to display; derived on every render and never stored."""
    return filter_stories(state.stories, state.filter_query)


def _start_fetch(state: SearchState, query_path: str) -> Tuple[SearchState, FetchStories]:
    request_id = state.last_request_id + 1
    new_state = replace(
        state, last_request_id=request_id, in_flight=state.in_flight + 1
    )
    return new_state, FetchStories(query_path, request_id)


def _is_stale(state: SearchState, request_id: int, discard_stale: bool) -> bool:
    if discard_stale and request_id != state.last_request_id:
        logger.debug(
            "Discarding response %d, latest request is %d",
            request_id,
            state.last_request_id,
        )
        return True
    return False


def update(
    state: SearchState, action: Action, discard_stale: bool = False
) -> Tuple[SearchState, List[Effect]]:
    """
    Apply ``action`` to ``state``.

    Returns the new state together with the side effects the caller must
    carry out. By default, overlapping fetches resolve last-response-wins;
    ``discard_stale`` drops any response that isn't for the newest request.
    """
    if isinstance(action, Startup):
        query_path = (
            search_path(state.search_term) if state.search_term else LATEST_STORIES_PATH
        )
        new_state, fetch = _start_fetch(state, query_path)
        return new_state, [fetch]

    if isinstance(action, SearchEdited):
        return replace(state, search_term=action.term), []

    if isinstance(action, SearchSubmitted):
        # The submit control is disabled while the term is empty
        if not state.search_term:
            return state, []
        new_state, fetch = _start_fetch(state, search_path(state.search_term))
        return new_state, [StoreSearchTerm(state.search_term), fetch]

    if isinstance(action, FilterEdited):
        return replace(state, filter_query=action.text.lower()), []

    if isinstance(action, ResetRequested):
        new_state, fetch = _start_fetch(state, LATEST_STORIES_PATH)
        new_state = replace(new_state, search_term="", filter_query="")
        return new_state, [fetch, StoreSearchTerm("")]

    if isinstance(action, ColumnSelected):
        if action.field not in SORT_FIELDS:
            return state, []
        stories = sort_stories(state.stories, action.field)
        return replace(state, stories=stories, sort_field=action.field), []

    if isinstance(action, ThemeToggled):
        return replace(state, theme_on=not state.theme_on), []

    if isinstance(action, FetchSucceeded):
        settled = replace(state, in_flight=max(0, state.in_flight - 1))
        if _is_stale(state, action.request_id, discard_stale):
            return settled, []
        return (
            replace(
                settled,
                stories=sort_stories(action.stories, state.sort_field),
                error=None,
            ),
            [],
        )

    if isinstance(action, FetchFailed):
        settled = replace(state, in_flight=max(0, state.in_flight - 1))
        if _is_stale(state, action.request_id, discard_stale):
            return settled, []
        return replace(settled, error=action.message), []

    if isinstance(action, ErrorDismissed):
        return replace(state, error=None), []

    raise TypeError(f"Unknown action: {action!r}")
