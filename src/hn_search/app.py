from __future__ import annotations

import logging
import webbrowser
from functools import partial
from typing import Any, Dict, List, Optional, Tuple

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Header, Input, Label
from textual.worker import Worker, WorkerState

from . import messages
from .client import HNSearchClient
from .config import STORED_SEARCH_KEY, UI_DEFAULTS
from .datamodels import SORT_FIELDS, StoryRecord
from .state import (
    Action,
    ColumnSelected,
    Effect,
    ErrorDismissed,
    FetchFailed,
    FetchStories,
    FetchSucceeded,
    FilterEdited,
    ResetRequested,
    SearchEdited,
    SearchState,
    SearchSubmitted,
    Startup,
    StoreSearchTerm,
    ThemeToggled,
    update,
    visible_stories,
)
from .storage import KeyValueStore
from .themes import load_themes, theme_name_for
from .widgets import AppHeading, LightBulb, StatusBar, StoryTable

logger = logging.getLogger("hn_search")

STORIES_WORKER_PREFIX = "stories_loader:"


class HNSearchApp(App):
    TITLE = "HN Search"
    SUB_TITLE = "Hacker News story search"

    CSS_PATH = "app.css"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+r", "reset", "Latest stories"),
        Binding("ctrl+t", "toggle_theme", "Toggle theme"),
        Binding("ctrl+o", "open_comments", "Comments"),
        Binding("escape", "dismiss_error", "Dismiss error", show=False),
        Binding("/", "focus_filter", "Filter", show=False),
    ]

    def __init__(
        self,
        state: SearchState,
        storage: KeyValueStore,
        client: Optional[HNSearchClient] = None,
        config: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.config = config or {}
        self.search_state = state
        self.storage = storage
        self.client = client or HNSearchClient(self.config)
        self.discard_stale = bool(self.config.get("discard_stale_responses", False))
        self._rendered_rows: Optional[Tuple[Tuple[StoryRecord, ...], str]] = None
        self._shown_error: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="heading-bar"):
            yield AppHeading("HN Search", id="heading")
            yield LightBulb(id="light-bulb")
        with Horizontal(id="controls"):
            yield Label("Search:", classes="control-label")
            yield Input(
                value=self.search_state.search_term,
                placeholder="Search stories...",
                id="search",
            )
            yield Button("Submit", id="submit", disabled=not self.search_state.search_term)
            yield Label("Filter:", classes="control-label")
            yield Input(placeholder="Title or author prefix", id="filter")
        yield StoryTable(id="stories", cursor_type="row", zebra_stripes=True)
        yield StatusBar()

    def on_mount(self) -> None:
        for theme in load_themes().values():
            self.register_theme(theme)

        keybindings_text = (self.config.get("ui") or {}).get(
            "statusbar_keybindings", UI_DEFAULTS["statusbar_keybindings"]
        )
        self.query_one(StatusBar).set_keybindings(
            keybindings_text.format(color="dark_orange")
        )
        self.dispatch_action(Startup())

    # --- State plumbing ---
    def dispatch_action(self, action: Action) -> None:
        """Single entry point for every state change."""
        self.search_state, effects = update(self.search_state, action, self.discard_stale)
        self._run_effects(effects)
        self.render_state()

    def _run_effects(self, effects: List[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, StoreSearchTerm):
                self.storage.set(STORED_SEARCH_KEY, effect.term)
            elif isinstance(effect, FetchStories):
                self.run_worker(
                    partial(self.client.fetch_stories, effect.query_path),
                    name=f"{STORIES_WORKER_PREFIX}{effect.request_id}",
                    group="stories",
                    thread=True,
                    exit_on_error=False,
                )

    def render_state(self) -> None:
        state = self.search_state
        self.theme = theme_name_for(state.theme_on)
        self.query_one(LightBulb).lit = state.theme_on

        search_input = self.query_one("#search", Input)
        if search_input.value != state.search_term:
            search_input.value = state.search_term
        filter_input = self.query_one("#filter", Input)
        if filter_input.value.lower() != state.filter_query:
            filter_input.value = state.filter_query
        self.query_one("#submit", Button).disabled = not state.search_term

        rows = visible_stories(state)
        if self._rendered_rows != (rows, state.sort_field):
            self.query_one(StoryTable).show_stories(rows, state.sort_field)
            self._rendered_rows = (rows, state.sort_field)

        if state.error and state.error != self._shown_error:
            self.notify(escape(state.error), title="Fetch failed", severity="error")
        self._shown_error = state.error

        self.query_one(StatusBar).show_progress(
            state.loading, state.error, len(rows), len(state.stories)
        )

    # --- Workers ---
    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        name = getattr(event.worker, "name", "") or ""
        if not name.startswith(STORIES_WORKER_PREFIX):
            return
        request_id = int(name[len(STORIES_WORKER_PREFIX):])

        if event.state is WorkerState.SUCCESS:
            stories = tuple(event.worker.result or ())
            self.dispatch_action(FetchSucceeded(request_id, stories))
        elif event.state is WorkerState.ERROR:
            error = event.worker.error
            logger.error("Stories worker %d failed: %s", request_id, error)
            self.dispatch_action(FetchFailed(request_id, str(error) or "Request failed"))

    # --- Widget events ---
    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            if event.value != self.search_state.search_term:
                self.dispatch_action(SearchEdited(event.value))
        elif event.input.id == "filter":
            if event.value.lower() != self.search_state.filter_query:
                self.dispatch_action(FilterEdited(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search":
            self.dispatch_action(SearchSubmitted())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "submit":
            self.dispatch_action(SearchSubmitted())

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        field = event.column_key.value
        if field in SORT_FIELDS:
            self.dispatch_action(ColumnSelected(field))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        story = self.query_one(StoryTable).story_for_key(event.row_key.value)
        if story:
            webbrowser.open(story.link)

    def on_reset_requested(self, message: messages.ResetRequested) -> None:
        self.action_reset()

    def on_theme_toggle_requested(self, message: messages.ThemeToggleRequested) -> None:
        self.action_toggle_theme()

    # --- Actions ---
    def action_reset(self) -> None:
        self.dispatch_action(ResetRequested())

    def action_toggle_theme(self) -> None:
        self.dispatch_action(ThemeToggled())

    def action_dismiss_error(self) -> None:
        if self.search_state.error:
            self.dispatch_action(ErrorDismissed())

    def action_focus_filter(self) -> None:
        self.query_one("#filter", Input).focus()

    def action_open_comments(self) -> None:
        story = self.query_one(StoryTable).highlighted_story()
        if story:
            webbrowser.open(story.comments_url)
