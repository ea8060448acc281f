from __future__ import annotations

from typing import Iterable, Optional, Tuple

from rich.style import Style
from rich.text import Text
from textual import events
from textual.reactive import reactive
from textual.widgets import DataTable, Static

from .datamodels import StoryRecord
from .messages import ResetRequested, ThemeToggleRequested

# column key -> header label
COLUMNS = (
    ("title", "title"),
    ("link", "url"),
    ("author", "author"),
    ("points", "points"),
    ("created_at", "date"),
)


class AppHeading(Static):
    def on_click(self, event: events.Click) -> None:
        self.post_message(ResetRequested())


class LightBulb(Static):
    lit = reactive(True)

    def render(self) -> Text:
        if self.lit:
            return Text("( ● )", style="bold yellow")
        return Text("( ○ )", style="dim")

    def on_click(self, event: events.Click) -> None:
        self.post_message(ThemeToggleRequested())


class StoryTable(DataTable):
    """Results table; the active sort column is underlined."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.shown: Tuple[StoryRecord, ...] = ()

    def show_stories(self, stories: Iterable[StoryRecord], sort_field: str) -> None:
        # Rows are keyed by position; object ids can repeat or be missing
        self.shown = tuple(stories)
        self.clear(columns=True)
        for key, label in COLUMNS:
            style = "underline" if key == sort_field else ""
            self.add_column(Text(label, style=style), key=key)
        for index, story in enumerate(self.shown):
            link = "link" if story.url else "link (hn)"
            self.add_row(
                Text(story.title),
                Text(link, style=Style(link=story.link)),
                Text(story.author),
                Text(str(story.points)),
                Text(story.date),
                key=str(index),
            )

    def story_for_key(self, row_key: Optional[str]) -> Optional[StoryRecord]:
        try:
            return self.shown[int(row_key)]
        except (TypeError, ValueError, IndexError):
            return None

    def highlighted_story(self) -> Optional[StoryRecord]:
        if not self.row_count:
            return None
        row_key, _ = self.coordinate_to_cell_key(self.cursor_coordinate)
        return self.story_for_key(row_key.value)


class StatusBar(Static):
    """Bottom line: fetch progress or the last fetch error, then key hints."""

    loading = reactive(False)
    error = reactive(None)
    counts = reactive((0, 0))
    keybinding_hint = reactive("")

    def set_keybindings(self, hint: str) -> None:
        self.keybinding_hint = hint

    def show_progress(
        self, loading: bool, error: Optional[str], shown: int, total: int
    ) -> None:
        self.loading = loading
        self.error = error
        self.counts = (shown, total)

    def render(self) -> Text:
        if self.loading:
            status = Text("Loading stories...", style="italic")
        elif self.error:
            status = Text.assemble(
                (self.error, "bold red"), " (esc to dismiss)"
            )
        else:
            shown, total = self.counts
            status = Text(f"{shown} of {total} stories")
        if self.keybinding_hint:
            status.append(" | ")
            status.append_text(Text.from_markup(self.keybinding_hint))
        return status
