from __future__ import annotations

import asyncio

from rich.text import Text
from textual.coordinate import Coordinate
from textual.widgets import Button, DataTable
from textual.widgets.data_table import ColumnKey

from hn_search.app import HNSearchApp
from hn_search.client import LATEST_STORIES_PATH, FetchFailure, search_path
from hn_search.config import STORED_SEARCH_KEY
from hn_search.datamodels import StoryRecord
from hn_search.state import ColumnSelected, ResetRequested, initial_state
from hn_search.storage import KeyValueStore
from hn_search.widgets import StatusBar, StoryTable

FOO = StoryRecord("Foo", "alice", None, 5, "2021-01-01T00:00:00Z", "1")
BAR = StoryRecord("Bar", "bob", "https://bar.dev", 9, "2020-01-01T00:00:00Z", "2")


class FakeClient:
    def __init__(self, stories=(FOO, BAR), fail=False):
        self.stories = list(stories)
        self.fail = fail
        self.paths = []

    def fetch_stories(self, query_path):
        self.paths.append(query_path)
        if self.fail:
            raise FetchFailure("boom")
        return self.stories


async def _settle(app, pilot):
    await app.workers.wait_for_complete()
    await pilot.pause()


def _run(app, scenario):
    async def runner():
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await scenario(app, pilot)

    asyncio.run(runner())


def test_startup_reset_and_sort(tmp_path):
    storage = KeyValueStore(str(tmp_path / "storage.json"))
    storage.set(STORED_SEARCH_KEY, "rust")
    client = FakeClient()
    app = HNSearchApp(
        state=initial_state(storage.get(STORED_SEARCH_KEY), theme_on=True),
        storage=storage,
        client=client,
    )

    async def scenario(app, pilot):
        assert client.paths == [search_path("rust")]
        assert app.search_state.stories == (BAR, FOO)
        assert app.query_one(StoryTable).row_count == 2

        app.dispatch_action(ResetRequested())
        await _settle(app, pilot)
        assert client.paths[-1] == LATEST_STORIES_PATH
        assert storage.get(STORED_SEARCH_KEY) == ""
        assert app.search_state.search_term == ""

        app.dispatch_action(ColumnSelected("title"))
        assert app.search_state.stories == (BAR, FOO)
        assert app.search_state.sort_field == "title"

    _run(app, scenario)


def test_fetch_failure_keeps_table_and_sets_error(tmp_path):
    storage = KeyValueStore(str(tmp_path / "storage.json"))
    client = FakeClient(fail=True)
    app = HNSearchApp(state=initial_state(None), storage=storage, client=client)

    async def scenario(app, pilot):
        assert client.paths == [LATEST_STORIES_PATH]
        assert app.search_state.error == "boom"
        assert app.search_state.stories == ()
        assert not app.search_state.loading
        status = app.query_one(StatusBar).render().plain
        assert status.startswith("boom (esc to dismiss)")

    _run(app, scenario)


def test_bracketed_titles_and_missing_ids_render_verbatim(tmp_path):
    hits = [
        {"title": "Attention Is All You Need (2017) [pdf]", "author": "[x]", "points": 10},
        {"title": "What does [/b] mean", "author": "carol", "points": 3},
    ]
    client = FakeClient(stories=[StoryRecord.from_hit(hit) for hit in hits])
    app = HNSearchApp(
        state=initial_state(None),
        storage=KeyValueStore(str(tmp_path / "storage.json")),
        client=client,
    )

    async def scenario(app, pilot):
        table = app.query_one(StoryTable)
        assert table.row_count == 2
        assert table.get_cell_at(Coordinate(0, 0)).plain == (
            "Attention Is All You Need (2017) [pdf]"
        )
        assert table.get_cell_at(Coordinate(0, 2)).plain == "[x]"
        assert table.get_cell_at(Coordinate(1, 0)).plain == "What does [/b] mean"

        table.move_cursor(row=1)
        assert table.highlighted_story().title == "What does [/b] mean"

    _run(app, scenario)


def test_typing_clicking_and_header_selection(tmp_path):
    storage = KeyValueStore(str(tmp_path / "storage.json"))
    client = FakeClient()
    app = HNSearchApp(
        state=initial_state(None),
        storage=storage,
        client=client,
        config={"ui": None},
    )

    async def scenario(app, pilot):
        submit = app.query_one("#submit", Button)
        assert submit.disabled

        app.query_one("#search").focus()
        await pilot.press("p", "y")
        await pilot.pause()
        assert app.search_state.search_term == "py"
        assert not submit.disabled

        await pilot.click("#submit")
        await _settle(app, pilot)
        assert client.paths[-1] == search_path("py")
        assert storage.get(STORED_SEARCH_KEY) == "py"

        app.query_one("#filter").focus()
        await pilot.press("F")
        await pilot.pause()
        assert app.search_state.filter_query == "f"
        assert app.query_one(StoryTable).row_count == 1
        assert app.search_state.stories == (BAR, FOO)

        table = app.query_one(StoryTable)
        table.post_message(
            DataTable.HeaderSelected(table, ColumnKey("title"), 0, Text("title"))
        )
        await pilot.pause()
        assert app.search_state.sort_field == "title"

    _run(app, scenario)
