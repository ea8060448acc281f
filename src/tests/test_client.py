from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from hn_search.client import (
    LATEST_STORIES_PATH,
    FetchFailure,
    HNSearchClient,
    search_path,
)


@pytest.fixture
def client():
    return HNSearchClient({"endpoint": "https://hn.example/api/v1"})


def _response(payload, status_error=None):
    resp = MagicMock()
    resp.json.return_value = payload
    if status_error:
        resp.raise_for_status.side_effect = status_error
    return resp


def test_search_path_encodes_term():
    assert search_path("rust") == "search?query=rust"
    assert search_path("c++ async") == "search?query=c%2B%2B%20async"


def test_fetch_stories_maps_hits(client):
    with patch.object(client.session, "get") as mock_get:
        mock_get.return_value = _response(
            {
                "hits": [
                    {
                        "title": "Show HN: Foo",
                        "author": "alice",
                        "url": "https://foo.dev",
                        "points": 42,
                        "created_at": "2021-01-01T00:00:00Z",
                        "objectID": "1",
                    },
                    {
                        "title": "Ask HN: Bar?",
                        "author": "bob",
                        "url": None,
                        "points": None,
                        "created_at": "2020-01-01T00:00:00Z",
                        "objectID": "2",
                    },
                ]
            }
        )
        stories = client.fetch_stories(LATEST_STORIES_PATH)

        mock_get.assert_called_once_with(
            "https://hn.example/api/v1/search_by_date?tags=story", timeout=15
        )
        assert len(stories) == 2
        assert stories[0].title == "Show HN: Foo"
        assert stories[0].link == "https://foo.dev"
        assert stories[1].points == 0
        assert stories[1].link == "https://news.ycombinator.com/item?id=2"
        assert stories[1].date == "2020-01-01"


def test_fetch_stories_keeps_hit_order(client):
    hits = [{"title": t, "objectID": t} for t in ("b", "a", "c")]
    with patch.object(client.session, "get", return_value=_response({"hits": hits})):
        stories = client.fetch_stories(search_path("x"))
    assert [s.title for s in stories] == ["b", "a", "c"]


def test_http_error_raises_fetch_failure(client):
    error = requests.HTTPError("503 Server Error")
    with patch.object(client.session, "get", return_value=_response({}, error)) as mock_get:
        with pytest.raises(FetchFailure):
            client.fetch_stories(search_path("rust"))
        # no retry
        assert mock_get.call_count == 1


def test_network_error_raises_fetch_failure(client):
    with patch.object(
        client.session, "get", side_effect=requests.ConnectionError("unreachable")
    ):
        with pytest.raises(FetchFailure, match="unreachable"):
            client.fetch_stories(LATEST_STORIES_PATH)


def test_bad_payload_raises_fetch_failure(client):
    resp = _response(None)
    resp.json.side_effect = ValueError("not json")
    with patch.object(client.session, "get", return_value=resp):
        with pytest.raises(FetchFailure):
            client.fetch_stories(LATEST_STORIES_PATH)

    with patch.object(client.session, "get", return_value=_response({"nbHits": 0})):
        with pytest.raises(FetchFailure):
            client.fetch_stories(LATEST_STORIES_PATH)
