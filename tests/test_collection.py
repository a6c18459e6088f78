"""Paginated collection view behaviour."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from app.filters import FilterConfiguration
from app.models import ApiResult, TitleListOptions
from app.services.collection import CollectionView, ViewState, parse_titles


def page(ids: list[str], token: str | None = None) -> ApiResult:
    payload: dict[str, Any] = {"titles": [{"id": title_id} for title_id in ids]}
    if token is not None:
        payload["nextPageToken"] = token
    return ApiResult.ok(payload)


class ScriptedClient:
    """Returns queued results; a queued ``asyncio.Event`` holds the next one back."""

    def __init__(self, *responses: ApiResult | tuple[asyncio.Event, ApiResult]) -> None:
        self.responses = list(responses)
        self.calls: list[TitleListOptions] = []

    async def list_titles(self, options: TitleListOptions | None = None) -> ApiResult:
        assert options is not None
        self.calls.append(options)
        response = self.responses.pop(0)
        if isinstance(response, tuple):
            gate, result = response
            await gate.wait()
            return result
        return response


def ids(view: CollectionView) -> list[str]:
    return [title.id for title in view.items]


@pytest.mark.anyio("asyncio")
async def test_load_then_load_more_accumulates_pages() -> None:
    client = ScriptedClient(page(["A", "B"], "X"), page(["C"]))
    view = CollectionView(client)
    assert view.state is ViewState.IDLE

    await view.load()
    assert ids(view) == ["A", "B"]
    assert view.has_more is True
    assert view.state is ViewState.LOADED

    assert await view.load_more() is True
    assert client.calls[1].page_token == "X"
    assert ids(view) == ["A", "B", "C"]
    assert view.has_more is False
    assert view.page_token is None


@pytest.mark.anyio("asyncio")
async def test_load_more_without_more_pages_is_a_no_op() -> None:
    client = ScriptedClient(page(["A"]))
    view = CollectionView(client)
    await view.load()
    before = view.snapshot()

    assert await view.load_more() is False
    assert len(client.calls) == 1
    assert view.snapshot() == before


@pytest.mark.anyio("asyncio")
async def test_load_more_while_fetching_is_a_no_op() -> None:
    gate = asyncio.Event()
    client = ScriptedClient((gate, page(["A"], "X")))
    view = CollectionView(client)

    task = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    assert view.state is ViewState.LOADING

    assert await view.load_more() is False
    assert len(client.calls) == 1

    gate.set()
    await task
    assert ids(view) == ["A"]


@pytest.mark.anyio("asyncio")
async def test_filter_change_replaces_items_and_resets_cursor() -> None:
    client = ScriptedClient(page(["A", "B"], "X"), page(["D"], "Y"))
    view = CollectionView(client)
    await view.load()

    await view.toggle_filter("genres", "Horror")

    assert ids(view) == ["D"]
    assert view.page_token == "Y"
    assert client.calls[1].genres == ["Horror"]
    assert client.calls[1].page_token is None
    assert view.filters.active_count() == 1


@pytest.mark.anyio("asyncio")
async def test_stale_response_for_previous_filter_is_discarded() -> None:
    gate = asyncio.Event()
    client = ScriptedClient((gate, page(["OLD-1", "OLD-2"], "stale")), page(["NEW"]))
    view = CollectionView(client)

    first = asyncio.create_task(view.set_filters(FilterConfiguration().update("min_rating", 8)))
    await asyncio.sleep(0)
    await view.set_filters(FilterConfiguration().toggle_membership("genres", "Drama"))
    assert ids(view) == ["NEW"]

    gate.set()
    await first

    assert ids(view) == ["NEW"]
    assert view.page_token is None
    assert view.has_more is False
    assert view.state is ViewState.LOADED
    assert view.filters.genres == ("Drama",)


@pytest.mark.anyio("asyncio")
async def test_stale_load_more_is_discarded_after_filter_change() -> None:
    gate = asyncio.Event()
    client = ScriptedClient(page(["A"], "X"), (gate, page(["B"], "Z")), page(["N"]))
    view = CollectionView(client)
    await view.load()

    more = asyncio.create_task(view.load_more())
    await asyncio.sleep(0)
    await view.reset_filters()
    gate.set()
    await more

    assert ids(view) == ["N"]
    assert view.has_more is False


@pytest.mark.anyio("asyncio")
async def test_failed_load_more_keeps_loaded_items() -> None:
    client = ScriptedClient(
        page(["A", "B"], "X"),
        ApiResult.fail("API Error: 500 Internal Server Error"),
        page(["C"]),
    )
    view = CollectionView(client)
    await view.load()

    await view.load_more()
    assert view.state is ViewState.ERROR
    assert view.error == "API Error: 500 Internal Server Error"
    assert ids(view) == ["A", "B"]
    assert view.has_more is True

    # Retrying picks up from the same cursor.
    await view.load_more()
    assert client.calls[2].page_token == "X"
    assert ids(view) == ["A", "B", "C"]
    assert view.error is None


@pytest.mark.anyio("asyncio")
async def test_failed_first_page_reports_error() -> None:
    client = ScriptedClient(ApiResult.fail("Network error"))
    view = CollectionView(client)

    await view.load()

    assert view.state is ViewState.ERROR
    assert view.items == []
    assert view.snapshot()["error"] == "Network error"


@pytest.mark.anyio("asyncio")
async def test_duplicate_ids_across_pages_are_dropped() -> None:
    """Pages can overlap; the first occurrence of an id wins."""

    client = ScriptedClient(page(["A", "B", "A"], "X"), page(["B", "C"]))
    view = CollectionView(client)

    await view.load()
    await view.load_more()

    assert ids(view) == ["A", "B", "C"]


@pytest.mark.anyio("asyncio")
async def test_pinned_types_override_filter_types() -> None:
    client = ScriptedClient(page([]), page([]))
    view = CollectionView(client, pinned_types=("MOVIE",))

    await view.load()
    await view.toggle_filter("types", "SHORT")

    assert client.calls[0].types == ["MOVIE"]
    assert client.calls[1].types == ["MOVIE"]


@pytest.mark.anyio("asyncio")
async def test_load_more_from_idle_loads_first_page() -> None:
    client = ScriptedClient(page(["A"], "X"))
    view = CollectionView(client)

    assert await view.load_more() is True
    assert client.calls[0].page_token is None
    assert ids(view) == ["A"]


@pytest.mark.anyio("asyncio")
async def test_malformed_entries_are_skipped() -> None:
    client = ScriptedClient(
        ApiResult.ok({"titles": [{"id": "A"}, "junk", {"primaryTitle": "no id"}]})
    )
    view = CollectionView(client)

    await view.load()

    assert ids(view) == ["A"]
    assert view.has_more is False


def test_parse_titles_keeps_entries_with_odd_optional_fields(
    caplog: pytest.LogCaptureFixture,
) -> None:
    payload = {
        "titles": [
            {"id": "A", "primaryImage": {"width": 300}},
            {"id": "B", "runtimeSeconds": 5400.5},
            {"id": "C", "rating": {"voteCount": "many"}},
            {"id": "D"},
            {"id": 42},
        ]
    }

    with caplog.at_level(logging.WARNING):
        titles = parse_titles(payload)

    assert [title.id for title in titles] == ["A", "B", "C", "D"]
    assert "missing or non-string id: 42" in caplog.text
    assert "'A'" not in caplog.text
