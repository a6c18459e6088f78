"""Favorites and watchlist store behaviour."""

from __future__ import annotations

import json

import pytest

from app.membership import ListName, MembershipStore
from app.models import Title
from app.storage import InMemoryStorage, StorageError


def make_title(title_id: str, **fields: object) -> Title:
    return Title.model_validate({"id": title_id, "primaryTitle": f"Title {title_id}", **fields})


class FailingWriteStorage(InMemoryStorage):
    def write(self, key: str, value: str) -> None:
        raise StorageError(f"Failed to write {key}")


class FailingReadStorage(InMemoryStorage):
    def read(self, key: str) -> str | None:
        raise StorageError(f"Failed to read {key}")


def test_toggle_twice_restores_prior_membership() -> None:
    store = MembershipStore(InMemoryStorage())
    title = make_title("tt1")

    assert store.toggle(ListName.FAVORITES, title) is True
    assert store.contains(ListName.FAVORITES, "tt1") is True
    assert store.toggle(ListName.FAVORITES, title) is False
    assert store.contains(ListName.FAVORITES, "tt1") is False
    assert store.entries(ListName.FAVORITES) == ()


def test_contains_reflects_last_toggle_per_list() -> None:
    store = MembershipStore(InMemoryStorage())
    first, second = make_title("tt1"), make_title("tt2")

    for _ in range(3):
        store.toggle(ListName.WATCHLIST, first)
    store.toggle(ListName.WATCHLIST, second)
    store.toggle(ListName.FAVORITES, second)
    store.toggle(ListName.FAVORITES, second)

    assert store.is_in_watchlist("tt1") is True
    assert store.is_in_watchlist("tt2") is True
    assert store.is_favorite("tt2") is False
    assert store.counts() == {"favorites": 0, "watchlist": 2}


def test_entries_keep_insertion_order() -> None:
    store = MembershipStore(InMemoryStorage())
    for title_id in ("tt3", "tt1", "tt2"):
        store.toggle_favorite(make_title(title_id))
    store.toggle_favorite(make_title("tt1"))
    store.toggle_favorite(make_title("tt1"))

    assert [title.id for title in store.entries(ListName.FAVORITES)] == ["tt3", "tt2", "tt1"]


def test_toggle_matches_on_id_only() -> None:
    store = MembershipStore(InMemoryStorage())
    store.toggle_watchlist(make_title("tt1", startYear=1999))

    assert store.toggle_watchlist(make_title("tt1", startYear=2001)) is False
    assert store.entries(ListName.WATCHLIST) == ()


def test_every_toggle_writes_the_full_list() -> None:
    storage = InMemoryStorage()
    store = MembershipStore(storage, namespace="shelf")

    store.toggle_favorite(make_title("tt1", rating={"aggregateRating": 8.1}))
    store.toggle_favorite(make_title("tt2"))

    assert [key for key, _ in storage.writes] == ["shelf-favorites", "shelf-favorites"]
    stored = json.loads(storage.values["shelf-favorites"])
    assert [record["id"] for record in stored] == ["tt1", "tt2"]
    assert stored[0]["rating"] == {"aggregateRating": 8.1}
    assert "shelf-watchlist" not in storage.values


def test_store_reloads_persisted_lists() -> None:
    storage = InMemoryStorage()
    store = MembershipStore(storage)
    store.toggle_watchlist(make_title("tt9", plot="A plot", awards={"wins": 3}))

    reloaded = MembershipStore(storage)

    (title,) = reloaded.entries(ListName.WATCHLIST)
    assert title.id == "tt9"
    assert title.plot == "A plot"
    assert title.to_record()["awards"] == {"wins": 3}
    assert reloaded.entries(ListName.FAVORITES) == ()


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"id": "tt1"}),
        json.dumps([{"primaryTitle": "missing id"}]),
        json.dumps(["tt1", "tt2"]),
    ],
)
def test_corrupt_storage_starts_empty(raw: str) -> None:
    storage = InMemoryStorage({"cineshelf-favorites": raw})

    store = MembershipStore(storage)

    assert store.entries(ListName.FAVORITES) == ()
    assert store.toggle_favorite(make_title("tt1")) is True


def test_unreadable_storage_starts_empty() -> None:
    store = MembershipStore(FailingReadStorage())

    assert store.counts() == {"favorites": 0, "watchlist": 0}


def test_failed_write_leaves_state_untouched() -> None:
    storage = InMemoryStorage()
    store = MembershipStore(storage)
    store.toggle_favorite(make_title("tt1"))

    store._storage = FailingWriteStorage()  # simulate the medium going away
    with pytest.raises(StorageError):
        store.toggle_favorite(make_title("tt2"))
    with pytest.raises(StorageError):
        store.toggle_favorite(make_title("tt1"))

    assert [title.id for title in store.entries(ListName.FAVORITES)] == ["tt1"]


def test_list_name_accepts_plain_strings() -> None:
    store = MembershipStore(InMemoryStorage())
    store.toggle("watchlist", make_title("tt5"))  # type: ignore[arg-type]

    assert store.contains(ListName.WATCHLIST, "tt5") is True
    assert store.key_for(ListName.WATCHLIST) == "cineshelf-watchlist"


def test_reload_keeps_titles_with_odd_optional_fields() -> None:
    raw = json.dumps(
        [
            {"id": "tt1", "primaryImage": {"width": 300}},
            {"id": "tt2", "runtimeSeconds": 5400.5},
            {"id": "tt3", "primaryTitle": "Heat"},
        ]
    )
    store = MembershipStore(InMemoryStorage({"cineshelf-watchlist": raw}))

    titles = store.entries(ListName.WATCHLIST)

    assert [title.id for title in titles] == ["tt1", "tt2", "tt3"]
    assert titles[1].runtime_seconds is None


def test_listed_titles_are_isolated_from_later_mutation() -> None:
    storage = InMemoryStorage()
    store = MembershipStore(storage)
    title = make_title("tt1", genres=["Drama"])
    store.toggle_favorite(title)

    title.genres.append("Thriller")
    store.entries(ListName.FAVORITES)[0].genres.append("Crime")

    (listed,) = store.entries(ListName.FAVORITES)
    assert listed.genres == ["Drama"]
    persisted = json.loads(storage.values["cineshelf-favorites"])
    assert persisted[0]["genres"] == listed.genres
