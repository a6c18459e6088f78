"""Favorites and watchlist membership, mirrored to local storage."""

from __future__ import annotations

import json
import logging
from enum import Enum

from pydantic import ValidationError

from .config import DEFAULT_STORAGE_NAMESPACE
from .models import Title
from .storage import StorageError, StoragePort

logger = logging.getLogger(__name__)


class ListName(str, Enum):
    FAVORITES = "favorites"
    WATCHLIST = "watchlist"


def storage_key(namespace: str, name: ListName) -> str:
    return f"{namespace}-{name.value}"


class MembershipStore:
    """Owns the two personal lists and persists them on every change.

    Each list maps a title id to its own copy of the title record so list
    pages can be rendered without another request. Lists keep insertion
    order.
    """

    def __init__(
        self,
        storage: StoragePort,
        *,
        namespace: str = DEFAULT_STORAGE_NAMESPACE,
    ) -> None:
        self._storage = storage
        self._namespace = namespace
        self._lists: dict[ListName, dict[str, Title]] = {
            name: self._load(name) for name in ListName
        }

    def key_for(self, name: ListName) -> str:
        return storage_key(self._namespace, ListName(name))

    def _load(self, name: ListName) -> dict[str, Title]:
        key = self.key_for(name)
        try:
            raw = self._storage.read(key)
        except StorageError:
            logger.warning("Could not read %s, starting with an empty list", key)
            return {}
        if raw is None:
            return {}

        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("Stored %s is not valid JSON, starting empty", key)
            return {}
        if not isinstance(payload, list):
            logger.warning("Stored %s is not a list, starting empty", key)
            return {}

        entries: dict[str, Title] = {}
        try:
            for record in payload:
                title = Title.model_validate(record)
                entries.setdefault(title.id, title)
        except ValidationError:
            logger.warning("Stored %s contains malformed titles, starting empty", key)
            return {}
        return entries

    def _persist(self, name: ListName, entries: dict[str, Title]) -> None:
        serialized = json.dumps([title.to_record() for title in entries.values()])
        self._storage.write(self.key_for(name), serialized)

    def toggle(self, name: ListName, title: Title) -> bool:
        """Flip membership of ``title`` in ``name`` and return the new state.

        The updated list is written before it replaces the in-memory copy, so
        a failed write leaves the store exactly as it was.
        """

        name = ListName(name)
        current = self._lists[name]
        updated = dict(current)
        if title.id in updated:
            del updated[title.id]
            member = False
        else:
            updated[title.id] = title.model_copy(deep=True)
            member = True

        self._persist(name, updated)
        self._lists[name] = updated
        logger.debug(
            "%s %s %s", "Added" if member else "Removed", title.id, name.value
        )
        return member

    def contains(self, name: ListName, title_id: str) -> bool:
        return title_id in self._lists[ListName(name)]

    def entries(self, name: ListName) -> tuple[Title, ...]:
        """Return copies of the listed titles in insertion order."""

        return tuple(
            title.model_copy(deep=True)
            for title in self._lists[ListName(name)].values()
        )

    def counts(self) -> dict[str, int]:
        return {name.value: len(entries) for name, entries in self._lists.items()}

    def toggle_favorite(self, title: Title) -> bool:
        return self.toggle(ListName.FAVORITES, title)

    def is_favorite(self, title_id: str) -> bool:
        return self.contains(ListName.FAVORITES, title_id)

    def toggle_watchlist(self, title: Title) -> bool:
        return self.toggle(ListName.WATCHLIST, title)

    def is_in_watchlist(self, title_id: str) -> bool:
        return self.contains(ListName.WATCHLIST, title_id)
