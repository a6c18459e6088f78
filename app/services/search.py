"""Free-text title search state."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..models import ApiResult, Title
from .collection import UNEXPECTED_ERROR_MESSAGE, ViewState, parse_titles

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 50
SEARCH_FAILED_MESSAGE = "Failed to search titles"


class TitleSearcher(Protocol):
    async def search_titles(self, query: str, limit: int = ...) -> ApiResult:
        ...


class SearchView:
    """Holds the results of the most recent search.

    Only the latest query may update the results; a slower response for an
    earlier query is ignored when it finally arrives.
    """

    def __init__(self, client: TitleSearcher, *, limit: int = SEARCH_RESULT_LIMIT):
        self._client = client
        self._limit = limit
        self.query = ""
        self.items: list[Title] = []
        self.state = ViewState.IDLE
        self.error: str | None = None
        self._generation = 0

    async def search(self, query: str) -> None:
        self._generation += 1
        generation = self._generation
        self.query = query
        self.error = None

        if not query.strip():
            self.items = []
            self.state = ViewState.IDLE
            return

        self.state = ViewState.LOADING
        try:
            result = await self._client.search_titles(query, self._limit)
        except Exception:  # pragma: no cover - the client reports its own failures
            logger.exception("Unexpected failure while searching for %r", query)
            result = ApiResult.fail(UNEXPECTED_ERROR_MESSAGE)

        if generation != self._generation:
            logger.debug("Discarding stale search results for %r", query)
            return

        if not result.success:
            self.error = result.error or SEARCH_FAILED_MESSAGE
            self.state = ViewState.ERROR
            return

        self.items = parse_titles(result.data)
        self.state = ViewState.LOADED

    def snapshot(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "state": self.state.value,
            "items": [title.to_record() for title in self.items],
            "count": len(self.items),
            "error": self.error,
        }
