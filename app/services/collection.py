"""Paginated, filterable title listing backing the browse pages."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Protocol

from pydantic import ValidationError

from ..filters import FilterConfiguration, MembershipField
from ..models import ApiResult, Title, TitleListOptions

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
FETCH_FAILED_MESSAGE = "Failed to fetch titles"


class TitleLister(Protocol):
    async def list_titles(self, options: TitleListOptions | None = None) -> ApiResult:
        ...


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOADING_MORE = "loading_more"
    ERROR = "error"


def parse_titles(payload: Any, key: str = "titles") -> list[Title]:
    """Extract title records from a response payload, skipping malformed ones."""

    if not isinstance(payload, dict):
        return []
    raw_titles = payload.get(key) or []
    if not isinstance(raw_titles, list):
        return []

    titles: list[Title] = []
    for entry in raw_titles:
        if not isinstance(entry, dict):
            continue
        try:
            titles.append(Title.model_validate(entry))
        except ValidationError:
            logger.warning(
                "Skipping title entry with a missing or non-string id: %r",
                entry.get("id"),
            )
    return titles


def next_page_token(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    token = payload.get("nextPageToken")
    if isinstance(token, str) and token:
        return token
    return None


class CollectionView:
    """Drives one filtered listing through the metadata client.

    Pages accumulate into :attr:`items` until the filter changes. Every first
    page load starts a new generation; a response that arrives for an older
    generation is dropped so it cannot overwrite newer state. Titles whose id
    is already listed are skipped when a page is appended.
    """

    def __init__(
        self,
        client: TitleLister,
        *,
        filters: FilterConfiguration | None = None,
        pinned_types: Iterable[str] | None = None,
        label: str = "titles",
    ) -> None:
        self._client = client
        self._pinned_types = tuple(pinned_types) if pinned_types is not None else None
        self.label = label
        self.filters = filters or FilterConfiguration.default()
        self.items: list[Title] = []
        self.page_token: str | None = None
        self.has_more = True
        self.state = ViewState.IDLE
        self.error: str | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pinned_types(self) -> tuple[str, ...] | None:
        return self._pinned_types

    @property
    def is_fetching(self) -> bool:
        return self.state in (ViewState.LOADING, ViewState.LOADING_MORE)

    def request_options(self, page_token: str | None = None) -> TitleListOptions:
        return self.filters.to_list_options(
            pinned_types=self._pinned_types, page_token=page_token
        )

    async def load(self) -> None:
        """Fetch the first page for the current filters, replacing any items."""

        self._generation += 1
        generation = self._generation
        self.items = []
        self.page_token = None
        self.has_more = True
        self.error = None
        self.state = ViewState.LOADING
        await self._fetch(generation, self.request_options(), append=False)

    async def set_filters(self, filters: FilterConfiguration) -> None:
        self.filters = filters
        await self.load()

    async def update_filter(self, field: str, value: Any) -> None:
        await self.set_filters(self.filters.update(field, value))

    async def toggle_filter(self, field: MembershipField, value: str) -> None:
        await self.set_filters(self.filters.toggle_membership(field, value))

    async def reset_filters(self) -> None:
        await self.set_filters(self.filters.reset())

    async def load_more(self) -> bool:
        """Append the next page; returns ``False`` when nothing was requested."""

        if self.state is ViewState.IDLE:
            await self.load()
            return True
        if not self.has_more or self.is_fetching:
            return False

        generation = self._generation
        self.error = None
        self.state = ViewState.LOADING_MORE
        await self._fetch(
            generation, self.request_options(self.page_token), append=True
        )
        return True

    async def _fetch(
        self, generation: int, options: TitleListOptions, *, append: bool
    ) -> None:
        try:
            result = await self._client.list_titles(options)
        except Exception:  # pragma: no cover - the client reports its own failures
            logger.exception("Unexpected failure while listing %s", self.label)
            result = ApiResult.fail(UNEXPECTED_ERROR_MESSAGE)

        if generation != self._generation:
            logger.debug(
                "Discarding stale %s response (generation %s, current %s)",
                self.label,
                generation,
                self._generation,
            )
            return

        if not result.success:
            self.error = result.error or FETCH_FAILED_MESSAGE
            self.state = ViewState.ERROR
            return

        titles = parse_titles(result.data)
        if append:
            self._append(titles)
        else:
            self.items = []
            self._append(titles)
        self.page_token = next_page_token(result.data)
        self.has_more = self.page_token is not None
        self.state = ViewState.LOADED

    def _append(self, titles: Iterable[Title]) -> None:
        seen = {title.id for title in self.items}
        for title in titles:
            if title.id in seen:
                logger.debug("Skipping duplicate %s in %s", title.id, self.label)
                continue
            seen.add(title.id)
            self.items.append(title)

    def snapshot(self) -> dict[str, Any]:
        """Return the view state in a JSON-ready shape."""

        return {
            "label": self.label,
            "state": self.state.value,
            "items": [title.to_record() for title in self.items],
            "hasMore": self.has_more,
            "error": self.error,
            "filters": self.filters.to_payload(),
        }
