"""Client for the read-only IMDb metadata API."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping
from urllib.parse import quote

import httpx

from ..config import Settings
from ..models import (
    ApiResult,
    CategoryPageOptions,
    EpisodeListOptions,
    MediaPageOptions,
    PageOptions,
    TitleListOptions,
)
from ..utils import build_query_params, clamp

logger = logging.getLogger(__name__)

MAX_BATCH_IDS = 5
MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 50
DEFAULT_SEARCH_LIMIT = 20

NETWORK_ERROR_MESSAGE = "Network error: the metadata service could not be reached"
INVALID_RESPONSE_MESSAGE = "Invalid response received from the metadata service"
INVALID_BATCH_MESSAGE = "Title ids must be given as a sequence, not a single string"


class ImdbApiClient:
    """Thin pass-through wrapper around the metadata HTTP API.

    Every coroutine returns an :class:`ApiResult`; transport, status and
    decoding failures are reported in its error branch and never raised.
    There is no retry and no caching.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"{self._settings.app_name} (cineshelf)",
        }

    async def _fetch(
        self, endpoint: str, params: Mapping[str, Any] | None = None
    ) -> ApiResult:
        query = build_query_params(params or {})
        try:
            response = await self._client.get(
                endpoint, params=query, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "Metadata request to %s failed: %s (%s)",
                endpoint,
                exc,
                exc.__class__.__name__,
            )
            return ApiResult.fail(NETWORK_ERROR_MESSAGE)

        if not response.is_success:
            message = f"API Error: {response.status_code} {response.reason_phrase}".strip()
            logger.warning("Metadata request to %s returned %s", endpoint, message)
            return ApiResult.fail(message)

        try:
            data = response.json()
        except ValueError:
            logger.warning("Unexpected non-JSON metadata response from %s", endpoint)
            return ApiResult.fail(INVALID_RESPONSE_MESSAGE)
        return ApiResult.ok(data)

    @staticmethod
    def _title_path(title_id: str, resource: str | None = None) -> str:
        path = f"/titles/{quote(title_id, safe='')}"
        if resource:
            path = f"{path}/{resource}"
        return path

    async def list_titles(self, options: TitleListOptions | None = None) -> ApiResult:
        """List titles using the supplied filter, sort and page cursor."""

        options = options or TitleListOptions()
        return await self._fetch("/titles", options.to_params())

    async def get_title(self, title_id: str) -> ApiResult:
        return await self._fetch(self._title_path(title_id))

    async def batch_get_titles(self, title_ids: Iterable[str]) -> ApiResult:
        """Fetch up to five titles at once; extra ids are dropped."""

        if isinstance(title_ids, str):
            return ApiResult.fail(INVALID_BATCH_MESSAGE)
        ids = list(title_ids)
        if len(ids) > MAX_BATCH_IDS:
            logger.warning(
                "Maximum %s title IDs allowed for batch get, ignoring %s",
                MAX_BATCH_IDS,
                len(ids) - MAX_BATCH_IDS,
            )
        return await self._fetch(
            "/titles:batchGet", {"titleIds": ids[:MAX_BATCH_IDS]}
        )

    async def search_titles(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> ApiResult:
        """Search titles; ``limit`` is clamped to the range the API accepts."""

        try:
            limit = clamp(int(limit), MIN_SEARCH_LIMIT, MAX_SEARCH_LIMIT)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Rejecting search with invalid limit %r", limit)
            return ApiResult.fail(f"Invalid search limit: {limit!r}")
        return await self._fetch("/search/titles", {"query": query, "limit": limit})

    async def get_title_credits(
        self, title_id: str, options: CategoryPageOptions | None = None
    ) -> ApiResult:
        options = options or CategoryPageOptions()
        return await self._fetch(
            self._title_path(title_id, "credits"), options.to_params()
        )

    async def get_title_release_dates(
        self, title_id: str, options: PageOptions | None = None
    ) -> ApiResult:
        options = options or PageOptions()
        return await self._fetch(
            self._title_path(title_id, "releaseDates"), options.to_params()
        )

    async def get_title_akas(self, title_id: str) -> ApiResult:
        return await self._fetch(self._title_path(title_id, "akas"))

    async def get_title_seasons(self, title_id: str) -> ApiResult:
        return await self._fetch(self._title_path(title_id, "seasons"))

    async def get_title_episodes(
        self, title_id: str, options: EpisodeListOptions | None = None
    ) -> ApiResult:
        options = options or EpisodeListOptions()
        return await self._fetch(
            self._title_path(title_id, "episodes"), options.to_params()
        )

    async def get_title_images(
        self, title_id: str, options: MediaPageOptions | None = None
    ) -> ApiResult:
        options = options or MediaPageOptions()
        return await self._fetch(
            self._title_path(title_id, "images"), options.to_params()
        )

    async def get_title_videos(
        self, title_id: str, options: MediaPageOptions | None = None
    ) -> ApiResult:
        options = options or MediaPageOptions()
        return await self._fetch(
            self._title_path(title_id, "videos"), options.to_params()
        )

    async def get_title_award_nominations(
        self, title_id: str, options: PageOptions | None = None
    ) -> ApiResult:
        options = options or PageOptions()
        return await self._fetch(
            self._title_path(title_id, "awardNominations"), options.to_params()
        )

    async def get_title_parents_guide(self, title_id: str) -> ApiResult:
        return await self._fetch(self._title_path(title_id, "parentsGuide"))

    async def get_title_certificates(self, title_id: str) -> ApiResult:
        return await self._fetch(self._title_path(title_id, "certificates"))

    async def get_title_company_credits(
        self, title_id: str, options: CategoryPageOptions | None = None
    ) -> ApiResult:
        options = options or CategoryPageOptions()
        return await self._fetch(
            self._title_path(title_id, "companyCredits"), options.to_params()
        )

    async def get_title_box_office(self, title_id: str) -> ApiResult:
        return await self._fetch(self._title_path(title_id, "boxOffice"))
