"""Assemble the data shown on a title's detail page."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..models import ApiResult, CategoryPageOptions, MediaPageOptions, Title, TitleDetail
from .imdb_api import ImdbApiClient

logger = logging.getLogger(__name__)

DETAIL_IMAGE_PAGE_SIZE = 20
DETAIL_CREDIT_PAGE_SIZE = 10
DETAIL_FAILED_MESSAGE = "Failed to fetch title details"


def _records(result: ApiResult, key: str) -> list[dict[str, Any]]:
    if not result.success or not isinstance(result.data, dict):
        return []
    entries = result.data.get(key) or []
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, dict)]


async def load_title_detail(client: ImdbApiClient, title_id: str) -> ApiResult:
    """Fetch a title plus its images and top credits.

    The title itself must load; images and credits are optional extras and
    fall back to empty lists when their requests fail.
    """

    result = await client.get_title(title_id)
    if not result.success:
        return ApiResult.fail(result.error or DETAIL_FAILED_MESSAGE)
    try:
        title = Title.model_validate(result.data)
    except ValidationError:
        logger.warning("Title payload for %s is missing its id", title_id)
        return ApiResult.fail(DETAIL_FAILED_MESSAGE)

    images = await client.get_title_images(
        title_id, MediaPageOptions(page_size=DETAIL_IMAGE_PAGE_SIZE)
    )
    if not images.success:
        logger.info("Images unavailable for %s: %s", title_id, images.error)
    credits = await client.get_title_credits(
        title_id, CategoryPageOptions(page_size=DETAIL_CREDIT_PAGE_SIZE)
    )
    if not credits.success:
        logger.info("Credits unavailable for %s: %s", title_id, credits.error)

    detail = TitleDetail(
        title=title,
        images=_records(images, "images"),
        credits=_records(credits, "credits"),
    )
    return ApiResult.ok(detail)
