"""Pydantic models describing remote payloads and request options."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .catalog_options import SortField, SortOrder

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class RemoteModel(BaseModel):
    """Base for records received from the metadata service.

    Fields use snake_case in Python and camelCase on the wire. Unknown fields
    are kept so a record survives a round trip through local storage.
    Optional fields whose value has an unexpected shape fall back to their
    default; only required fields can reject a record.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _tolerate_optional_fields(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            if field.is_required():
                raise
            logger.debug(
                "Ignoring malformed %s.%s: %r", cls.__name__, info.field_name, value
            )
            return field.get_default(call_default_factory=True)


class Rating(RemoteModel):
    aggregate_rating: float | None = None
    vote_count: int | None = None


class Image(RemoteModel):
    url: str | None = None
    width: int | None = None
    height: int | None = None


class Person(RemoteModel):
    id: str | None = None
    display_name: str | None = None
    primary_image: Image | None = None


class Country(RemoteModel):
    code: str | None = None
    name: str | None = None


class Language(RemoteModel):
    code: str | None = None
    name: str | None = None


class Title(RemoteModel):
    """A single catalog entry as returned by the metadata service."""

    id: str
    type: str | None = None
    primary_title: str | None = None
    original_title: str | None = None
    start_year: int | None = None
    end_year: int | None = None
    runtime_seconds: int | None = None
    genres: list[str] = Field(default_factory=list)
    rating: Rating | None = None
    primary_image: Image | None = None
    plot: str | None = None
    directors: list[Person] = Field(default_factory=list)
    writers: list[Person] = Field(default_factory=list)
    stars: list[Person] = Field(default_factory=list)
    origin_countries: list[Country] = Field(default_factory=list)
    spoken_languages: list[Language] = Field(default_factory=list)

    def display_title(self) -> str:
        """Return a human-friendly title for cards."""

        for candidate in (self.primary_title, self.original_title):
            if candidate and candidate.strip():
                return candidate.strip()
        return self.id

    def display_rating(self) -> str:
        """Return the aggregate rating to one decimal, or ``N/A``."""

        if self.rating is None or not self.rating.aggregate_rating:
            return "N/A"
        return f"{self.rating.aggregate_rating:.1f}"

    @property
    def runtime_minutes(self) -> int | None:
        if not self.runtime_seconds:
            return None
        return self.runtime_seconds // 60

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready camelCase record, dropping absent or empty fields."""

        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude_defaults=True
        )


class ApiResult(BaseModel):
    """Uniform outcome of a remote call: either data or an error message."""

    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any) -> "ApiResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> "ApiResult":
        return cls(success=False, error=message)


class RequestOptions(BaseModel):
    """Base for option bags translated into query parameters."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_params(self) -> dict[str, Any]:
        """Return wire-named parameters; omission rules are applied later."""

        return self.model_dump(by_alias=True)


class TitleListOptions(RequestOptions):
    types: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    country_codes: list[str] = Field(default_factory=list)
    language_codes: list[str] = Field(default_factory=list)
    start_year: int | None = None
    end_year: int | None = None
    min_vote_count: int = 0
    max_vote_count: int | None = None
    min_aggregate_rating: float | None = None
    max_aggregate_rating: float | None = None
    sort_by: SortField = SortField.POPULARITY
    sort_order: SortOrder = SortOrder.DESC
    page_token: str | None = None


class PageOptions(RequestOptions):
    page_size: int = DEFAULT_PAGE_SIZE
    page_token: str | None = None


class CategoryPageOptions(PageOptions):
    """Paging options for credits and company credits."""

    categories: list[str] = Field(default_factory=list)


class MediaPageOptions(PageOptions):
    """Paging options for images and videos."""

    types: list[str] = Field(default_factory=list)


class EpisodeListOptions(PageOptions):
    season: str | None = None


class TitleDetail(BaseModel):
    """A title together with the sub-resources shown on its detail page."""

    title: Title
    images: list[dict[str, Any]] = Field(default_factory=list)
    credits: list[dict[str, Any]] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title.to_record(),
            "images": self.images,
            "credits": self.credits,
        }
