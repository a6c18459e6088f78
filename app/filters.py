"""User-facing filter and sort selection for title listings."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel

from .catalog_options import SortField, SortOrder
from .models import TitleListOptions

DEFAULT_MIN_YEAR = 1900

MembershipField = Literal["types", "genres"]


def current_year() -> int:
    return date.today().year


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    cleaned: list[str] = []
    for value in values:
        if value not in cleaned:
            cleaned.append(value)
    return tuple(cleaned)


class FilterConfiguration(BaseModel):
    """Immutable snapshot of the type/genre/rating/year/sort selection.

    Every mutator returns a new configuration. ``types`` and ``genres`` keep
    selection order but behave as sets. The default ``max_year`` is the
    year the configuration was created in, and stays "unset" after the
    calendar rolls over.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    types: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()
    sort_by: SortField = SortField.POPULARITY
    sort_order: SortOrder = SortOrder.DESC
    min_rating: float = Field(default=0.0, ge=0, le=10)
    min_year: int = DEFAULT_MIN_YEAR
    max_year: int = Field(default_factory=current_year)

    _year_ceiling: int = PrivateAttr(default_factory=current_year)

    @field_validator("types", "genres", mode="after")
    @classmethod
    def _unique_members(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _dedupe(value)

    @classmethod
    def default(cls) -> "FilterConfiguration":
        return cls()

    def reset(self) -> "FilterConfiguration":
        """Return the canonical default configuration."""

        return self.default()

    def update(self, field: str, value: Any) -> "FilterConfiguration":
        """Return a copy with ``field`` replaced; ranges are not re-checked."""

        if field not in type(self).model_fields:
            # Accept the camelCase names used by the JSON surface as well.
            matches = [
                name
                for name, info in type(self).model_fields.items()
                if info.alias == field
            ]
            if not matches:
                raise ValueError(f"Unknown filter field: {field}")
            field = matches[0]
        if field in ("types", "genres"):
            value = _dedupe(value)
        elif field == "sort_by":
            value = SortField(value)
        elif field == "sort_order":
            value = SortOrder(value)
        return self.model_copy(update={field: value})

    def toggle_membership(
        self, field: MembershipField, value: str
    ) -> "FilterConfiguration":
        """Add ``value`` to ``field`` if absent, remove it if present."""

        if field not in ("types", "genres"):
            raise ValueError(f"Field {field} does not hold a set of values")
        current: tuple[str, ...] = getattr(self, field)
        if value in current:
            updated = tuple(entry for entry in current if entry != value)
        else:
            updated = (*current, value)
        return self.model_copy(update={field: updated})

    def has_rating_filter(self) -> bool:
        return self.min_rating > 0

    def has_start_year(self) -> bool:
        return self.min_year > DEFAULT_MIN_YEAR

    def has_end_year(self) -> bool:
        return self.max_year < self._year_ceiling

    def active_count(self) -> int:
        """Count the filter dimensions that differ from their default."""

        return sum(
            (
                bool(self.types),
                bool(self.genres),
                self.has_rating_filter(),
                self.has_start_year() or self.has_end_year(),
            )
        )

    def to_list_options(
        self,
        *,
        pinned_types: Iterable[str] | None = None,
        page_token: str | None = None,
    ) -> TitleListOptions:
        """Derive remote list options, leaving "don't care" values unset.

        ``pinned_types`` replaces the user's type selection, which is how the
        movie and series listings keep their type fixed.
        """

        types = list(pinned_types) if pinned_types is not None else list(self.types)
        return TitleListOptions(
            types=types,
            genres=list(self.genres),
            sort_by=self.sort_by,
            sort_order=self.sort_order,
            min_aggregate_rating=self.min_rating if self.has_rating_filter() else None,
            start_year=self.min_year if self.has_start_year() else None,
            end_year=self.max_year if self.has_end_year() else None,
            page_token=page_token,
        )

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True)
        payload["activeCount"] = self.active_count()
        return payload
