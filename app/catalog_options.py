"""Static filter and sort vocabularies exposed to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SortField(str, Enum):
    """Sort orders understood by the remote ``/titles`` endpoint."""

    POPULARITY = "SORT_BY_POPULARITY"
    RELEASE_DATE = "SORT_BY_RELEASE_DATE"
    USER_RATING = "SORT_BY_USER_RATING"
    USER_RATING_COUNT = "SORT_BY_USER_RATING_COUNT"
    YEAR = "SORT_BY_YEAR"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class OptionDefinition:
    """A selectable value paired with its human-readable label."""

    value: str
    label: str

    def to_payload(self) -> dict[str, str]:
        return {"value": self.value, "label": self.label}


TITLE_TYPES: tuple[str, ...] = (
    "MOVIE",
    "TV_SERIES",
    "TV_MINI_SERIES",
    "TV_SPECIAL",
    "TV_MOVIE",
    "SHORT",
    "VIDEO",
    "VIDEO_GAME",
)

MOVIE_TYPES: tuple[str, ...] = ("MOVIE",)
SERIES_TYPES: tuple[str, ...] = ("TV_SERIES", "TV_MINI_SERIES")

SORT_OPTIONS: tuple[OptionDefinition, ...] = (
    OptionDefinition(value=SortField.POPULARITY.value, label="Popularity"),
    OptionDefinition(value=SortField.RELEASE_DATE.value, label="Release Date"),
    OptionDefinition(value=SortField.USER_RATING.value, label="User Rating"),
    OptionDefinition(value=SortField.USER_RATING_COUNT.value, label="Rating Count"),
    OptionDefinition(value=SortField.YEAR.value, label="Year"),
)

SORT_ORDERS: tuple[OptionDefinition, ...] = (
    OptionDefinition(value=SortOrder.ASC.value, label="Ascending"),
    OptionDefinition(value=SortOrder.DESC.value, label="Descending"),
)

COMMON_GENRES: tuple[str, ...] = (
    "Action",
    "Adventure",
    "Comedy",
    "Crime",
    "Drama",
    "Fantasy",
    "Horror",
    "Mystery",
    "Romance",
    "Sci-Fi",
    "Thriller",
    "Western",
    "Animation",
    "Documentary",
    "Family",
)


def options_payload() -> dict[str, object]:
    """Return every lookup table in a JSON-friendly shape."""

    return {
        "titleTypes": list(TITLE_TYPES),
        "sortOptions": [option.to_payload() for option in SORT_OPTIONS],
        "sortOrders": [option.to_payload() for option in SORT_ORDERS],
        "genres": list(COMMON_GENRES),
    }
