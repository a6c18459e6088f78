"""Utility helpers for the CineShelf service."""

from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import Any, Iterable, Mapping


def slugify(value: str) -> str:
    """Return a URL-friendly slug."""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower()


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def format_query_value(value: Any) -> str:
    """Render a scalar the way the remote service expects it in a query string."""

    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_omitted(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def build_query_params(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten ``params`` into ordered query pairs.

    ``None``, empty strings and empty sequences are dropped entirely. Sequence
    values become one ``key=value`` pair per element, in order. Zero is a real
    value and is kept.
    """

    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if _is_omitted(value):
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            values: Iterable[Any] = value
            for entry in values:
                if _is_omitted(entry):
                    continue
                pairs.append((key, format_query_value(entry)))
        else:
            pairs.append((key, format_query_value(value)))
    return pairs
