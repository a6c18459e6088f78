"""Key/value storage ports used by the membership store."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from .database import Database
from .db_models import StoredValue

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the durable medium cannot be read or written."""


class StoragePort(Protocol):
    """Minimal string-by-key storage contract."""

    def read(self, key: str) -> str | None:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class InMemoryStorage:
    """Dictionary-backed storage, useful for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes.append((key, value))


class DatabaseStorage:
    """Storage port persisting each key as a row in ``stored_values``."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def read(self, key: str) -> str | None:
        try:
            with self._database.session() as session:
                record = session.get(StoredValue, key)
                return record.value if record is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read {key}") from exc

    def write(self, key: str, value: str) -> None:
        try:
            with self._database.session() as session:
                record = session.get(StoredValue, key)
                if record is None:
                    session.add(StoredValue(key=key, value=value))
                else:
                    record.value = value
        except SQLAlchemyError as exc:
            logger.error("Failed to persist %s: %s", key, exc)
            raise StorageError(f"Failed to write {key}") from exc
