"""Durable key-value storage, the cellar and the recent-search history."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from divino.exceptions import StorageReadFailed
from divino.schema import WineRecord

logger = logging.getLogger(__name__)

CELLAR_KEY = "divino_cellar"
RECENT_SEARCHES_KEY = "divino_recent_searches"
RECENT_SEARCHES_LIMIT = 5

_WINE_LIST = TypeAdapter(list[WineRecord])
_STRING_LIST = TypeAdapter(list[str])


class KeyValueStorage(ABC):
    """String get/set/remove store, the shape of browser local storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class InMemoryStorage(KeyValueStorage):
    def __init__(self, initial: dict[str, str] | None = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """All keys in one JSON object file, rewritten whole on every change."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("storage file %s is unreadable, starting empty", self.path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning("storage file %s does not hold an object, starting empty", self.path)
            return {}
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        finally:
            tmp_path.unlink(missing_ok=True)


class DedupeKey(str, Enum):
    NAME_PRODUCER = "name_producer"
    ID = "id"


class CellarStore:
    """The user's saved wines, written through to storage after every change."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = CELLAR_KEY,
        dedupe: DedupeKey | str = DedupeKey.NAME_PRODUCER,
    ):
        self.storage = storage
        self.key = key
        self.dedupe = DedupeKey(dedupe)
        self.wines: list[WineRecord] = []

    def load(self) -> list[WineRecord]:
        """Read the cellar from storage. Missing or corrupt data yields an empty cellar."""
        try:
            self.wines = _decode(self.storage.get(self.key), _WINE_LIST)
        except StorageReadFailed as e:
            logger.warning("discarding stored cellar: %s", e)
            self.wines = []
        return list(self.wines)

    def contains(self, wine: WineRecord) -> bool:
        identity = self._identity(wine)
        return any(self._identity(saved) == identity for saved in self.wines)

    def toggle(self, wine: WineRecord) -> list[WineRecord]:
        identity = self._identity(wine)
        if self.contains(wine):
            wines = [saved for saved in self.wines if self._identity(saved) != identity]
        else:
            wines = [*self.wines, wine]
        self.save(wines)
        return list(self.wines)

    def replace(self, wine: WineRecord) -> None:
        """Swap in an updated copy of a saved wine, matched by id."""
        if any(saved.id == wine.id for saved in self.wines):
            self.save([wine if saved.id == wine.id else saved for saved in self.wines])

    def save(self, wines: list[WineRecord]) -> None:
        """Persist the list, then adopt it. A failed write leaves memory unchanged."""
        wines = list(wines)
        self.storage.set(self.key, _WINE_LIST.dump_json(wines).decode("utf-8"))
        self.wines = wines

    def newest_first(self) -> list[WineRecord]:
        return list(reversed(self.wines))

    def _identity(self, wine: WineRecord) -> tuple[str, ...]:
        if self.dedupe is DedupeKey.ID:
            return (wine.id,)
        return (wine.name.strip().casefold(), wine.producer.strip().casefold())


class RecentSearches:
    """Most-recent-first search history, bounded and case-insensitively unique."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = RECENT_SEARCHES_KEY,
        limit: int = RECENT_SEARCHES_LIMIT,
    ):
        self.storage = storage
        self.key = key
        self.limit = limit
        self.queries: list[str] = []

    def load(self) -> list[str]:
        try:
            queries = _decode(self.storage.get(self.key), _STRING_LIST)
        except StorageReadFailed as e:
            logger.warning("discarding stored recent searches: %s", e)
            queries = []
        self.queries = queries[: self.limit]
        return list(self.queries)

    def add(self, query: str) -> list[str]:
        text = query.strip()
        if not text:
            return list(self.queries)
        folded = text.casefold()
        queries = [text, *(q for q in self.queries if q.casefold() != folded)]
        self._save(queries[: self.limit])
        return list(self.queries)

    def clear(self) -> None:
        self.storage.remove(self.key)
        self.queries = []

    def _save(self, queries: list[str]) -> None:
        self.storage.set(self.key, json.dumps(queries, ensure_ascii=False))
        self.queries = queries


def _decode(raw: str | None, adapter: TypeAdapter) -> list:
    if raw is None or not raw.strip():
        return []
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        raise StorageReadFailed(f"Stored value is not valid: {e.error_count()} error(s)") from e
