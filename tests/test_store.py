"""Tests for durable storage, the cellar and recent searches."""

import logging

import pytest

from divino.schema import WineRecord
from divino.store import (
    CELLAR_KEY,
    RECENT_SEARCHES_KEY,
    CellarStore,
    DedupeKey,
    InMemoryStorage,
    JsonFileStorage,
    RecentSearches,
)


def _wine(wine_id: str, name: str = "Barolo", producer: str = "G.D. Vajra") -> WineRecord:
    return WineRecord(id=wine_id, name=name, producer=producer, rating=88)


def test_cellar_load_missing_is_empty():
    cellar = CellarStore(InMemoryStorage())
    assert cellar.load() == []


def test_cellar_load_corrupt_is_empty_and_logged(caplog):
    storage = InMemoryStorage({CELLAR_KEY: "{not json"})
    cellar = CellarStore(storage)

    with caplog.at_level(logging.WARNING):
        assert cellar.load() == []

    assert "discarding stored cellar" in caplog.text


def test_cellar_load_wrong_shape_is_empty():
    storage = InMemoryStorage({CELLAR_KEY: '[{"name": 3}]'})
    assert CellarStore(storage).load() == []


def test_toggle_adds_and_persists():
    storage = InMemoryStorage()
    cellar = CellarStore(storage)
    cellar.load()

    wines = cellar.toggle(_wine("wine-1"))

    assert [w.id for w in wines] == ["wine-1"]
    assert storage.get(CELLAR_KEY) is not None
    reloaded = CellarStore(storage).load()
    assert reloaded == wines


def test_toggle_twice_restores_membership():
    storage = InMemoryStorage()
    cellar = CellarStore(storage)
    cellar.toggle(_wine("wine-1", name="Etna Bianco", producer="Benanti"))
    before = [w.id for w in cellar.wines]

    cellar.toggle(_wine("wine-2"))
    after = cellar.toggle(_wine("wine-2"))

    assert [w.id for w in after] == before
    assert [w.id for w in CellarStore(storage).load()] == before


def test_contains_matches_name_and_producer_case_insensitively():
    cellar = CellarStore(InMemoryStorage())
    cellar.toggle(_wine("wine-1"))

    assert cellar.contains(_wine("wine-99", name="BAROLO", producer="g.d. vajra"))
    assert not cellar.contains(_wine("wine-1", producer="Giacomo Conterno"))


def test_toggle_removes_by_composite_key():
    cellar = CellarStore(InMemoryStorage())
    cellar.toggle(_wine("wine-1"))

    assert cellar.toggle(_wine("wine-2", name="barolo")) == []


def test_contains_by_id_variant():
    cellar = CellarStore(InMemoryStorage(), dedupe=DedupeKey.ID)
    cellar.toggle(_wine("wine-1"))

    assert cellar.contains(_wine("wine-1", name="Something else"))
    assert not cellar.contains(_wine("wine-2"))


def test_save_of_load_is_idempotent():
    storage = InMemoryStorage()
    cellar = CellarStore(storage)
    cellar.toggle(_wine("wine-1"))
    cellar.toggle(_wine("wine-2", name="Etna Bianco", producer="Benanti"))
    stored = storage.get(CELLAR_KEY)

    cellar.save(cellar.load())

    assert storage.get(CELLAR_KEY) == stored


def test_newest_first_reverses_insertion_order():
    cellar = CellarStore(InMemoryStorage())
    cellar.toggle(_wine("wine-1"))
    cellar.toggle(_wine("wine-2", name="Etna Bianco", producer="Benanti"))

    assert [w.id for w in cellar.newest_first()] == ["wine-2", "wine-1"]


def test_replace_updates_saved_copy():
    storage = InMemoryStorage()
    cellar = CellarStore(storage)
    original = _wine("wine-1")
    cellar.toggle(original)

    cellar.replace(original.with_generated_image("data:image/png;base64,AAAA"))
    cellar.replace(_wine("wine-404", name="Unknown"))

    reloaded = CellarStore(storage).load()
    assert len(reloaded) == 1
    assert reloaded[0].generated_image_uri == "data:image/png;base64,AAAA"


def test_recent_searches_most_recent_first_and_deduped():
    recent = RecentSearches(InMemoryStorage())
    recent.add("Barolo")
    recent.add("Chianti")

    assert recent.add("  barolo ") == ["barolo", "Chianti"]


def test_recent_searches_bounded():
    storage = InMemoryStorage()
    recent = RecentSearches(storage)
    for query in ["a", "b", "c", "d", "e", "f", "g"]:
        recent.add(query)

    assert recent.queries == ["g", "f", "e", "d", "c"]
    assert RecentSearches(storage).load() == ["g", "f", "e", "d", "c"]


def test_recent_searches_ignores_blank():
    recent = RecentSearches(InMemoryStorage())
    assert recent.add("   ") == []


def test_recent_searches_corrupt_is_empty():
    storage = InMemoryStorage({RECENT_SEARCHES_KEY: '{"a": 1}'})
    assert RecentSearches(storage).load() == []


def test_recent_searches_clear():
    storage = InMemoryStorage()
    recent = RecentSearches(storage)
    recent.add("Barolo")

    recent.clear()

    assert recent.queries == []
    assert storage.get(RECENT_SEARCHES_KEY) is None


def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    storage = JsonFileStorage(path)

    storage.set("a", "1")
    storage.set("b", "2")
    storage.remove("a")

    assert JsonFileStorage(path).get("a") is None
    assert JsonFileStorage(path).get("b") == "2"


def test_json_file_storage_corrupt_file_is_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("not json", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get("anything") is None
    storage.set("a", "1")
    assert storage.get("a") == "1"


def test_cellar_persists_in_json_file(tmp_path):
    path = tmp_path / "storage.json"
    CellarStore(JsonFileStorage(path)).toggle(_wine("wine-1"))

    reloaded = CellarStore(JsonFileStorage(path)).load()

    assert [w.name for w in reloaded] == ["Barolo"]


class FailingStorage(InMemoryStorage):
    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


def test_failed_cellar_write_leaves_memory_unchanged():
    cellar = CellarStore(FailingStorage())

    with pytest.raises(OSError):
        cellar.toggle(_wine("wine-1"))

    assert cellar.wines == []
    assert not cellar.contains(_wine("wine-1"))


def test_failed_recent_search_write_leaves_memory_unchanged():
    storage = FailingStorage({RECENT_SEARCHES_KEY: '["Barolo"]'})
    recent = RecentSearches(storage)
    recent.load()

    with pytest.raises(OSError):
        recent.add("Chianti")

    assert recent.queries == ["Barolo"]


def test_json_file_storage_failed_write_keeps_old_file(tmp_path, mocker):
    path = tmp_path / "storage.json"
    storage = JsonFileStorage(path)
    storage.set("a", "1")
    mocker.patch("divino.store.os.replace", side_effect=OSError("read-only"))

    with pytest.raises(OSError):
        storage.set("a", "2")

    assert JsonFileStorage(path).get("a") == "1"
    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]
