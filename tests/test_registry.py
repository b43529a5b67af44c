from datetime import datetime, timedelta, timezone

import pytest

from frameslot.domain.errors import TemplateNotFound
from frameslot.domain.registry import DefinitionCache, TemplateRegistry


def test_registry_lookup(make_definition):
    registry = TemplateRegistry([make_definition("solo", 1)])

    assert "solo" in registry
    assert registry.get("solo").hole_count == 1
    assert len(registry) == 1


def test_registry_missing_template(make_definition):
    registry = TemplateRegistry()

    with pytest.raises(TemplateNotFound) as exc:
        registry.get("ghost")
    assert exc.value.template_id == "ghost"


def test_registering_again_replaces_definition(make_definition):
    registry = TemplateRegistry([make_definition("tpl", 1)])

    registry.register(make_definition("tpl", 3))

    assert registry.get("tpl").hole_count == 3
    assert len(registry) == 1


def test_cache_entry_valid_until_source_is_newer(make_definition):
    cache = DefinitionCache()
    stamp = datetime(2024, 3, 1, 9, 30)
    definition = make_definition("tpl", 2)

    assert cache.lookup("file-1", stamp) is None

    cache.store("file-1", stamp, definition)

    assert cache.lookup("file-1", stamp) == definition
    assert cache.lookup("file-1", stamp - timedelta(hours=1)) == definition
    assert cache.lookup("file-1", stamp + timedelta(seconds=1)) is None


def test_cache_invalidate_and_clear(make_definition):
    cache = DefinitionCache()
    stamp = datetime(2024, 3, 1)
    cache.store("a", stamp, make_definition("a", 1))
    cache.store("b", stamp, make_definition("b", 1))

    cache.invalidate("a")
    cache.invalidate("missing")
    assert cache.lookup("a", stamp) is None
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


def test_cache_compares_naive_and_aware_timestamps(make_definition):
    cache = DefinitionCache()
    definition = make_definition("tpl", 1)
    cache.store("file-1", datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc), definition)

    assert cache.lookup("file-1", datetime(2024, 5, 1, 12, 0)) == definition
    assert cache.lookup("file-1", datetime(2024, 5, 1, 13, 0)) is None

    plus_two = timezone(timedelta(hours=2))
    assert cache.lookup("file-1", datetime(2024, 5, 1, 14, 0, tzinfo=plus_two)) == definition
    assert cache.lookup("file-1", datetime(2024, 5, 1, 14, 1, tzinfo=plus_two)) is None


def test_naive_store_matches_aware_lookup(make_definition):
    cache = DefinitionCache()
    definition = make_definition("tpl", 1)
    cache.store("file-2", datetime(2024, 5, 1, 12, 0), definition)

    assert cache.lookup("file-2", datetime(2024, 5, 1, 11, 59, tzinfo=timezone.utc)) == definition
