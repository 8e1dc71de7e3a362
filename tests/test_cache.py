"""Tests for the entity cache."""

from app.services.cache import EntityCache, ALL


def test_set_and_get():
    cache = EntityCache(ttl_seconds=60)
    cache.set("workshops", "abc", "value")
    assert cache.get("workshops", "abc") == "value"


def test_invalidate_drops_namespace_only():
    cache = EntityCache(ttl_seconds=60)
    cache.set("workshops", ALL, ["w"])
    cache.set("announcements", ALL, ["a"])
    cache.invalidate("workshops")
    assert cache.get("workshops") is None
    assert cache.get("announcements") == ["a"]


def test_invalidate_key_also_drops_list():
    cache = EntityCache(ttl_seconds=60)
    cache.set("profiles", ALL, ["u"])
    cache.set("profiles", "u1", "u")
    cache.invalidate_key("profiles", "u1")
    assert cache.get("profiles", "u1") is None
    assert cache.get("profiles") is None


def test_zero_ttl_disables_cache():
    cache = EntityCache(ttl_seconds=0)
    cache.set("profiles", "u1", "u")
    assert len(cache) == 0


def test_expired_entry_is_dropped(monkeypatch):
    cache = EntityCache(ttl_seconds=10)
    clock = iter([100.0, 200.0])
    monkeypatch.setattr("app.services.cache.time.monotonic", lambda: next(clock))
    cache.set("profiles", "u1", "u")
    assert cache.get("profiles", "u1") is None


def test_set_skips_value_read_before_invalidation():
    cache = EntityCache(ttl_seconds=60)
    generation = cache.generation("profiles")
    cache.invalidate_key("profiles", "u1")
    assert cache.set("profiles", "u1", "old", generation) is False
    assert cache.get("profiles", "u1") is None


def test_set_with_current_generation_is_stored():
    cache = EntityCache(ttl_seconds=60)
    cache.invalidate("workshops")
    generation = cache.generation("workshops")
    assert cache.set("workshops", ALL, ["w"], generation) is True
    assert cache.get("workshops") == ["w"]


def test_generation_is_per_namespace():
    cache = EntityCache(ttl_seconds=60)
    generation = cache.generation("announcements")
    cache.invalidate("workshops")
    assert cache.set("announcements", ALL, ["a"], generation) is True
