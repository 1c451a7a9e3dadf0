"""
Unit tests for freshness classification and the core cache types.
"""
import pytest

from stalier.cache import (
    CacheEntry,
    Freshness,
    LazyKey,
    LiteralKey,
    StalierPolicy,
    classify,
    is_fresh,
    is_usable_stale,
)
from stalier.cache.core import coerce_entry

NOW = 1_700_000_000_000


def entry_aged(age_ms: int, updated_count: int = 0) -> CacheEntry:
    return CacheEntry(value="cachedValue", last_updated=NOW - age_ms, updated_count=updated_count)


# =============================================================================
# Classifier
# =============================================================================

class TestClassify:

    def test_absent_entry_is_expired(self):
        assert classify(None, 60, 60, NOW) is Freshness.EXPIRED

    def test_young_entry_is_fresh(self):
        assert classify(entry_aged(500), 1, 1, NOW) is Freshness.FRESH

    def test_entry_at_max_age_is_stale(self):
        """Windows are half-open: exactly max_age old is no longer fresh."""
        assert classify(entry_aged(1000), 1, 1, NOW) is Freshness.STALE

    def test_entry_within_stale_window(self):
        assert classify(entry_aged(1001), 1, 1, NOW) is Freshness.STALE

    def test_entry_at_combined_window_is_expired(self):
        assert classify(entry_aged(2000), 1, 1, NOW) is Freshness.EXPIRED

    def test_entry_past_combined_window_is_expired(self):
        assert classify(entry_aged(2001), 1, 1, NOW) is Freshness.EXPIRED

    def test_zero_stale_window_goes_straight_to_expired(self):
        assert classify(entry_aged(1500), 1, 0, NOW) is Freshness.EXPIRED

    def test_zero_max_age_with_stale_window(self):
        assert classify(entry_aged(0), 0, 5, NOW) is Freshness.STALE

    def test_helpers_agree_with_classify(self):
        entry = entry_aged(1500)
        assert not is_fresh(entry, 1, NOW)
        assert is_usable_stale(entry, 1, 1, NOW)


# =============================================================================
# Core types
# =============================================================================

class TestCacheEntry:

    def test_wire_form_uses_camel_case(self):
        entry = CacheEntry(value={"a": 1}, last_updated=NOW, updated_count=3)
        assert entry.to_dict() == {"value": {"a": 1}, "lastUpdated": NOW, "updatedCount": 3}

    def test_from_dict_restores_entry(self):
        entry = CacheEntry.from_dict({"value": "v", "lastUpdated": NOW, "updatedCount": 2})
        assert entry == CacheEntry(value="v", last_updated=NOW, updated_count=2)

    def test_from_dict_defaults_missing_counter(self):
        assert CacheEntry.from_dict({"value": "v", "lastUpdated": NOW}).updated_count == 0

    def test_coerce_entry_passes_entries_and_none_through(self):
        entry = entry_aged(10)
        assert coerce_entry(entry) is entry
        assert coerce_entry(None) is None

    def test_age_ms(self):
        assert entry_aged(750).age_ms(NOW) == 750


class TestKeys:

    def test_literal_key(self):
        assert LiteralKey("k").resolve() == "k"

    def test_lazy_key_calls_factory_on_resolve(self):
        calls = []

        def build():
            calls.append(1)
            return "built"

        key = LazyKey(build)
        assert calls == []
        assert key.resolve() == "built"
        assert calls == [1]


class TestPolicy:

    def test_string_key_is_wrapped(self, store):
        policy = StalierPolicy(cache_store=store, key="plain")
        assert policy.key == LiteralKey("plain")

    def test_defaults_disable_caching(self, store):
        policy = StalierPolicy(cache_store=store, key="k")
        assert policy.max_age == 0
        assert policy.stale_while_revalidate == 0
        assert not policy.caching_enabled

    def test_either_window_enables_caching(self, store):
        assert StalierPolicy(cache_store=store, key="k", max_age=1).caching_enabled
        assert StalierPolicy(cache_store=store, key="k", stale_while_revalidate=1).caching_enabled

    @pytest.mark.parametrize("field", ["max_age", "stale_while_revalidate"])
    def test_negative_windows_rejected(self, store, field):
        with pytest.raises(ValueError):
            StalierPolicy(cache_store=store, key="k", **{field: -1})
