"""Unit tests for scope-keyed stats caching."""

import pytest

from modules.stats import cache as stats_cache

pytestmark = pytest.mark.unit


def _counter():
    calls = []

    def compute():
        calls.append(1)
        return {"value": len(calls)}

    return calls, compute


class TestScope:
    def test_global_and_tenant_scopes(self):
        assert stats_cache.scope_for(None) == "global"
        assert stats_cache.scope_for(7) == "customer:7"


class TestCached:
    def test_second_read_served_from_cache(self):
        calls, compute = _counter()
        first = stats_cache.cached("orders", "customer:1", "p12", compute)
        second = stats_cache.cached("orders", "customer:1", "p12", compute)
        assert first == second == {"value": 1}
        assert len(calls) == 1

    def test_params_are_part_of_the_key(self):
        calls, compute = _counter()
        stats_cache.cached("orders", "global", "p12", compute)
        stats_cache.cached("orders", "global", "p6", compute)
        assert len(calls) == 2

    def test_invalidating_tenant_also_drops_global(self):
        calls, compute = _counter()
        stats_cache.cached("orders", "customer:1", "p12", compute)
        stats_cache.cached("orders", "global", "p12", compute)
        stats_cache.cached("orders", "customer:2", "p12", compute)

        stats_cache.invalidate(1)

        stats_cache.cached("orders", "customer:1", "p12", compute)
        stats_cache.cached("orders", "global", "p12", compute)
        stats_cache.cached("orders", "customer:2", "p12", compute)
        assert len(calls) == 5

    def test_bump_recovers_from_evicted_generation(self):
        stats_cache.bump("customer:3")
        assert stats_cache.generation("customer:3") == 2
        stats_cache.bump("customer:3")
        assert stats_cache.generation("customer:3") == 3
