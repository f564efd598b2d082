from storefront.core.cache import stats as cache_stats


def test_cache_events_are_counted_per_namespace(cache) -> None:
    cache.set("k", "v")
    cache.get("k")
    cache.get("missing")
    cache.invalidate("k")

    counts = cache_stats.snapshot()["test"]
    assert counts == {"set": 1, "hit": 1, "miss": 1, "invalidate": 1}


def test_stale_hits_are_counted_separately(cache, clock) -> None:
    cache.set("k", "v", stale_seconds=1)
    clock.advance(1)
    cache.get("k")

    assert cache_stats.snapshot()["test"]["stale_hit"] == 1


def test_diff_is_sparse() -> None:
    before = {"a": {"hit": 1, "miss": 2}}
    after = {"a": {"hit": 3, "miss": 2}, "b": {"set": 1}}

    assert cache_stats.diff(before, after) == {"a": {"hit": 2}, "b": {"set": 1}}


def test_snapshot_is_a_copy(cache) -> None:
    cache.set("k", "v")
    snap = cache_stats.snapshot()
    snap["test"]["set"] = 99

    assert cache_stats.snapshot()["test"]["set"] == 1
