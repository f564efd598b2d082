import asyncio

import pytest

from storefront.core.cache import QueryCache, SingleFlight


@pytest.mark.asyncio
async def test_get_or_set_loads_once_under_concurrency(cache) -> None:
    calls = 0

    async def factory() -> str:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return "value"

    results = await asyncio.gather(*[cache.get_or_set("k", factory) for _ in range(50)])

    assert results == ["value"] * 50
    assert calls == 1
    assert cache.get("k") == "value"


@pytest.mark.asyncio
async def test_get_or_set_serves_fresh_value_without_loading(cache) -> None:
    cache.set("k", "cached")

    async def factory() -> str:
        raise AssertionError("factory should not run")

    assert await cache.get_or_set("k", factory) == "cached"


@pytest.mark.asyncio
async def test_get_or_set_reloads_stale_value(cache, clock) -> None:
    cache.set("k", "old", stale_seconds=1)
    clock.advance(2)

    async def factory() -> str:
        return "new"

    assert await cache.get_or_set("k", factory) == "new"
    assert cache.get("k") == "new"


@pytest.mark.asyncio
async def test_get_or_set_errors_reach_all_waiters_and_are_not_cached(cache) -> None:
    calls = 0

    async def failing() -> str:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        raise RuntimeError("backend down")

    results = await asyncio.gather(
        *[cache.get_or_set("k", failing) for _ in range(5)],
        return_exceptions=True,
    )

    assert calls == 1
    assert all(isinstance(r, RuntimeError) for r in results)
    assert "k" not in cache

    async def ok() -> str:
        return "recovered"

    assert await cache.get_or_set("k", ok) == "recovered"


@pytest.mark.asyncio
async def test_cache_if_vetoes_storing(cache) -> None:
    async def empty() -> list[int]:
        return []

    assert await cache.get_or_set("similar:1:6", empty, cache_if=bool) == []
    assert "similar:1:6" not in cache


@pytest.mark.asyncio
async def test_get_or_set_honours_stale_seconds(clock) -> None:
    cache = QueryCache(namespace="t", default_stale_seconds=60, clock=clock)

    async def factory() -> int:
        return 1

    await cache.get_or_set("k", factory, stale_seconds=5)
    clock.advance(5)

    assert cache.is_stale("k") is True


@pytest.mark.asyncio
async def test_singleflight_shares_result_and_clears_key() -> None:
    flight = SingleFlight()
    gate = asyncio.Event()
    calls = 0

    async def fn() -> int:
        nonlocal calls
        calls += 1
        await gate.wait()
        return 7

    first = asyncio.create_task(flight.do("k", fn))
    await asyncio.sleep(0)
    assert flight.in_flight("k") is True

    second = asyncio.create_task(flight.do("k", fn))
    await asyncio.sleep(0)
    gate.set()

    assert await first == 7
    assert await second == 7
    assert calls == 1
    assert flight.in_flight("k") is False


@pytest.mark.asyncio
async def test_singleflight_waiter_cancel_does_not_cancel_leader() -> None:
    flight = SingleFlight()
    gate = asyncio.Event()

    async def fn() -> str:
        await gate.wait()
        return "done"

    leader = asyncio.create_task(flight.do("k", fn))
    await asyncio.sleep(0)
    waiter = asyncio.create_task(flight.do("k", fn))
    await asyncio.sleep(0)

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    gate.set()
    assert await leader == "done"


@pytest.mark.asyncio
async def test_singleflight_owner_cancel_does_not_fail_waiters() -> None:
    flight = SingleFlight()
    gate = asyncio.Event()
    calls = 0

    async def fn() -> str:
        nonlocal calls
        calls += 1
        await gate.wait()
        return "done"

    owner = asyncio.create_task(flight.do("k", fn))
    await asyncio.sleep(0)
    waiter = asyncio.create_task(flight.do("k", fn))
    await asyncio.sleep(0)

    owner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await owner
    assert flight.in_flight("k") is True

    gate.set()
    assert await waiter == "done"
    assert calls == 1
    assert flight.in_flight("k") is False


@pytest.mark.asyncio
async def test_get_or_set_keeps_loading_after_first_caller_is_cancelled(cache) -> None:
    gate = asyncio.Event()

    async def factory() -> str:
        await gate.wait()
        return "value"

    first = asyncio.create_task(cache.get_or_set("k", factory))
    await asyncio.sleep(0)
    second = asyncio.create_task(cache.get_or_set("k", factory))
    await asyncio.sleep(0)

    first.cancel()
    await asyncio.sleep(0)
    gate.set()

    assert await second == "value"
    assert first.cancelled() is True
    assert cache.get("k") == "value"
