"""
Tests for the TTL feed cache, its sweep and in-flight de-duplication.
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from newswire.cache import FeedCache


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 2, 13, 12, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return FeedCache(default_ttl_minutes=15, clock=clock)


class TestFeedCache:
    """Tests for TTL storage."""

    def test_set_and_get(self, cache):
        cache.set("k", [1, 2])
        assert cache.get("k") == [1, 2]
        assert cache.has("k")

    def test_missing_key(self, cache):
        assert cache.get("nope") is None
        assert not cache.has("nope")

    def test_expires_after_ttl(self, cache, clock):
        cache.set("k", "v")
        clock.advance(minutes=15)
        assert cache.get("k") == "v"
        clock.advance(seconds=1)
        assert cache.get("k") is None
        # Lazy eviction removed the entry
        assert cache.size == 0

    def test_custom_ttl(self, cache, clock):
        cache.set("short", "v", ttl_minutes=1)
        clock.advance(minutes=2)
        assert cache.get("short") is None

    def test_zero_ttl_uses_default(self, cache, clock):
        cache.set("k", "v", ttl_minutes=0)
        clock.advance(minutes=10)
        assert cache.get("k") == "v"

    def test_delete_and_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        assert cache.get("a") is None
        cache.delete("missing")
        cache.clear()
        assert cache.size == 0

    def test_clear_expired(self, cache, clock):
        cache.set("old", 1, ttl_minutes=1)
        cache.set("new", 2, ttl_minutes=30)
        clock.advance(minutes=5)
        assert cache.clear_expired() == 1
        assert cache.size == 1
        assert cache.get("new") == 2

    def test_stats(self, cache, clock):
        cache.set("old", 1, ttl_minutes=1)
        cache.set("new", 2, ttl_minutes=30)
        clock.advance(minutes=5)
        assert cache.stats() == {"total": 2, "valid": 1, "expired": 1}


class TestDedupe:
    """Tests for sharing one in-flight fetch per key."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_call(self, cache):
        calls = 0
        release = asyncio.Event()

        async def factory():
            nonlocal calls
            calls += 1
            await release.wait()
            return "result"

        first = asyncio.ensure_future(cache.dedupe("k", factory))
        second = asyncio.ensure_future(cache.dedupe("k", factory))
        await asyncio.sleep(0)
        assert cache.is_pending("k")

        release.set()
        assert await asyncio.gather(first, second) == ["result", "result"]
        assert calls == 1
        assert not cache.is_pending("k")

    @pytest.mark.asyncio
    async def test_different_keys_run_separately(self, cache):
        calls = []

        async def factory(key):
            calls.append(key)
            return key

        results = await asyncio.gather(
            cache.dedupe("a", lambda: factory("a")),
            cache.dedupe("b", lambda: factory("b")),
        )
        assert results == ["a", "b"]
        assert sorted(calls) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_propagates_and_clears_pending(self, cache):
        release = asyncio.Event()

        async def failing():
            await release.wait()
            raise RuntimeError("fetch failed")

        first = asyncio.ensure_future(cache.dedupe("k", failing))
        second = asyncio.ensure_future(cache.dedupe("k", failing))
        await asyncio.sleep(0)
        release.set()

        results = await asyncio.gather(first, second, return_exceptions=True)
        assert all(isinstance(r, RuntimeError) for r in results)
        assert not cache.is_pending("k")

        async def working():
            return "ok"

        assert await cache.dedupe("k", working) == "ok"

    @pytest.mark.asyncio
    async def test_cancelled_starter_keeps_fetch_shared(self, cache):
        """Cancelling the caller that started a fetch leaves it in flight for others."""
        calls = 0
        release = asyncio.Event()

        async def factory():
            nonlocal calls
            calls += 1
            await release.wait()
            return "result"

        starter = asyncio.ensure_future(cache.dedupe("k", factory))
        await asyncio.sleep(0)
        starter.cancel()
        await asyncio.gather(starter, return_exceptions=True)

        assert cache.is_pending("k")
        follower = asyncio.ensure_future(cache.dedupe("k", factory))
        await asyncio.sleep(0)
        release.set()

        assert await follower == "result"
        assert calls == 1
        await asyncio.sleep(0)
        assert not cache.is_pending("k")

    @pytest.mark.asyncio
    async def test_clear_pending(self, cache):
        release = asyncio.Event()

        async def factory():
            await release.wait()
            return 1

        task = asyncio.ensure_future(cache.dedupe("k", factory))
        await asyncio.sleep(0)
        cache.clear_pending()
        assert not cache.is_pending("k")

        release.set()
        assert await task == 1


class TestSweeper:
    """Tests for the background expiry sweep."""

    @pytest.mark.asyncio
    async def test_sweep_removes_expired_entries(self, cache, clock):
        cache.set("old", 1, ttl_minutes=1)
        cache.set("new", 2)
        clock.advance(minutes=5)

        cache.start_sweeper(interval=0.01)
        await asyncio.sleep(0.05)
        await cache.stop_sweeper()

        assert cache.size == 1
        assert cache.get("new") == 2

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, cache):
        first = cache.start_sweeper(interval=10)
        assert cache.start_sweeper(interval=10) is first
        await cache.stop_sweeper()
        assert first.cancelled()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, cache):
        await cache.stop_sweeper()
