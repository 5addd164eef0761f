"""
Cache - In-memory TTL cache for feed results.

Provides:
- FeedCache: key/value store with per-entry expiry
- A background sweep that purges expired entries nobody reads again
- In-flight de-duplication so concurrent callers share one fetch per key
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_MINUTES = 15
DEFAULT_SWEEP_INTERVAL = 300  # seconds


@dataclass
class CacheEntry:
    key: str
    value: Any
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class FeedCache:
    """TTL cache with lazy eviction on read and a periodic sweep."""

    def __init__(
        self,
        default_ttl_minutes: float = DEFAULT_TTL_MINUTES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.default_ttl_minutes = default_ttl_minutes
        self._clock = clock
        self._cache: dict[str, CacheEntry] = {}
        self._pending: dict[str, asyncio.Future] = {}
        self._sweeper: asyncio.Task | None = None

    def get(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            self.delete(key)
            return None

        return entry.value

    def set(self, key: str, value: Any, ttl_minutes: float | None = None) -> None:
        """Store a value; ttl_minutes falls back to the cache default."""
        now = self._clock()
        ttl = ttl_minutes if ttl_minutes else self.default_ttl_minutes
        self._cache[key] = CacheEntry(
            key=key,
            value=value,
            created_at=now,
            expires_at=now + timedelta(minutes=ttl)
        )

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def clear_expired(self) -> int:
        """Remove expired entries. Returns count of removed entries."""
        now = self._clock()
        expired = [key for key, entry in self._cache.items() if entry.is_expired(now)]
        for key in expired:
            del self._cache[key]
        return len(expired)

    def stats(self) -> dict[str, int]:
        now = self._clock()
        expired = sum(1 for entry in self._cache.values() if entry.is_expired(now))
        return {
            "total": len(self._cache),
            "valid": len(self._cache) - expired,
            "expired": expired,
        }

    @property
    def size(self) -> int:
        return len(self._cache)

    # ─────────────────────────────────────────────────────────────
    # In-flight de-duplication
    # ─────────────────────────────────────────────────────────────

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def dedupe(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run factory() once per key at a time.

        A caller arriving while a fetch for the same key is underway awaits
        that fetch instead of starting another. The pending entry is dropped
        when the fetch itself settles, whether it succeeded or failed, even if
        the caller that started it was cancelled.
        """
        pending = self._pending.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        # No await between the lookup above and this insert
        task = asyncio.ensure_future(factory())
        self._pending[key] = task
        task.add_done_callback(lambda done: self._release(key, done))
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Future) -> None:
        # A newer fetch may own the key after clear_pending()
        if self._pending.get(key) is task:
            del self._pending[key]

    def clear_pending(self) -> None:
        """Forget in-flight fetches; later callers start fresh ones."""
        self._pending.clear()

    # ─────────────────────────────────────────────────────────────
    # Background sweep
    # ─────────────────────────────────────────────────────────────

    def start_sweeper(self, interval: float = DEFAULT_SWEEP_INTERVAL) -> asyncio.Task:
        """Start the periodic expiry sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop(interval))
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            removed = self.clear_expired()
            if removed:
                logger.info(f"Cache sweep removed {removed} expired entries")
