"""In-memory TTL + LRU cache shared by concurrent requests.

Backs three concerns: finished check results, raw grammar-service responses,
and the per-client request counters used by the rate limiter. All mutation
happens under a single asyncio lock; the background sweep removes expired
keys in one locked batch so foreground reads/writes are never blocked longer
than that.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
import hashlib
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from grammar_engine.observability.logger import get_logger

logger = get_logger("span_cache")


@dataclass
class CacheEntry:
    key: str
    value: Any
    created_at: float
    ttl_seconds: float

    def expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl_seconds


class SpanCache:
    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 1000,
        sweep_interval_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._sweep_task: asyncio.Task | None = None
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @staticmethod
    def make_key(namespace: str, *parts: str) -> str:
        digest = hashlib.sha256("\x00".join(parts).encode("utf-8")).hexdigest()
        return f"{namespace}:{digest}"

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def size(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return copy.deepcopy(entry.value)

    async def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        async with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=copy.deepcopy(value),
                created_at=self._clock(),
                ttl_seconds=self._ttl if ttl_seconds is None else ttl_seconds,
            )
            self._entries.move_to_end(key)
            self._evict_overflow()

    async def increment(
        self, key: str, amount: int = 1, ttl_seconds: float | None = None
    ) -> int:
        """Add to a counter. An absent or expired counter restarts its window at zero."""
        async with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None or entry.expired(now):
                entry = CacheEntry(
                    key=key,
                    value=0,
                    created_at=now,
                    ttl_seconds=self._ttl if ttl_seconds is None else ttl_seconds,
                )
                self._entries[key] = entry
            entry.value += amount
            self._entries.move_to_end(key)
            self._evict_overflow()
            return entry.value

    async def sweep_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.expired(now)]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug("cache_sweep", removed=len(expired), remaining=len(self._entries))
        return len(expired)

    def start(self) -> None:
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None

    def stats(self) -> dict:
        return {
            "size": self.size,
            "max_entries": self._max_entries,
            "ttl_seconds": self._ttl,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            await self.sweep_expired()

    def _evict_overflow(self) -> None:
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
            self.evictions += 1
