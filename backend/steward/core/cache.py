"""
Result caches.

Two explicitly constructed caches are passed into the services that use them:

- MemoryCache: a bounded in-process memo table (sentiment results keyed by
  a hash of the analysed text).
- PayloadCache: an asyncio Redis-backed TTL cache for computed dashboard payloads.
  Each entry stores the payload together with the time it was written and
  its TTL, and validity is checked on read against an injectable clock.

Both are best effort: losing an entry only costs a recomputation.
"""

import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def hash_text(text: str) -> str:
    """Stable cache key for a piece of free text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class MemoryCache:
    """Bounded in-memory memo cache with least-recently-used eviction."""

    def __init__(
        self,
        max_entries: int = 10_000,
        ttl_seconds: Optional[float] = None,
        clock: Clock = time.time,
    ):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: "OrderedDict[str, tuple[float, Any]]" = OrderedDict()

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.ttl_seconds is not None and self.clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self.clock(), value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


class PayloadCache:
    """
    Redis-backed TTL cache over the asyncio client.

    Entries are JSON envelopes of the form {"data", "timestamp", "ttl"} with
    timestamp and ttl in milliseconds. Validity is checked with a separate
    read (is_valid) before the payload is fetched (get); the two steps are
    not atomic, so a reader may at worst see a payload that expired between
    them. Expired entries are kept so stale views can still read them.
    """

    def __init__(
        self,
        client: Redis,
        prefix: str = "steward:cache:",
        default_ttl_minutes: int = 60,
        clock: Clock = time.time,
    ):
        self.client = client
        self.prefix = prefix
        self.default_ttl_minutes = default_ttl_minutes
        self.clock = clock

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _now_ms(self) -> float:
        return self.clock() * 1000.0

    async def _envelope(self, key: str) -> Optional[dict]:
        try:
            raw = await self.client.get(self._key(key))
        except RedisError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            envelope = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable cache entry %s", key)
            return None
        return envelope if isinstance(envelope, dict) else None

    async def get(self, key: str) -> Optional[Any]:
        """Return the cached payload regardless of age, or None."""
        envelope = await self._envelope(key)
        return envelope.get("data") if envelope else None

    async def set(self, key: str, data: Any, ttl_minutes: Optional[int] = None) -> None:
        ttl = self.default_ttl_minutes if ttl_minutes is None else ttl_minutes
        envelope = {
            "data": data,
            "timestamp": self._now_ms(),
            "ttl": ttl * 60 * 1000,
        }
        try:
            await self.client.set(self._key(key), json.dumps(envelope))
        except RedisError as exc:
            logger.error("Error caching data for %s: %s", key, exc)

    async def is_valid(self, key: str) -> bool:
        envelope = await self._envelope(key)
        if envelope is None:
            return False
        return (self._now_ms() - envelope.get("timestamp", 0)) < envelope.get("ttl", 0)

    async def get_valid(self, key: str) -> Optional[Any]:
        """Two-step read-then-validate lookup used by the route handlers."""
        if not await self.is_valid(key):
            return None
        return await self.get(key)

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))

    async def clear(self) -> int:
        """Drop every entry under this cache's prefix."""
        keys = [key async for key in self.client.scan_iter(match=f"{self.prefix}*")]
        if keys:
            await self.client.delete(*keys)
        return len(keys)
