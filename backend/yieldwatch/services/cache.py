"""
In-process market data cache
"""
import copy
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple
from loguru import logger

from yieldwatch.config import get_settings


CacheKey = Tuple[str, str, str]  # (type, country, horizon)


@dataclass(frozen=True)
class CacheEntry:
    """One stored resolution; superseded, never mutated."""
    key: CacheKey
    stored_at: float
    payload: Dict[str, Any]

    def age(self, now: float) -> float:
        return now - self.stored_at


class MarketCache:
    """
    Process-lifetime key -> (timestamp, payload) store.

    Freshness is judged at read time (``now - stored_at < ttl``); stale
    entries stay in place until the next write for the same key replaces
    them. The key space is (type, country, horizon), so the store never
    holds more than a few dozen entries and needs no eviction.
    """

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Optional[Callable[[], float]] = None):
        settings = get_settings()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.CACHE_TTL_MARKET
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self.lock = Lock()

    def _now(self) -> float:
        return self._clock() if self._clock else time.time()

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return the fresh entry for key, or None on miss/stale."""
        with self.lock:
            entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for {key}")
            return None
        if entry.age(self._now()) >= self.ttl_seconds:
            logger.debug(f"Cache stale for {key}")
            return None
        logger.debug(f"Cache hit for {key}")
        return CacheEntry(key=entry.key, stored_at=entry.stored_at, payload=copy.deepcopy(entry.payload))

    def put(self, key: CacheKey, payload: Dict[str, Any]) -> CacheEntry:
        """Store payload for key, replacing any previous entry."""
        entry = CacheEntry(key=key, stored_at=self._now(), payload=copy.deepcopy(payload))
        with self.lock:
            self._entries[key] = entry
        return entry

    def snapshot(self) -> List[Dict[str, Any]]:
        """Key and age of every entry, for health reporting."""
        now = self._now()
        with self.lock:
            entries = list(self._entries.values())
        return [
            {
                "type": e.key[0],
                "country": e.key[1],
                "horizon": e.key[2],
                "age_seconds": round(e.age(now), 1),
                "fresh": e.age(now) < self.ttl_seconds,
            }
            for e in sorted(entries, key=lambda e: e.key)
        ]

    def __len__(self) -> int:
        with self.lock:
            return len(self._entries)


# Singleton instance
_market_cache: Optional[MarketCache] = None


def get_market_cache() -> MarketCache:
    """Get singleton market cache instance."""
    global _market_cache
    if _market_cache is None:
        _market_cache = MarketCache()
    return _market_cache
