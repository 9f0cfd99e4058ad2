"""TTL + capacity bounded cache of text embeddings, keyed by content hash."""

import hashlib
import logging
import time
from typing import Callable

import numpy as np

from models.schemas.similarity import CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_MAX_SIZE = 1000
EVICTION_FRACTION = 0.2


def cache_key(text: str) -> str:
    """SHA-256 of the (already normalized) text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class EmbeddingCache:
    """Content-addressed embedding store.

    Entries expire after ttl_seconds. When the cache is full, the oldest
    20% of entries (at least one) are evicted before inserting. A cache
    with max_size 0 never stores anything. Identical text always maps to
    the same key, so concurrent writers overwrite with identical content.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_size = max(0, max_size)
        self._clock = clock
        # key -> (embedding, inserted_at); dicts keep insertion order
        self._entries: dict[str, tuple[np.ndarray, float]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key, count=False) is not None

    def get(self, key: str, count: bool = True) -> np.ndarray | None:
        entry = self._entries.get(key)
        if entry is not None:
            embedding, inserted_at = entry
            if self._clock() - inserted_at < self.ttl_seconds:
                if count:
                    self.hits += 1
                return embedding
            del self._entries[key]
        if count:
            self.misses += 1
        return None

    def put(self, key: str, embedding: np.ndarray) -> None:
        if self.max_size == 0:
            return
        # Re-insert so the entry moves to the newest position
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_size:
            self._evict()
        self._entries[key] = (embedding, self._clock())

    def _evict(self) -> None:
        now = self._clock()
        expired = [k for k, (_, t) in self._entries.items() if now - t >= self.ttl_seconds]
        for k in expired:
            del self._entries[k]
        if len(self._entries) < self.max_size:
            return
        n_evict = max(1, int(self.max_size * EVICTION_FRACTION))
        oldest = sorted(self._entries, key=lambda k: self._entries[k][1])[:n_evict]
        for k in oldest:
            del self._entries[k]
        logger.debug("Embedding cache evicted %d entries", len(oldest))

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> CacheStats:
        lookups = self.hits + self.misses
        oldest_age = None
        if self._entries:
            oldest_age = round(self._clock() - min(t for _, t in self._entries.values()), 3)
        return CacheStats(
            size=len(self._entries),
            max_size=self.max_size,
            ttl_seconds=self.ttl_seconds,
            hits=self.hits,
            misses=self.misses,
            hit_rate=round(self.hits / lookups, 3) if lookups else 0.0,
            oldest_entry_age_seconds=oldest_age,
        )
