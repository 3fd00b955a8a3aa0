# notifier/services/text_repair/cache.py
"""
Process-wide memo of raw text -> repaired text.

One RepairCache instance is built at application startup and shared by
every request. Reads, writes and clear() are serialised by a single lock;
the repair itself runs outside the lock, so two requests racing on the same
new string may both compute it (harmless, repair is pure).

clear() swaps in a fresh store and bumps a generation counter. A value
computed before a clear is dropped instead of being written into the new
store, so a rule-table reset is never undone by an in-flight request.
"""

import logging
import threading
from collections.abc import Awaitable, Callable, MutableMapping

from cachetools import LRUCache

from notifier.services.text_repair.errors import CacheError

logger = logging.getLogger(__name__)

DEFAULT_MAXSIZE = 10_000


class RepairCache:
    """
    Memoizes repairs per exact input string.

    Args:
        maxsize: LRU bound on entries. 0 keeps every entry for the lifetime
            of the process.
    """

    def __init__(self, maxsize: int = DEFAULT_MAXSIZE):
        self.maxsize = maxsize
        self._lock = threading.Lock()
        self._store: MutableMapping[str, str] = self._new_store()
        self._generation = 0
        self.hits = 0
        self.misses = 0

    def _new_store(self) -> MutableMapping[str, str]:
        if self.maxsize > 0:
            return LRUCache(maxsize=self.maxsize)
        return {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, text: str) -> bool:
        with self._lock:
            return text in self._store

    def _lookup(self, text: str) -> tuple[str | None, int]:
        with self._lock:
            try:
                value = self._store.get(text)
            except Exception as e:
                raise CacheError(f"Repair cache lookup failed: {e}") from e
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
            return value, self._generation

    def _remember(self, text: str, value: str, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            try:
                self._store[text] = value
            except Exception as e:
                raise CacheError(f"Repair cache write failed: {e}") from e

    def get_or_compute(self, text: str, compute: Callable[[str], str]) -> str:
        """Return the cached repair of text, computing and storing it on a miss."""
        try:
            cached, generation = self._lookup(text)
        except CacheError:
            logger.warning("Repair cache unavailable, computing directly", exc_info=True)
            return compute(text)

        if cached is not None:
            return cached

        value = compute(text)
        self._store_quietly(text, value, generation)
        return value

    async def get_or_compute_async(self, text: str, compute: Callable[[str], Awaitable[str]]) -> str:
        """
        Async variant for strategies that suspend (remote enrichment).

        If the awaiting task is cancelled, nothing is stored.
        """
        try:
            cached, generation = self._lookup(text)
        except CacheError:
            logger.warning("Repair cache unavailable, computing directly", exc_info=True)
            return await compute(text)

        if cached is not None:
            return cached

        value = await compute(text)
        self._store_quietly(text, value, generation)
        return value

    def _store_quietly(self, text: str, value: str, generation: int) -> None:
        try:
            self._remember(text, value, generation)
        except CacheError:
            logger.warning("Repair cache write failed, result not cached", exc_info=True)

    def clear(self) -> None:
        """Drop every entry. Safe to call while lookups are in flight."""
        with self._lock:
            dropped = len(self._store)
            self._store = self._new_store()
            self._generation += 1
            self.hits = 0
            self.misses = 0
        logger.info(
            f"Repair cache cleared ({dropped} entries)",
            extra={"event": "repair_cache_cleared", "cache_size": dropped},
        )

    def stats(self) -> dict:
        with self._lock:
            return {
                "size": len(self._store),
                "maxsize": self.maxsize,
                "hits": self.hits,
                "misses": self.misses,
                "generation": self._generation,
            }
