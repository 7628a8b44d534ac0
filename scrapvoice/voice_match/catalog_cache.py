"""
Live Catalog Cache - Role-scoped catalog index with a time-to-live.

The only shared mutable state in the pipeline. Each role gets its own
(index, expires_at) entry so customer and buyer prices/points never mix.
An entry is replaced by assigning a fully built index, so readers never
see a half-built one.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .adapters import CatalogSource
from .catalog_loader import flatten_categories
from .errors import CatalogFetchError
from .index import CatalogIndex, build_index

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass
class _CacheEntry:
    index: CatalogIndex
    expires_at: float


class LiveCatalogCache:
    """
    Caches one CatalogIndex per role.

    Attributes:
        source: Where categories come from
        ttl_seconds: Lifetime of a cached index
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        source: CatalogSource,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Bumped by clear() (all roles) and invalidate() (one role); a fetch
        # that started under an older generation is not stored
        self._epoch = 0
        self._generations: dict[str, int] = {}

    def _live_entry(self, role: str) -> Optional[_CacheEntry]:
        entry = self._entries.get(role)
        if entry is not None and self.clock() < entry.expires_at:
            return entry
        return None

    def _generation(self, role: str) -> tuple[int, int]:
        return self._epoch, self._generations.get(role, 0)

    def _evict_expired(self):
        """Forget expired entries and idle locks so unused roles don't pile up."""
        now = self.clock()
        for role in [r for r, entry in self._entries.items() if now >= entry.expires_at]:
            del self._entries[role]
        for role in [r for r, lock in self._locks.items() if r not in self._entries and not lock.locked()]:
            del self._locks[role]

    def is_cached(self, role: str) -> bool:
        """Whether a non-expired index exists for the role."""
        return self._live_entry(role) is not None

    async def get(self, role: str) -> CatalogIndex:
        """
        Return the catalog index for a role, fetching it if missing or expired.

        A fetch that overlaps clear() or invalidate() for its role is
        returned to its caller but not cached.

        Raises:
            CatalogFetchError: If a fetch is needed and fails. Expired
                entries are never served as a fallback.
        """
        entry = self._live_entry(role)
        if entry is not None:
            return entry.index

        self._evict_expired()

        # Concurrent misses for the same role share one fetch
        lock = self._locks.setdefault(role, asyncio.Lock())
        async with lock:
            entry = self._live_entry(role)
            if entry is not None:
                return entry.index

            generation = self._generation(role)
            index = await self._refresh(role)
            if self._generation(role) != generation:
                logger.info(f"Catalog for role {role!r} was invalidated during fetch, not caching")
                return index

            self._entries[role] = _CacheEntry(index=index, expires_at=self.clock() + self.ttl_seconds)
            return index

    async def _refresh(self, role: str) -> CatalogIndex:
        try:
            categories = await self.source.fetch_categories(role)
        except CatalogFetchError:
            raise
        except Exception as e:
            raise CatalogFetchError(f"Failed to fetch catalog items: {e}") from e

        items = flatten_categories(categories)
        if not items:
            logger.warning(f"Catalog for role {role!r} has no items ({len(categories)} categories)")

        index = build_index(items, role=role)
        logger.info(f"Catalog index built for role {role!r}: {index.item_count} items "
                    f"from {len(categories)} categories")
        return index

    def invalidate(self, role: str):
        """Drop the cached index for one role."""
        self._entries.pop(role, None)
        self._generations[role] = self._generations.get(role, 0) + 1

    def clear(self):
        """Drop cached indexes for all roles."""
        self._entries.clear()
        self._generations.clear()
        self._locks = {role: lock for role, lock in self._locks.items() if lock.locked()}
        self._epoch += 1
        logger.info("Catalog cache cleared")
