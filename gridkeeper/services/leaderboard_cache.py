from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Optional

from gridkeeper.domain.categories import LeaderboardCategory
from gridkeeper.domain.errors import ValidationError
from gridkeeper.domain.models import CacheEntry, CacheKey, LeaderboardEntry
from gridkeeper.services.ranking import check_limit

logger = logging.getLogger(__name__)

ComputeFn = Callable[[], Awaitable[tuple[LeaderboardEntry, ...]]]


class LeaderboardCache:
    """
    In-memory TTL cache for ranked leaderboards, keyed by (community, category).

    Each entry holds the whole ranked board for its key; callers get it sliced
    to their own limit, so one computation serves every window size.

    - Lazy expiry: stale entries are dropped when they are next read
    - LRU eviction once more than max_keys boards are held
    - Single-flight: while a board is being computed, every other caller for
      that key awaits the same task instead of hitting the store again
    - Failed computations are never stored
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 60.0,
        max_keys: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValidationError("ttl_seconds must be positive")
        if max_keys < 1:
            raise ValidationError("max_keys must be at least 1")

        self._ttl = float(ttl_seconds)
        self._max_keys = int(max_keys)
        self._clock = clock

        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()
        self._inflight: dict[CacheKey, asyncio.Task] = {}

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    # -------------------------
    # Public API
    # -------------------------

    async def get_or_compute(
        self,
        community_id: str,
        category: LeaderboardCategory,
        limit: int,
        compute_fn: ComputeFn,
    ) -> tuple[LeaderboardEntry, ...]:
        """
        Top `limit` entries of the (community, category) board.

        compute_fn must return the full ranked board, not a top-N cut of it.
        """
        check_limit(limit)
        key: CacheKey = (str(community_id), category)

        cached = self._lookup(key)
        if cached is not None:
            self._hits += 1
            return cached[:limit]

        self._misses += 1

        task = self._inflight.get(key)
        if task is None:
            logger.debug("Leaderboard cache miss: community=%s category=%s", key[0], category.value)
            task = asyncio.ensure_future(self._compute_and_store(key, compute_fn))
            self._inflight[key] = task
        else:
            logger.debug(
                "Joining in-flight leaderboard computation: community=%s category=%s",
                key[0],
                category.value,
            )

        # shield: a cancelled caller must not cancel the computation others share
        entries = await asyncio.shield(task)
        return entries[:limit]

    def invalidate(self, community_id: str, category: Optional[LeaderboardCategory] = None) -> int:
        """
        Drop one board, or every board of a community when category is None.
        Returns how many entries were removed. In-flight computations are left alone.
        """
        community_id = str(community_id)
        if category is not None:
            return 1 if self._entries.pop((community_id, category), None) else 0

        doomed = [k for k in self._entries if k[0] == community_id]
        for k in doomed:
            self._entries.pop(k, None)
        return len(doomed)

    def stats(self) -> dict[str, int]:
        return {
            "size": len(self._entries),
            "inflight": len(self._inflight),
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    # -------------------------
    # Internals
    # -------------------------

    def _lookup(self, key: CacheKey) -> Optional[tuple[LeaderboardEntry, ...]]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if not entry.is_fresh(self._clock()):
            self._entries.pop(key, None)
            logger.debug("Leaderboard cache entry expired: community=%s category=%s", key[0], key[1].value)
            return None

        self._entries.move_to_end(key)
        return entry.value

    async def _compute_and_store(self, key: CacheKey, compute_fn: ComputeFn) -> tuple[LeaderboardEntry, ...]:
        try:
            entries = tuple(await compute_fn())
            now = self._clock()
            self._store(
                CacheEntry(
                    key=key,
                    value=entries,
                    computed_at=now,
                    expires_at=now + self._ttl,
                )
            )
            return entries
        finally:
            self._inflight.pop(key, None)

    def _store(self, entry: CacheEntry) -> None:
        self._entries.pop(entry.key, None)
        self._entries[entry.key] = entry

        while len(self._entries) > self._max_keys:
            evicted_key, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("Evicted leaderboard cache entry: community=%s category=%s", evicted_key[0], evicted_key[1].value)
