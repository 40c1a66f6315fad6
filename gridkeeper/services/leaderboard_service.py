from __future__ import annotations

import asyncio
import logging
from typing import Optional

from gridkeeper.domain.categories import LeaderboardCategory
from gridkeeper.domain.errors import InvalidCategory
from gridkeeper.domain.models import (
    UNRESOLVED_DISPLAY_NAME,
    DisplayableEntry,
    LeaderboardEntry,
    Resolution,
)
from gridkeeper.services.base import IdentityResolver, StatsStore
from gridkeeper.services.leaderboard_cache import LeaderboardCache
from gridkeeper.services.ranking import check_limit, rank

logger = logging.getLogger(__name__)


class LeaderboardService:
    """
    High-level leaderboard operations.

    Ranked boards come from the cache (computed from the stats store on a miss);
    display names are resolved fresh on every call, one lookup per entry, all
    in parallel. A failed lookup only affects its own entry.
    """

    def __init__(
        self,
        *,
        stats_repo: StatsStore,
        identity_resolver: IdentityResolver,
        cache: LeaderboardCache,
        resolve_timeout_seconds: float = 3.0,
    ) -> None:
        self._stats_repo = stats_repo
        self._identity_resolver = identity_resolver
        self._cache = cache
        self._resolve_timeout = float(resolve_timeout_seconds)

    async def get_leaderboard(
        self,
        community_id: str,
        category: LeaderboardCategory,
        limit: int = 10,
    ) -> list[DisplayableEntry]:
        """
        Returns the top `limit` entries in rank order, display names filled in.
        An empty list means nobody qualifies yet. StoreUnavailable propagates.
        A bad category or limit raises before the cache or store is touched.
        """
        if not isinstance(category, LeaderboardCategory):
            raise InvalidCategory(f"Unknown leaderboard category: {category!r}")
        check_limit(limit)

        community_id = str(community_id)

        async def compute() -> tuple[LeaderboardEntry, ...]:
            records = await self._stats_repo.fetch_all_user_stats(community_id)
            # Whole board; the cache slices it per caller.
            ranked = rank(records, category, max(len(records), 1))
            logger.info(
                "Computed %s leaderboard for community=%s (%s records, %s ranked)",
                category.value,
                community_id,
                len(records),
                len(ranked),
            )
            return ranked

        entries = await self._cache.get_or_compute(community_id, category, limit, compute)
        if not entries:
            return []

        resolutions = await asyncio.gather(*(self._resolve(e.user_id) for e in entries))

        return [
            entry.with_display_name(resolution.display_name_or(UNRESOLVED_DISPLAY_NAME))
            for entry, resolution in zip(entries, resolutions)
        ]

    def invalidate(self, community_id: str, category: Optional[LeaderboardCategory] = None) -> int:
        return self._cache.invalidate(str(community_id), category)

    async def _resolve(self, user_id: str) -> Resolution:
        try:
            identity = await asyncio.wait_for(
                self._identity_resolver.resolve(user_id),
                timeout=self._resolve_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Identity lookup timed out after %.1fs: user=%s", self._resolve_timeout, user_id)
            return Resolution(user_id=user_id, error="timeout")
        except Exception as e:
            logger.warning("Identity lookup failed: user=%s error=%s", user_id, e)
            return Resolution(user_id=user_id, error=str(e) or type(e).__name__)

        return Resolution(user_id=user_id, identity=identity)
