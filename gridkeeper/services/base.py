from __future__ import annotations

from typing import Protocol, Sequence

from gridkeeper.domain.models import DisplayIdentity, UserStatRecord


class StatsStore(Protocol):
    async def fetch_all_user_stats(self, community_id: str) -> Sequence[UserStatRecord]:
        """
        Every stat record of a community, in a stable order.
        Raises StoreUnavailable when the store can't be read.
        """
        ...


class IdentityResolver(Protocol):
    async def resolve(self, user_id: str) -> DisplayIdentity:
        """
        Current display identity of a user.
        Raises IdentityResolutionFailure when the user can't be looked up.
        """
        ...
