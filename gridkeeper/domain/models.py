from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional

from gridkeeper.domain.errors import ValidationError

if TYPE_CHECKING:
    from gridkeeper.domain.categories import LeaderboardCategory

UNKNOWN_DISPLAY_NAME = "Unknown"
UNRESOLVED_DISPLAY_NAME = "Unknown User"


def _require_non_negative(**counters: int) -> None:
    for name, value in counters.items():
        if int(value) < 0:
            raise ValidationError(f"{name} must be non-negative (got {value})")


# -------------------------
# Per-user statistics
# -------------------------

@dataclass(frozen=True)
class WinLossStats:
    wins: int = 0
    losses: int = 0

    def __post_init__(self) -> None:
        _require_non_negative(wins=self.wins, losses=self.losses)

    @property
    def total(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> Optional[float]:
        """wins/total, or None when no games were played."""
        if self.total == 0:
            return None
        return self.wins / self.total


@dataclass(frozen=True)
class SlapStats:
    given: int = 0
    received: int = 0

    def __post_init__(self) -> None:
        _require_non_negative(given=self.given, received=self.received)


@dataclass(frozen=True)
class LevelingStats:
    level: int = 0
    xp: int = 0
    total_xp: int = 0

    def __post_init__(self) -> None:
        _require_non_negative(level=self.level, xp=self.xp, total_xp=self.total_xp)


@dataclass(frozen=True)
class UserStatRecord:
    """
    One user's statistics inside one community.

    Owned by the statistics store; leaderboard code only reads these.
    """

    community_id: str
    user_id: str
    coin_flip: WinLossStats = field(default_factory=WinLossStats)
    rps: WinLossStats = field(default_factory=WinLossStats)
    slap: SlapStats = field(default_factory=SlapStats)
    leveling: LevelingStats = field(default_factory=LevelingStats)


# -------------------------
# Identities
# -------------------------

@dataclass(frozen=True)
class DisplayIdentity:
    user_id: str
    username: str


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of one identity lookup: either an identity or an error description.
    """

    user_id: str
    identity: Optional[DisplayIdentity] = None
    error: Optional[str] = None

    def display_name_or(self, sentinel: str) -> str:
        if self.identity is None:
            return sentinel
        return self.identity.username


# -------------------------
# Leaderboard output
# -------------------------

@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    rank: int
    stats_snapshot: Mapping[str, int]
    display_name: str = UNKNOWN_DISPLAY_NAME

    def __post_init__(self) -> None:
        # Freeze a private copy so callers can't reach back into the cache.
        if not isinstance(self.stats_snapshot, MappingProxyType):
            object.__setattr__(self, "stats_snapshot", MappingProxyType(dict(self.stats_snapshot)))

    def with_display_name(self, display_name: str) -> "LeaderboardEntry":
        return LeaderboardEntry(
            user_id=self.user_id,
            rank=self.rank,
            stats_snapshot=self.stats_snapshot,
            display_name=display_name,
        )


# Entries returned by the service carry a resolved (or sentinel) display name.
DisplayableEntry = LeaderboardEntry


# (community_id, category)
CacheKey = tuple[str, "LeaderboardCategory"]


@dataclass(frozen=True)
class CacheEntry:
    key: CacheKey
    value: tuple[LeaderboardEntry, ...]
    computed_at: float
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at
