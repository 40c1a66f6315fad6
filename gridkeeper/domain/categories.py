from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional

from gridkeeper.domain.errors import InvalidCategory
from gridkeeper.domain.models import UserStatRecord
from gridkeeper.utils.text import normalize_token


class LeaderboardCategory(str, Enum):
    """
    The four leaderboard types. Each member knows how to pull its sort key
    and its stats payload out of a UserStatRecord.
    """

    COINFLIP = "coinflip"
    LEVEL = "level"
    RPS = "rps"
    SLAP = "slap"

    @classmethod
    def default(cls) -> "LeaderboardCategory":
        return cls.COINFLIP

    @classmethod
    def tokens(cls) -> list[str]:
        return [c.value for c in cls]

    @classmethod
    def parse(cls, token: Optional[str]) -> "LeaderboardCategory":
        """
        Case-insensitive lookup; empty/None means the default board.
        """
        normalized = normalize_token(token or "")
        if not normalized:
            return cls.default()
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidCategory(
                f"Invalid leaderboard type {token!r}. Use: {', '.join(cls.tokens())}"
            ) from None

    def sort_key(self, record: UserStatRecord) -> int:
        return _EXTRACTORS[self].sort_key(record)

    def snapshot(self, record: UserStatRecord) -> dict[str, int]:
        return _EXTRACTORS[self].snapshot(record)

    def is_active(self, record: UserStatRecord) -> bool:
        """False when the primary key and every secondary stat are zero."""
        return any(v != 0 for v in self.snapshot(record).values())


@dataclass(frozen=True)
class _Extractor:
    sort_key: Callable[[UserStatRecord], int]
    snapshot: Callable[[UserStatRecord], dict[str, int]]


def _win_loss_snapshot(wins: int, losses: int) -> dict[str, int]:
    return {"wins": wins, "losses": losses, "total": wins + losses}


_EXTRACTORS: Mapping[LeaderboardCategory, _Extractor] = {
    LeaderboardCategory.COINFLIP: _Extractor(
        sort_key=lambda r: r.coin_flip.wins,
        snapshot=lambda r: _win_loss_snapshot(r.coin_flip.wins, r.coin_flip.losses),
    ),
    LeaderboardCategory.LEVEL: _Extractor(
        sort_key=lambda r: r.leveling.total_xp,
        snapshot=lambda r: {
            "level": r.leveling.level,
            "xp": r.leveling.xp,
            "total_xp": r.leveling.total_xp,
        },
    ),
    LeaderboardCategory.RPS: _Extractor(
        sort_key=lambda r: r.rps.wins,
        snapshot=lambda r: _win_loss_snapshot(r.rps.wins, r.rps.losses),
    ),
    LeaderboardCategory.SLAP: _Extractor(
        sort_key=lambda r: r.slap.given,
        snapshot=lambda r: {"given": r.slap.given, "received": r.slap.received},
    ),
}
