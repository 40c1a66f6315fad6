from __future__ import annotations

import logging

from gridkeeper.db.connection import Database
from gridkeeper.domain.models import (
    LevelingStats,
    SlapStats,
    UserStatRecord,
    WinLossStats,
)

logger = logging.getLogger(__name__)


class StatsRepository:
    """
    Per-community user statistics (coin flips, RPS, slaps, leveling).

    Rows come back in insertion order so rankings built from them are
    deterministic.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # -------------------------
    # Fetching
    # -------------------------

    async def fetch_all_user_stats(self, community_id: str) -> list[UserStatRecord]:
        rows = await self._db.fetchall(
            """
            SELECT
                community_id, user_id,
                coinflip_wins, coinflip_losses,
                rps_wins, rps_losses,
                slaps_given, slaps_received,
                level, xp, total_xp
            FROM user_stats
            WHERE community_id = ?
            ORDER BY id ASC
            """,
            (str(community_id),),
        )
        return [self._row_to_record(r) for r in rows]

    # -------------------------
    # Writing (seeding / tests; gameplay owns the real writes)
    # -------------------------

    async def upsert_user_stats(self, record: UserStatRecord) -> None:
        await self._db.execute(
            """
            INSERT INTO user_stats (
                community_id, user_id,
                coinflip_wins, coinflip_losses,
                rps_wins, rps_losses,
                slaps_given, slaps_received,
                level, xp, total_xp
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(community_id, user_id) DO UPDATE SET
                coinflip_wins = excluded.coinflip_wins,
                coinflip_losses = excluded.coinflip_losses,
                rps_wins = excluded.rps_wins,
                rps_losses = excluded.rps_losses,
                slaps_given = excluded.slaps_given,
                slaps_received = excluded.slaps_received,
                level = excluded.level,
                xp = excluded.xp,
                total_xp = excluded.total_xp,
                updated_at = datetime('now')
            """,
            (
                str(record.community_id),
                str(record.user_id),
                record.coin_flip.wins,
                record.coin_flip.losses,
                record.rps.wins,
                record.rps.losses,
                record.slap.given,
                record.slap.received,
                record.leveling.level,
                record.leveling.xp,
                record.leveling.total_xp,
            ),
        )
        logger.debug("Upserted stats community=%s user=%s", record.community_id, record.user_id)

    # -------------------------
    # Mapping
    # -------------------------

    @staticmethod
    def _row_to_record(row) -> UserStatRecord:
        return UserStatRecord(
            community_id=str(row["community_id"]),
            user_id=str(row["user_id"]),
            coin_flip=WinLossStats(wins=int(row["coinflip_wins"]), losses=int(row["coinflip_losses"])),
            rps=WinLossStats(wins=int(row["rps_wins"]), losses=int(row["rps_losses"])),
            slap=SlapStats(given=int(row["slaps_given"]), received=int(row["slaps_received"])),
            leveling=LevelingStats(
                level=int(row["level"]),
                xp=int(row["xp"]),
                total_xp=int(row["total_xp"]),
            ),
        )
