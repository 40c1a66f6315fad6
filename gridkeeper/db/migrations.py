from __future__ import annotations

import logging
from typing import Awaitable, Callable

from gridkeeper.db.connection import Database

logger = logging.getLogger(__name__)


# -----------------------------
# Migrations
# -----------------------------
async def _migration_v1(conn) -> None:
    """
    Per-community user statistics.
    """
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS user_stats (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            community_id TEXT NOT NULL,
            user_id TEXT NOT NULL,

            coinflip_wins INTEGER NOT NULL DEFAULT 0 CHECK (coinflip_wins >= 0),
            coinflip_losses INTEGER NOT NULL DEFAULT 0 CHECK (coinflip_losses >= 0),

            rps_wins INTEGER NOT NULL DEFAULT 0 CHECK (rps_wins >= 0),
            rps_losses INTEGER NOT NULL DEFAULT 0 CHECK (rps_losses >= 0),

            slaps_given INTEGER NOT NULL DEFAULT 0 CHECK (slaps_given >= 0),
            slaps_received INTEGER NOT NULL DEFAULT 0 CHECK (slaps_received >= 0),

            level INTEGER NOT NULL DEFAULT 0 CHECK (level >= 0),
            xp INTEGER NOT NULL DEFAULT 0 CHECK (xp >= 0),
            total_xp INTEGER NOT NULL DEFAULT 0 CHECK (total_xp >= 0),

            created_at TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now')),
            UNIQUE(community_id, user_id)
        );
        """
    )

    await conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_user_stats_community
        ON user_stats(community_id);
        """
    )


MIGRATIONS: list[tuple[int, Callable[..., Awaitable[None]]]] = [
    (1, _migration_v1),
]


async def run_migrations(db: Database) -> None:
    logger.info("Running DB migrations (if needed)")

    async with db.transaction() as conn:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                applied_at TEXT NOT NULL DEFAULT (datetime('now'))
            );
            """
        )

        cursor = await conn.execute("SELECT MAX(version) AS v FROM schema_migrations;")
        row = await cursor.fetchone()
        current_version = int(row["v"]) if row and row["v"] is not None else 0

        for version, fn in MIGRATIONS:
            if version <= current_version:
                continue

            logger.info("Applying migration v%s", version)
            await fn(conn)
            await conn.execute(
                "INSERT INTO schema_migrations (version) VALUES (?);",
                (version,),
            )

    logger.info("DB migrations complete")
