from __future__ import annotations

import asyncio

from gridkeeper.config.settings import Settings
from gridkeeper.logging.setup import setup_logging

from gridkeeper.db.connection import Database
from gridkeeper.db.migrations import run_migrations
from gridkeeper.db.repo.stats_repo import StatsRepository

from gridkeeper.services.cooldowns import Cooldowns
from gridkeeper.services.leaderboard_cache import LeaderboardCache
from gridkeeper.services.leaderboard_service import LeaderboardService

from gridkeeper.platforms.discord.bot import build_discord_bot
from gridkeeper.platforms.discord.identity import DiscordIdentityResolver


async def main() -> None:
    settings = Settings.load()
    setup_logging(settings)

    # --- DB ---
    db = Database(settings.db_path)
    await db.connect()
    await run_migrations(db)

    # --- Repositories ---
    stats_repo = StatsRepository(db)

    # --- DI container (leaderboard service is added once the bot exists) ---
    services = {
        "db": db,
        "stats_repo": stats_repo,
        "cooldowns": Cooldowns(),
    }

    # --- Discord bot ---
    discord_bot = build_discord_bot(settings=settings, services=services)

    # --- Leaderboards ---
    leaderboard_cache = LeaderboardCache(
        ttl_seconds=settings.leaderboard_cache_ttl_seconds,
        max_keys=settings.leaderboard_cache_max_keys,
    )
    services["leaderboard_cache"] = leaderboard_cache
    services["leaderboard"] = LeaderboardService(
        stats_repo=stats_repo,
        identity_resolver=DiscordIdentityResolver(discord_bot),
        cache=leaderboard_cache,
        resolve_timeout_seconds=settings.identity_resolve_timeout_seconds,
    )

    try:
        await discord_bot.start(settings.discord_token)
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(main())
