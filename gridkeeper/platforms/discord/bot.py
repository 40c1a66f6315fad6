from __future__ import annotations

import logging
from typing import Any

import discord

from gridkeeper.config.settings import Settings
from gridkeeper.platforms.discord.commands import setup as setup_commands
from gridkeeper.platforms.discord.events import setup as setup_events

logger = logging.getLogger(__name__)


class GridkeeperDiscordBot(discord.Client):
    def __init__(self, *, settings: Settings, services: dict[str, Any]) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)

        self.settings = settings
        self.services = services
        self.tree = discord.app_commands.CommandTree(self)

    async def setup_hook(self) -> None:
        await setup_commands(self)
        await setup_events(self)

        guild_id = self.settings.discord_guild_id
        try:
            if guild_id:
                guild = discord.Object(id=int(guild_id))
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info("Synced %s app commands to guild %s", len(synced), guild_id)
            else:
                synced = await self.tree.sync()
                logger.info("Synced %s app commands globally", len(synced))
        except discord.HTTPException:
            logger.exception("Command sync failed")

    async def on_ready(self) -> None:
        logger.info("Discord bot ready: %s (id=%s)", self.user, self.user.id if self.user else "?")


def build_discord_bot(*, settings: Settings, services: dict[str, Any]) -> GridkeeperDiscordBot:
    return GridkeeperDiscordBot(settings=settings, services=services)
