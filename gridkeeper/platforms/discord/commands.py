from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import discord
from discord import app_commands

from gridkeeper.domain.categories import LeaderboardCategory
from gridkeeper.domain.errors import InvalidCategory, StoreUnavailable
from gridkeeper.platforms.discord.leaderboard_embed import build_leaderboard_embed
from gridkeeper.services.cooldowns import Cooldowns
from gridkeeper.services.leaderboard_service import LeaderboardService

logger = logging.getLogger(__name__)

COOLDOWN_ACTION = "leaderboard"

GUILD_ONLY_MESSAGE = "This command can only be used in a server."
FAILURE_MESSAGE = "❌ An error occurred while fetching the leaderboard."


@dataclass
class LeaderboardReply:
    content: Optional[str] = None
    embed: Optional[discord.Embed] = None

    def as_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.content is not None:
            kwargs["content"] = self.content
        if self.embed is not None:
            kwargs["embed"] = self.embed
        return kwargs


def invalid_category_message() -> str:
    return f"❌ Invalid leaderboard type. Use: {', '.join(LeaderboardCategory.tokens())}"


def empty_board_message(category: LeaderboardCategory) -> str:
    return f"There's no one on the {category.value} leaderboard yet! Play some games to get started."


async def handle_leaderboard_request(
    *,
    service: LeaderboardService,
    cooldowns: Optional[Cooldowns],
    guild: Any,
    user_id: int | str,
    token: Optional[str],
    limit: int = 10,
    cooldown_seconds: float = 10.0,
) -> LeaderboardReply:
    """
    Shared by the slash command and the text command.
    `guild` is anything with id/name/icon (None for DMs).
    """
    if guild is None:
        return LeaderboardReply(content=GUILD_ONLY_MESSAGE)

    try:
        category = LeaderboardCategory.parse(token)
    except InvalidCategory:
        return LeaderboardReply(content=invalid_category_message())

    if cooldowns is not None:
        allowed, retry_after = cooldowns.try_acquire(
            action=COOLDOWN_ACTION,
            user_id=user_id,
            location_id=guild.id,
            cooldown_seconds=cooldown_seconds,
        )
        if not allowed:
            return LeaderboardReply(content=f"⏳ Please wait **{retry_after}s** before checking the leaderboard again.")

    try:
        entries = await service.get_leaderboard(str(guild.id), category, limit)
    except StoreUnavailable as e:
        logger.error("Leaderboard store unavailable (guild=%s category=%s): %s", guild.id, category.value, e)
        return LeaderboardReply(content=FAILURE_MESSAGE)
    except Exception:
        logger.exception("Error building %s leaderboard for guild=%s", category.value, guild.id)
        return LeaderboardReply(content=FAILURE_MESSAGE)

    if not entries:
        return LeaderboardReply(content=empty_board_message(category))

    icon = getattr(guild, "icon", None)
    embed = build_leaderboard_embed(
        category=category,
        entries=entries,
        community_name=str(guild.name),
        icon_url=str(icon.url) if icon else None,
    )
    return LeaderboardReply(embed=embed)


def _category_choices() -> list[app_commands.Choice[str]]:
    labels = {
        LeaderboardCategory.COINFLIP: "Coin Flip",
        LeaderboardCategory.LEVEL: "Level",
        LeaderboardCategory.RPS: "Rock Paper Scissors",
        LeaderboardCategory.SLAP: "Slap",
    }
    return [app_commands.Choice(name=labels[c], value=c.value) for c in LeaderboardCategory]


async def setup(bot: discord.Client) -> None:
    services: dict[str, Any] = getattr(bot, "services", {})
    settings = getattr(bot, "settings", None)

    service = services.get("leaderboard")
    if service is None:
        logger.warning("leaderboard service not found; /leaderboard not registered")
        return

    limit = int(getattr(settings, "leaderboard_limit", 10))
    cooldown_seconds = float(getattr(settings, "leaderboard_cooldown_seconds", 10.0))

    @app_commands.command(name="leaderboard", description="Show this server's game leaderboards")
    @app_commands.describe(category="Which leaderboard to show (default: coin flip)")
    @app_commands.choices(category=_category_choices())
    @app_commands.guild_only()
    async def leaderboard(
        interaction: discord.Interaction,
        category: Optional[app_commands.Choice[str]] = None,
    ) -> None:
        # Identity lookups can outlast the 3s interaction window.
        await interaction.response.defer(thinking=True)

        reply = await handle_leaderboard_request(
            service=service,
            cooldowns=services.get("cooldowns"),
            guild=interaction.guild,
            user_id=interaction.user.id,
            token=category.value if category else None,
            limit=limit,
            cooldown_seconds=cooldown_seconds,
        )
        await interaction.followup.send(**reply.as_kwargs())

    existing = {c.name for c in bot.tree.get_commands()}
    if "leaderboard" not in existing:
        bot.tree.add_command(leaderboard)

    logger.info(
        "Discord commands registered: %s",
        " | ".join(c.name for c in bot.tree.get_commands()) or "(none)",
    )
