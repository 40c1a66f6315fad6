from __future__ import annotations

import logging
from typing import Any, Optional

import discord

from gridkeeper.platforms.discord.commands import handle_leaderboard_request

logger = logging.getLogger(__name__)

LEADERBOARD_ALIASES = frozenset({"leaderboard", "leaderboards", "top", "lb"})


def parse_text_command(content: str, prefix: str) -> Optional[tuple[str, list[str]]]:
    """
    "!LB level" -> ("lb", ["level"]); None when the message isn't a command.
    """
    if not prefix or not content.startswith(prefix):
        return None
    parts = content[len(prefix):].split()
    if not parts:
        return None
    return parts[0].lower(), parts[1:]


async def setup(bot: discord.Client) -> None:
    services: dict[str, Any] = getattr(bot, "services", {})
    settings = getattr(bot, "settings", None)
    prefix = getattr(settings, "command_prefix", "!")

    @bot.event
    async def on_message(message: discord.Message) -> None:
        # Ignore bots (including ourselves)
        if message.author.bot:
            return

        parsed = parse_text_command(message.content or "", prefix)
        if parsed is None:
            return

        name, args = parsed
        if name not in LEADERBOARD_ALIASES:
            return

        service = services.get("leaderboard")
        if service is None:
            return

        logger.debug(
            "Text leaderboard command: guild=%s author=%s args=%r",
            getattr(message.guild, "id", None),
            message.author.id,
            args,
        )

        reply = await handle_leaderboard_request(
            service=service,
            cooldowns=services.get("cooldowns"),
            guild=message.guild,
            user_id=message.author.id,
            token=args[0] if args else None,
            limit=int(getattr(settings, "leaderboard_limit", 10)),
            cooldown_seconds=float(getattr(settings, "leaderboard_cooldown_seconds", 10.0)),
        )
        try:
            await message.reply(**reply.as_kwargs())
        except discord.HTTPException:
            logger.exception("Failed to send leaderboard reply")
