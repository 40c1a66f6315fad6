from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

import discord

from gridkeeper.domain.categories import LeaderboardCategory
from gridkeeper.domain.models import LeaderboardEntry
from gridkeeper.utils.text import format_count, format_win_rate

CATEGORY_COLORS: dict[LeaderboardCategory, int] = {
    LeaderboardCategory.COINFLIP: 0xF1C40F,  # gold
    LeaderboardCategory.LEVEL: 0x00FF00,  # green
    LeaderboardCategory.RPS: 0x3498DB,  # blue
    LeaderboardCategory.SLAP: 0xFF6B6B,  # red
}

CATEGORY_TITLES: dict[LeaderboardCategory, str] = {
    LeaderboardCategory.COINFLIP: "Coin Flip Leaderboard",
    LeaderboardCategory.LEVEL: "Level Leaderboard",
    LeaderboardCategory.RPS: "Rock Paper Scissors Leaderboard",
    LeaderboardCategory.SLAP: "Slap Leaderboard",
}

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}

FOOTER_HINT = "Use /leaderboard <type> to view different leaderboards"


def rank_marker(rank: int) -> str:
    return MEDALS.get(rank, f"**{rank}.**")


def stats_line(category: LeaderboardCategory, snapshot: Mapping[str, int]) -> str:
    if category in (LeaderboardCategory.COINFLIP, LeaderboardCategory.RPS):
        wins = snapshot["wins"]
        losses = snapshot["losses"]
        win_rate = format_win_rate(wins, snapshot["total"])
        return f"Wins: `{wins}` | Losses: `{losses}` | Win Rate: `{win_rate}%`"

    if category is LeaderboardCategory.LEVEL:
        return (
            f"Level: `{snapshot['level']}` | XP: `{snapshot['xp']}` "
            f"| Total XP: `{format_count(snapshot['total_xp'])}`"
        )

    return f"Slaps Given: `{snapshot['given']}` | Slaps Received: `{snapshot['received']}`"


def build_leaderboard_embed(
    *,
    category: LeaderboardCategory,
    entries: Sequence[LeaderboardEntry],
    community_name: str,
    icon_url: Optional[str] = None,
) -> discord.Embed:
    embed = discord.Embed(
        title=f"🏆 {CATEGORY_TITLES[category]} - {community_name}",
        color=CATEGORY_COLORS[category],
        timestamp=datetime.now(timezone.utc),
    )
    if icon_url:
        embed.set_thumbnail(url=icon_url)

    blocks: list[str] = []
    for entry in entries:
        blocks.append(
            f"{rank_marker(entry.rank)} **{entry.display_name}**\n"
            f"> {stats_line(category, entry.stats_snapshot)}"
        )

    embed.description = "\n\n".join(blocks)
    embed.set_footer(text=FOOTER_HINT)
    return embed
