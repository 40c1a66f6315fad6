from __future__ import annotations

import logging

import discord

from gridkeeper.domain.errors import IdentityResolutionFailure
from gridkeeper.domain.models import DisplayIdentity

logger = logging.getLogger(__name__)


class DiscordIdentityResolver:
    """
    Resolves user ids to current Discord usernames.
    Uses the client's user cache first and only hits the API on a cache miss.
    """

    def __init__(self, client: discord.Client) -> None:
        self._client = client

    async def resolve(self, user_id: str) -> DisplayIdentity:
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            raise IdentityResolutionFailure(str(user_id), "not a Discord snowflake") from None

        user = self._client.get_user(uid)
        if user is None:
            try:
                user = await self._client.fetch_user(uid)
            except discord.NotFound:
                raise IdentityResolutionFailure(str(user_id), "user not found") from None
            except discord.HTTPException as e:
                raise IdentityResolutionFailure(str(user_id), f"HTTP {e.status}") from e

        return DisplayIdentity(user_id=str(user_id), username=user.name)
