"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Ensure the gridkeeper package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gridkeeper.db.connection import Database  # noqa: E402
from gridkeeper.db.migrations import run_migrations  # noqa: E402
from gridkeeper.domain.models import (  # noqa: E402
    DisplayIdentity,
    LevelingStats,
    SlapStats,
    UserStatRecord,
    WinLossStats,
)
from gridkeeper.domain.errors import IdentityResolutionFailure  # noqa: E402


def make_record(
    user_id: str,
    *,
    community_id: str = "guild-1",
    coin: tuple[int, int] = (0, 0),
    rps: tuple[int, int] = (0, 0),
    slap: tuple[int, int] = (0, 0),
    level: int = 0,
    xp: int = 0,
    total_xp: int = 0,
) -> UserStatRecord:
    return UserStatRecord(
        community_id=community_id,
        user_id=user_id,
        coin_flip=WinLossStats(wins=coin[0], losses=coin[1]),
        rps=WinLossStats(wins=rps[0], losses=rps[1]),
        slap=SlapStats(given=slap[0], received=slap[1]),
        leveling=LevelingStats(level=level, xp=xp, total_xp=total_xp),
    )


class FakeStatsStore:
    """In-memory stand-in for StatsRepository that counts reads."""

    def __init__(self, records=None, *, fail_with: Exception | None = None, gate=None):
        self.records = list(records or [])
        self.fail_with = fail_with
        self.gate = gate
        self.calls: list[str] = []

    async def fetch_all_user_stats(self, community_id: str):
        self.calls.append(community_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return [r for r in self.records if r.community_id == community_id]


class FakeResolver:
    """Resolves every id to "user-<id>" unless told to fail or hang."""

    def __init__(self, *, failing=(), hanging=(), crashing=()):
        self.failing = set(failing)
        self.hanging = set(hanging)
        self.crashing = set(crashing)
        self.calls: list[str] = []

    async def resolve(self, user_id: str) -> DisplayIdentity:
        self.calls.append(user_id)
        if user_id in self.hanging:
            await asyncio.sleep(3600)
        if user_id in self.failing:
            raise IdentityResolutionFailure(user_id, "user not found")
        if user_id in self.crashing:
            raise RuntimeError("gateway hiccup")
        return DisplayIdentity(user_id=user_id, username=f"user-{user_id}")


@pytest.fixture
def record_factory():
    return make_record


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(tmp_path / "stats.sqlite")
    await database.connect()
    await run_migrations(database)
    try:
        yield database
    finally:
        await database.close()
