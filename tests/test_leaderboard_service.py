"""Tests for gridkeeper.services.leaderboard_service: orchestration and name resolution."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeResolver, FakeStatsStore, make_record
from gridkeeper.domain.categories import LeaderboardCategory
from gridkeeper.domain.errors import InvalidCategory, StoreUnavailable, ValidationError
from gridkeeper.domain.models import UNRESOLVED_DISPLAY_NAME
from gridkeeper.services.leaderboard_cache import LeaderboardCache
from gridkeeper.services.leaderboard_service import LeaderboardService

COIN = LeaderboardCategory.COINFLIP


def _records():
    return [
        make_record("A", coin=(10, 2)),
        make_record("B", coin=(10, 5)),
        make_record("C", coin=(3, 1)),
        make_record("D"),
        make_record("E", community_id="guild-2", coin=(50, 0)),
    ]


def _service(store, resolver=None, *, timeout=1.0, ttl=60.0):
    return LeaderboardService(
        stats_repo=store,
        identity_resolver=resolver or FakeResolver(),
        cache=LeaderboardCache(ttl_seconds=ttl, max_keys=100),
        resolve_timeout_seconds=timeout,
    )


@pytest.mark.asyncio
async def test_returns_ranked_entries_with_names():
    service = _service(FakeStatsStore(_records()))

    board = await service.get_leaderboard("guild-1", COIN, 10)

    assert [(e.rank, e.user_id, e.display_name) for e in board] == [
        (1, "A", "user-A"),
        (2, "B", "user-B"),
        (3, "C", "user-C"),
    ]
    assert board[0].stats_snapshot["losses"] == 2


@pytest.mark.asyncio
async def test_empty_population_returns_empty_list():
    resolver = FakeResolver()
    service = _service(FakeStatsStore([make_record("idle")]), resolver)

    assert await service.get_leaderboard("guild-1", LeaderboardCategory.SLAP, 10) == []
    assert resolver.calls == []


@pytest.mark.asyncio
async def test_unknown_category_fails_before_touching_store():
    store = FakeStatsStore(_records())
    service = _service(store)

    with pytest.raises(InvalidCategory):
        await service.get_leaderboard("guild-1", "coinflip", 10)  # type: ignore[arg-type]
    assert store.calls == []


@pytest.mark.asyncio
async def test_one_failed_lookup_only_affects_its_entry():
    service = _service(FakeStatsStore(_records()), FakeResolver(failing={"B"}))

    board = await service.get_leaderboard("guild-1", COIN, 10)

    assert len(board) == 3
    names = [e.display_name for e in board]
    assert names.count(UNRESOLVED_DISPLAY_NAME) == 1
    assert names == ["user-A", UNRESOLVED_DISPLAY_NAME, "user-C"]


@pytest.mark.asyncio
async def test_unexpected_resolver_error_falls_back_to_sentinel():
    service = _service(FakeStatsStore(_records()), FakeResolver(crashing={"A"}))

    board = await service.get_leaderboard("guild-1", COIN, 10)
    assert [e.display_name for e in board] == [UNRESOLVED_DISPLAY_NAME, "user-B", "user-C"]


@pytest.mark.asyncio
async def test_hanging_lookup_times_out_without_stalling_batch():
    service = _service(FakeStatsStore(_records()), FakeResolver(hanging={"C"}), timeout=0.05)

    board = await asyncio.wait_for(service.get_leaderboard("guild-1", COIN, 10), timeout=2)

    assert [e.user_id for e in board] == ["A", "B", "C"]
    assert board[2].display_name == UNRESOLVED_DISPLAY_NAME


@pytest.mark.asyncio
async def test_store_failure_propagates_and_is_retried():
    store = FakeStatsStore(_records(), fail_with=StoreUnavailable("db locked"))
    service = _service(store)

    with pytest.raises(StoreUnavailable):
        await service.get_leaderboard("guild-1", COIN, 10)

    store.fail_with = None
    board = await service.get_leaderboard("guild-1", COIN, 10)

    assert len(store.calls) == 2
    assert [e.user_id for e in board] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_repeat_calls_within_ttl_hit_store_once_and_match():
    store = FakeStatsStore(_records())
    service = _service(store)

    first = await service.get_leaderboard("guild-1", COIN, 10)
    second = await service.get_leaderboard("guild-1", COIN, 10)

    assert len(store.calls) == 1
    assert first == second


@pytest.mark.asyncio
async def test_concurrent_requests_read_store_once():
    gate = asyncio.Event()
    store = FakeStatsStore(_records(), gate=gate)
    service = _service(store)

    calls = [asyncio.create_task(service.get_leaderboard("guild-1", COIN, 10)) for _ in range(10)]
    await asyncio.sleep(0)
    gate.set()
    boards = await asyncio.gather(*calls)

    assert store.calls == ["guild-1"]
    assert all([e.user_id for e in b] == ["A", "B", "C"] for b in boards)


@pytest.mark.asyncio
async def test_concurrent_requests_with_different_limits_read_store_once():
    gate = asyncio.Event()
    store = FakeStatsStore(_records(), gate=gate)
    service = _service(store)

    limits = [1, 10, 2, 10]
    calls = [asyncio.create_task(service.get_leaderboard("guild-1", COIN, n)) for n in limits]
    await asyncio.sleep(0)
    gate.set()
    boards = await asyncio.gather(*calls)

    assert store.calls == ["guild-1"]
    assert [[e.user_id for e in b] for b in boards] == [
        ["A"],
        ["A", "B", "C"],
        ["A", "B"],
        ["A", "B", "C"],
    ]


@pytest.mark.asyncio
async def test_larger_limit_after_smaller_one_uses_cached_board():
    store = FakeStatsStore(_records())
    service = _service(store)

    top1 = await service.get_leaderboard("guild-1", COIN, 1)
    top10 = await service.get_leaderboard("guild-1", COIN, 10)

    assert [e.user_id for e in top1] == ["A"]
    assert [e.user_id for e in top10] == ["A", "B", "C"]
    assert len(store.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", [0, -1, 2.5, True])
async def test_bad_limit_rejected_with_warm_cache(bad):
    store = FakeStatsStore(_records())
    resolver = FakeResolver()
    service = _service(store, resolver)
    await service.get_leaderboard("guild-1", COIN, 10)
    resolver.calls.clear()

    with pytest.raises(ValidationError):
        await service.get_leaderboard("guild-1", COIN, bad)
    assert len(store.calls) == 1
    assert resolver.calls == []


@pytest.mark.asyncio
async def test_bad_limit_rejected_with_cold_cache():
    store = FakeStatsStore(_records())
    service = _service(store)

    with pytest.raises(ValidationError):
        await service.get_leaderboard("guild-1", COIN, -1)
    assert store.calls == []


@pytest.mark.asyncio
async def test_resolved_names_do_not_leak_into_cache():
    store = FakeStatsStore(_records())
    resolver = FakeResolver(failing={"A"})
    service = _service(store, resolver)

    await service.get_leaderboard("guild-1", COIN, 10)
    resolver.failing.clear()
    board = await service.get_leaderboard("guild-1", COIN, 10)

    assert board[0].display_name == "user-A"


@pytest.mark.asyncio
async def test_communities_are_isolated():
    service = _service(FakeStatsStore(_records()))

    board = await service.get_leaderboard("guild-2", COIN, 10)
    assert [e.user_id for e in board] == ["E"]


@pytest.mark.asyncio
async def test_invalidate_forces_recompute():
    store = FakeStatsStore(_records())
    service = _service(store)

    await service.get_leaderboard("guild-1", COIN, 10)
    assert service.invalidate("guild-1") == 1
    await service.get_leaderboard("guild-1", COIN, 10)

    assert len(store.calls) == 2
