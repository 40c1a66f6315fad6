from __future__ import annotations

from typing import Iterable

from gridkeeper.domain.categories import LeaderboardCategory
from gridkeeper.domain.errors import ValidationError
from gridkeeper.domain.models import LeaderboardEntry, UserStatRecord


def check_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError(f"limit must be a positive integer (got {limit!r})")
    return limit


def rank(
    records: Iterable[UserStatRecord],
    category: LeaderboardCategory,
    limit: int,
) -> tuple[LeaderboardEntry, ...]:
    """
    Top-`limit` entries for one category, highest sort key first.

    - duplicate user_ids: first occurrence wins
    - users with no activity in the category are left out
    - ties keep the input order (sorted() is stable, also with reverse=True)
    """
    check_limit(limit)

    seen: set[str] = set()
    qualifying: list[UserStatRecord] = []
    for record in records:
        if record.user_id in seen:
            continue
        seen.add(record.user_id)
        if category.is_active(record):
            qualifying.append(record)

    ordered = sorted(qualifying, key=category.sort_key, reverse=True)[:limit]

    return tuple(
        LeaderboardEntry(
            user_id=record.user_id,
            rank=position,
            stats_snapshot=category.snapshot(record),
        )
        for position, record in enumerate(ordered, start=1)
    )
