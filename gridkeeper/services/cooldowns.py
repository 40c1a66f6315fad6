from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class CooldownResult:
    allowed: bool
    retry_after_seconds: float


class Cooldowns:
    """
    In-memory command cooldowns (monotonic clock; reset on restart).

    key = (action, user_id, location_id) -> last accepted use
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._last: dict[tuple[str, str, str], float] = {}

    def check(
        self,
        *,
        action: str,
        user_id: str,
        location_id: str,
        cooldown_seconds: float,
    ) -> CooldownResult:
        now = self._clock()
        key = (action, user_id, location_id)
        last = self._last.get(key)

        if last is None or now - last >= cooldown_seconds:
            self._last[key] = now
            return CooldownResult(True, 0.0)

        return CooldownResult(False, cooldown_seconds - (now - last))

    def try_acquire(
        self,
        action: str,
        user_id: int | str,
        location_id: int | str,
        cooldown_seconds: float,
    ) -> tuple[bool, int]:
        """
        Returns (allowed, retry_after_seconds rounded up).
        """
        res = self.check(
            action=str(action),
            user_id=str(user_id),
            location_id=str(location_id),
            cooldown_seconds=float(cooldown_seconds),
        )
        retry = int(res.retry_after_seconds) + (1 if res.retry_after_seconds % 1 else 0)
        return bool(res.allowed), retry
