from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from gridkeeper.config.settings import Settings

# Cache hits/misses/evictions and leaderboard computations log under here.
LEADERBOARD_LOGGER = "gridkeeper.services"


def _level(name: Optional[str], fallback: int) -> int:
    if not name:
        return fallback
    return getattr(logging, name.strip().upper(), fallback)


def setup_logging(settings: "Settings") -> None:
    """
    Configure application-wide logging.

    - Uses stdout
    - Avoids duplicate handlers
    - Leaderboard services get their own level (LEADERBOARD_LOG_LEVEL), so
      cache traffic can be traced at DEBUG without discord.py's debug output
    - Quiets chatty third-party loggers
    """

    level = _level(settings.log_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    logging.getLogger(LEADERBOARD_LOGGER).setLevel(_level(settings.leaderboard_log_level, level))

    # If handlers already exist (e.g., hot reload / tests), don't double-add
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)

    logging.getLogger("discord").setLevel(logging.INFO)
    logging.getLogger("discord.http").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
