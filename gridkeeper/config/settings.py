from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer (got {raw!r})") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number (got {raw!r})") from None


@dataclass(frozen=True)
class Settings:
    """
    Global application settings loaded from environment variables.

    This class should remain dependency-free and side-effect free
    except for loading environment variables.
    """

    # Environment
    env: str
    log_level: str

    # Discord
    discord_token: str
    discord_guild_id: int | None
    command_prefix: str

    # Database
    db_path: Path

    # Leaderboards
    leaderboard_limit: int = 10
    leaderboard_cache_ttl_seconds: float = 60.0
    leaderboard_cache_max_keys: int = 1000
    identity_resolve_timeout_seconds: float = 3.0
    leaderboard_cooldown_seconds: float = 10.0
    leaderboard_log_level: str | None = None

    @classmethod
    def load(cls) -> "Settings":
        """
        Load settings from environment variables.
        """

        # Load .env for local development
        load_dotenv()

        env = os.getenv("ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        discord_token = os.getenv("DISCORD_TOKEN")
        if not discord_token:
            raise RuntimeError("DISCORD_TOKEN is required")

        discord_guild_id_raw = os.getenv("DISCORD_GUILD_ID")
        discord_guild_id = (
            _env_int("DISCORD_GUILD_ID", 0) if discord_guild_id_raw else None
        )

        command_prefix = os.getenv("COMMAND_PREFIX", "!") or "!"

        db_path = Path(os.getenv("DB_PATH", "./data/gridkeeper.sqlite"))

        # Ensure parent directory exists
        db_path.parent.mkdir(parents=True, exist_ok=True)

        return cls(
            env=env,
            log_level=log_level,
            discord_token=discord_token,
            discord_guild_id=discord_guild_id,
            command_prefix=command_prefix,
            db_path=db_path,
            leaderboard_limit=_env_int("LEADERBOARD_LIMIT", 10),
            leaderboard_cache_ttl_seconds=_env_float("LEADERBOARD_CACHE_TTL_SECONDS", 60.0),
            leaderboard_cache_max_keys=_env_int("LEADERBOARD_CACHE_MAX_KEYS", 1000),
            identity_resolve_timeout_seconds=_env_float("IDENTITY_RESOLVE_TIMEOUT_SECONDS", 3.0),
            leaderboard_cooldown_seconds=_env_float("LEADERBOARD_COOLDOWN_SECONDS", 10.0),
            leaderboard_log_level=os.getenv("LEADERBOARD_LOG_LEVEL") or None,
        )
