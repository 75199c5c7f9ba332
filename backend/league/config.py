"""
League configuration.

All tunables come from the environment (a local .env is loaded through
python-dotenv, same as the database URL). Nothing here is hard-coded into
the services: they receive a LeagueSettings instance or fall back to
get_settings().

Variables:
  - LEAGUE_POINTS_PER_WIN             points awarded per decided win (default 1)
  - LEAGUE_DEFAULT_ROUND_LENGTH_DAYS  play window of a round in days (default 15)
  - LEAGUE_MIN_PLAYERS                active players needed to build a fixture (default 2)
  - LEAGUE_MAX_GAMES_PER_SET          upper bound for a set's game count (default 7)
  - LEAGUE_TIMEZONE                   zone used to decide "today" for expiry
  - LEAGUE_CRON_SECRET                shared secret for the periodic trigger
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_POINTS_PER_WIN = 1
DEFAULT_ROUND_LENGTH_DAYS = 15
DEFAULT_MIN_PLAYERS = 2
DEFAULT_MAX_GAMES_PER_SET = 7
DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"


@dataclass(frozen=True)
class LeagueSettings:
    points_per_win: int = DEFAULT_POINTS_PER_WIN
    default_round_length_days: int = DEFAULT_ROUND_LENGTH_DAYS
    min_players: int = DEFAULT_MIN_PLAYERS
    max_games_per_set: int = DEFAULT_MAX_GAMES_PER_SET
    timezone: str = DEFAULT_TIMEZONE
    cron_secret: Optional[str] = None

    def __post_init__(self):
        if self.points_per_win < 0:
            raise ValueError(f"points_per_win must be >= 0, got {self.points_per_win}")
        if self.default_round_length_days < 1:
            raise ValueError(f"default_round_length_days must be >= 1, got {self.default_round_length_days}")
        if self.min_players < 2:
            raise ValueError(f"min_players must be >= 2, got {self.min_players}")
        if self.max_games_per_set < 1:
            raise ValueError(f"max_games_per_set must be >= 1, got {self.max_games_per_set}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def load_settings() -> LeagueSettings:
    """Build settings from the current environment."""
    return LeagueSettings(
        points_per_win=_env_int("LEAGUE_POINTS_PER_WIN", DEFAULT_POINTS_PER_WIN),
        default_round_length_days=_env_int("LEAGUE_DEFAULT_ROUND_LENGTH_DAYS", DEFAULT_ROUND_LENGTH_DAYS),
        min_players=_env_int("LEAGUE_MIN_PLAYERS", DEFAULT_MIN_PLAYERS),
        max_games_per_set=_env_int("LEAGUE_MAX_GAMES_PER_SET", DEFAULT_MAX_GAMES_PER_SET),
        timezone=os.getenv("LEAGUE_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE,
        cron_secret=os.getenv("LEAGUE_CRON_SECRET") or None,
    )


@lru_cache(maxsize=1)
def get_settings() -> LeagueSettings:
    """Cached settings; also used as a FastAPI dependency."""
    return load_settings()
