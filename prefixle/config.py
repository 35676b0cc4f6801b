"""
Configuration for the Prefixle puzzle core.
Values come from the environment (optionally a project-level .env file) and
fall back to the game's fixed defaults.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv, find_dotenv

logger = logging.getLogger(__name__)

# Load environment from a shared .env (prefer project root), without overriding existing env
_ENV_PATH = find_dotenv(usecwd=True)
if not _ENV_PATH:
    _ENV_PATH = str(Path(__file__).resolve().parent.parent / ".env")
if _ENV_PATH and os.path.exists(_ENV_PATH):
    load_dotenv(_ENV_PATH, override=False)

DATAMUSE_API_URL = "https://api.datamuse.com/words"
API_DELAY_MS = 100
API_TIMEOUT_MS = 5000
API_MAX_RETRIES = 3
API_RETRY_BACKOFF_MS = 1000
LOOKUP_MAX_RESULTS = 1000

# Progress denominators used when the totals estimate cannot be fetched
FALLBACK_POSSIBLE_WORDS = 20
FALLBACK_MAX_POINTS = 60

STATE_KEY = "prefixle_state"
ACHIEVEMENT_MODES = ("absolute", "proportional")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default
    if value < 0:
        logger.warning(f"Ignoring negative {name}={value}; using {default}")
        return default
    return value


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in ('1', 'true', 'yes', 'on'):
        return True
    if value in ('0', 'false', 'no', 'off'):
        return False
    logger.warning(f"Ignoring unrecognised {name}={raw!r}; using {default}")
    return default


@dataclass(frozen=True)
class Settings:
    api_url: str = DATAMUSE_API_URL
    api_delay_ms: int = API_DELAY_MS
    api_timeout_ms: int = API_TIMEOUT_MS
    api_max_retries: int = API_MAX_RETRIES
    api_retry_backoff_ms: int = API_RETRY_BACKOFF_MS
    lookup_max_results: int = LOOKUP_MAX_RESULTS
    data_dir: str = "game_data"
    achievement_mode: str = "absolute"
    plural_check_before_lookup: bool = True

    @property
    def state_file(self) -> Path:
        return Path(self.data_dir) / "puzzle_state.json"

    @property
    def stats_file(self) -> Path:
        return Path(self.data_dir) / "stats.json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for anything unset or malformed."""
        mode = os.getenv("ACHIEVEMENT_MODE", "absolute").strip().lower()
        if mode not in ACHIEVEMENT_MODES:
            logger.warning(f"Unknown ACHIEVEMENT_MODE={mode!r}; using 'absolute'")
            mode = "absolute"
        return cls(
            api_url=os.getenv("DATAMUSE_API_URL", DATAMUSE_API_URL),
            api_delay_ms=_int_env("API_DELAY_MS", API_DELAY_MS),
            api_timeout_ms=_int_env("API_TIMEOUT_MS", API_TIMEOUT_MS),
            api_max_retries=_int_env("API_MAX_RETRIES", API_MAX_RETRIES),
            api_retry_backoff_ms=_int_env("API_RETRY_BACKOFF_MS", API_RETRY_BACKOFF_MS),
            lookup_max_results=_int_env("LOOKUP_MAX_RESULTS", LOOKUP_MAX_RESULTS),
            data_dir=os.getenv("PREFIXLE_DATA_DIR", "game_data"),
            achievement_mode=mode,
            plural_check_before_lookup=_bool_env("PLURAL_CHECK_BEFORE_LOOKUP", True),
        )
