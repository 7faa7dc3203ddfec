"""
Application settings and environment configuration.

Settings are read once from the environment (after loading .env) into a
frozen dataclass and cached. Invalid values raise ConfigError so a bad
deployment fails at startup, not on the first request.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from backend_buzz.config.env import env_float, env_int, env_str, load_buzz_env
from backend_buzz.core.exceptions import ConfigError

STORE_BACKENDS = ("json", "sqlite", "memory")
GENDER_PREFERENCES = ("male", "female", "both")

MIN_PBKDF2_ITERATIONS = 10_000


class SwipePolicy(str, Enum):
    """What recording a second decision for the same (actor, target) pair does."""

    SUPERSEDE = "supersede"
    REJECT = "reject"


@dataclass(frozen=True)
class Settings:
    """Typed settings for the store, services and API server."""

    store_backend: str = "json"
    data_file: Path = Path("data.json")
    sqlite_url: str = "sqlite:///buzz.db"
    discover_limit: int = 10
    default_looking_for: str = "female"
    swipe_policy: SwipePolicy = SwipePolicy.SUPERSEDE
    pbkdf2_iterations: int = MIN_PBKDF2_ITERATIONS
    face_confidence_threshold: float = 50.0
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigError(f"BUZZ_STORE_BACKEND must be one of {STORE_BACKENDS}, got {self.store_backend!r}")
        if self.discover_limit < 1:
            raise ConfigError("BUZZ_DISCOVER_LIMIT must be >= 1")
        if self.default_looking_for not in GENDER_PREFERENCES:
            raise ConfigError(f"BUZZ_DEFAULT_LOOKING_FOR must be one of {GENDER_PREFERENCES}")
        if self.pbkdf2_iterations < MIN_PBKDF2_ITERATIONS:
            raise ConfigError(f"BUZZ_PBKDF2_ITERATIONS must be >= {MIN_PBKDF2_ITERATIONS}")
        if not 0.0 <= self.face_confidence_threshold <= 100.0:
            raise ConfigError("BUZZ_FACE_CONFIDENCE_THRESHOLD must be within 0-100")


def _load_settings() -> Settings:
    load_buzz_env()
    try:
        policy_raw = env_str("BUZZ_SWIPE_POLICY", SwipePolicy.SUPERSEDE.value).lower()
        try:
            policy = SwipePolicy(policy_raw)
        except ValueError as e:
            raise ConfigError(f"BUZZ_SWIPE_POLICY must be 'supersede' or 'reject', got {policy_raw!r}") from e
        return Settings(
            store_backend=env_str("BUZZ_STORE_BACKEND", "json").lower(),
            data_file=Path(env_str("BUZZ_DATA_FILE", "data.json")),
            sqlite_url=env_str("BUZZ_SQLITE_URL", "sqlite:///buzz.db"),
            discover_limit=env_int("BUZZ_DISCOVER_LIMIT", 10),
            default_looking_for=env_str("BUZZ_DEFAULT_LOOKING_FOR", "female").lower(),
            swipe_policy=policy,
            pbkdf2_iterations=env_int("BUZZ_PBKDF2_ITERATIONS", MIN_PBKDF2_ITERATIONS),
            face_confidence_threshold=env_float("BUZZ_FACE_CONFIDENCE_THRESHOLD", 50.0),
            api_host=env_str("API_HOST", "0.0.0.0"),
            api_port=env_int("API_PORT", 8000),
            log_level=env_str("LOG_LEVEL", "INFO").upper(),
        )
    except ValueError as e:
        # int()/float() parse failures; ConfigError is not a ValueError
        raise ConfigError(f"Invalid numeric setting: {e}") from e


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Cached for the process lifetime; call reset_settings_cache() after changing env in tests.
    """
    return _load_settings()


def reset_settings_cache() -> None:
    """Drop cached settings. For tests only."""
    get_settings.cache_clear()
