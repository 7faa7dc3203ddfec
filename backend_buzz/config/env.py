"""
Environment variable loading for Backend Buzz.

- Loads .env from project root when available.
- Small typed readers used by settings.py.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is backend_buzz/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_buzz_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env vars."""
    from dotenv import load_dotenv

    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str) -> str:
    """Return a stripped env value, or default when unset or blank."""
    return (os.getenv(name) or "").strip() or default


def env_int(name: str, default: int) -> int:
    """Return an int env value. Raises ValueError on garbage."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return int(raw)


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return float(raw)
