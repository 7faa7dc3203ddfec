"""
Configuration management for Backend Buzz.

Loads and validates settings from environment variables and an optional
.env file. Exposes a single source of truth for all service configuration.
"""

from backend_buzz.config.settings import Settings, SwipePolicy, get_settings, reset_settings_cache  # noqa: F401

__all__ = ["Settings", "SwipePolicy", "get_settings", "reset_settings_cache"]
