"""
Structured logging for Backend Buzz.

JSON logs with timestamp, event_type and level. Use get_logger() in every module.
"""

from backend_buzz.buzz_logging.logger import bind_user, get_logger

__all__ = ["bind_user", "get_logger"]
