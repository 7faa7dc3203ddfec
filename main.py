"""
Main entrypoint: FastAPI server via uvicorn.

Env: BUZZ_STORE_BACKEND, BUZZ_DATA_FILE, API_HOST, API_PORT, LOG_LEVEL, etc.
(see backend_buzz/config/settings.py). Loads .env from the project root.

Equivalent: uvicorn backend_buzz.api_server.app:app --host 0.0.0.0 --port 8000
"""

import sys

# Configure structured JSON logging before other imports that may log
from backend_buzz.buzz_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Validate settings, then run the API in the main thread."""
    from backend_buzz.config import get_settings
    from backend_buzz.core.exceptions import ConfigError

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("main_config_error", message=e.message)
        sys.exit(1)

    from backend_buzz.api_server.app import app
    import uvicorn

    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        store_backend=settings.store_backend,
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
