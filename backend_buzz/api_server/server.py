"""
FastAPI server for the dating web client.

Routers live under /api (auth, users, profiles, verification, discover,
matches, match-queue, conversations). The store is loaded once at startup;
every request shares the same Database instance and its lock.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI

from backend_buzz import __version__
from backend_buzz.api_server.dependencies import get_db
from backend_buzz.api_server.middleware import install_error_handlers, install_request_logging
from backend_buzz.api_server.routers import (
    auth,
    conversations,
    discover,
    matches,
    profiles,
    users,
    verification,
)
from backend_buzz.buzz_logging import get_logger
from backend_buzz.database import Database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the store before serving so the first request does not pay for it."""
    db = app.dependency_overrides.get(get_db, get_db)()
    db.load()
    logger.info("api_store_ready", backend=db.backend.describe())
    yield
    logger.info("api_shutdown")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Backend Buzz API",
        description="Backend-for-frontend for the dating web client: accounts, profiles, discovery, matches, chat.",
        version=__version__,
        lifespan=lifespan,
    )
    install_error_handlers(app)
    install_request_logging(app)

    for module in (auth, users, profiles, verification, discover, matches, conversations):
        app.include_router(module.router, prefix="/api")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness check: API is up."""
        return {"status": "ok"}

    @app.get("/debug/stats")
    def debug_stats(db: Database = Depends(get_db)) -> dict[str, Any]:
        """Collection sizes only; never entity contents."""
        return {"success": True, "stats": db.stats()}

    return app


app = create_app()
