"""
FastAPI dependencies: settings, the process-wide Database, the face analyzer.

Tests replace these through app.dependency_overrides.
"""

from __future__ import annotations

import functools

from backend_buzz.config import Settings, get_settings
from backend_buzz.database import Database, get_database
from backend_buzz.services.verification import FaceAnalyzer, SimulatedFaceAnalyzer


def get_app_settings() -> Settings:
    return get_settings()


def get_db() -> Database:
    """Dependency: one Database (and one store lock) shared by every request."""
    return get_database(get_settings())


@functools.lru_cache(maxsize=1)
def get_face_analyzer() -> FaceAnalyzer:
    return SimulatedFaceAnalyzer()
