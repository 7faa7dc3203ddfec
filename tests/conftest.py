"""
Pytest fixtures for Backend Buzz tests. Each test gets its own in-memory store.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def backend():
    """MemoryBackend; `writes` counts full-document saves."""
    from backend_buzz.database import MemoryBackend

    return MemoryBackend()


@pytest.fixture
def db(backend):
    from backend_buzz.database import Database

    database = Database(backend)
    database.load()
    return database


@pytest.fixture
def settings():
    from backend_buzz.config import Settings

    return Settings(store_backend="memory")


@pytest.fixture
def member(db):
    """
    Factory for a discoverable user: verified, with a completed profile.

        alice = member("female", looking_for="male", name="Alice")
    """
    from backend_buzz.services import identity, profiles

    def _make(gender, looking_for="both", name=None, verified=True, with_profile=True, profile_gender=None):
        user = identity.create_user(
            db,
            verification_type=identity.verification_type_for(gender),
            first_name=name or gender.title(),
            gender=gender,
            verification_status="verified" if verified else "pending",
        )
        if with_profile:
            profiles.create_profile(
                db,
                user.id,
                {
                    "name": name or gender.title(),
                    "age": 27,
                    "gender": profile_gender or gender,
                    "looking_for": looking_for,
                    "photos": [f"https://img.example/{user.id}.jpg"],
                },
            )
        return identity.get_user_by_id(db, user.id)

    return _make


@pytest.fixture
def client(db, settings):
    """FastAPI TestClient wired to the test store and settings via dependency overrides."""
    from fastapi.testclient import TestClient

    from backend_buzz.api_server.dependencies import get_app_settings, get_db
    from backend_buzz.api_server.server import app

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_app_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
