"""
Database abstraction layer: one document holding every entity collection.

JSON file by default; an embedded SQL row or pure memory via the same interface.
"""

from backend_buzz.database.database import (
    Database,
    DatabaseBackend,
    JSONFileBackend,
    MemoryBackend,
    SQLAlchemyDocumentBackend,
    get_database,
    reset_database_cache,
)
from backend_buzz.database.models import (
    Conversation,
    FaceVerification,
    Match,
    Message,
    Profile,
    SwipeAction,
    User,
    WalletVerification,
)

__all__ = [
    "Database",
    "DatabaseBackend",
    "JSONFileBackend",
    "MemoryBackend",
    "SQLAlchemyDocumentBackend",
    "get_database",
    "reset_database_cache",
    "Conversation",
    "FaceVerification",
    "Match",
    "Message",
    "Profile",
    "SwipeAction",
    "User",
    "WalletVerification",
]
