"""
Document store for users, profiles, verifications, swipes, matches, conversations and messages.

The whole state is one JSON-serializable document:
    {users, profiles, faceVerifications, walletVerifications, swipeActions,
     matches, conversations, messages, idCounter}
It is loaded lazily into memory, mutated in place and written back in full.
Backends only read and write the document; the JSON file backend is the default,
the SQLAlchemy backend keeps the same document in one row of an embedded database.

All mutations go through Database.transaction(): one process-wide lock around
load-mutate-save, a single write at the outermost exit, and an in-memory rollback
to the entry snapshot on any error so memory and storage never disagree.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from sqlalchemy import Column, Integer, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend_buzz.buzz_logging import get_logger
from backend_buzz.core.exceptions import StorageError
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

logger = get_logger(__name__)

# Document key -> (attribute on Database, entity class)
COLLECTIONS: dict[str, tuple[str, type]] = {
    "users": ("users", User),
    "profiles": ("profiles", Profile),
    "faceVerifications": ("face_verifications", FaceVerification),
    "walletVerifications": ("wallet_verifications", WalletVerification),
    "swipeActions": ("swipe_actions", SwipeAction),
    "matches": ("matches", Match),
    "conversations": ("conversations", Conversation),
    "messages": ("messages", Message),
}


def empty_document() -> dict[str, Any]:
    doc: dict[str, Any] = {key: [] for key in COLLECTIONS}
    doc["idCounter"] = 1
    return doc


# -----------------------------------------------------------------------------
# Abstract backend: swap implementation without touching services.
# -----------------------------------------------------------------------------


class DatabaseBackend(ABC):
    """Reads and writes the whole document; no partial updates."""

    @abstractmethod
    def read_document(self) -> dict[str, Any] | None:
        """Return the stored document, or None if nothing has been stored yet."""
        ...

    @abstractmethod
    def write_document(self, document: dict[str, Any]) -> None:
        """Replace the stored document."""
        ...

    def describe(self) -> str:
        return type(self).__name__


class MemoryBackend(DatabaseBackend):
    """Keeps a private deep copy; nothing survives the process. Used by tests."""

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self._document = copy.deepcopy(document) if document is not None else None
        self.writes = 0

    def read_document(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._document) if self._document is not None else None

    def write_document(self, document: dict[str, Any]) -> None:
        self._document = copy.deepcopy(document)
        self.writes += 1


class JSONFileBackend(DatabaseBackend):
    """Pretty-printed JSON file; writes go to a temp file that is then os.replace'd."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def describe(self) -> str:
        return f"json:{self._path}"

    def read_document(self) -> dict[str, Any] | None:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read data file {self._path}: {e}") from e

    def write_document(self, document: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self._path.parent), prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write data file {self._path}: {e}") from e


Base = declarative_base()


class StoredDocument(Base):
    """Single-row table holding the serialized document."""

    __tablename__ = "documents"

    id = Column(String(32), primary_key=True)
    body = Column(Text, nullable=False)
    updated_at = Column(Integer, nullable=False)  # Unix


class SQLAlchemyDocumentBackend(DatabaseBackend):
    """Embedded transactional store: the document is one row, replaced inside a session."""

    DOCUMENT_ID = "main"

    def __init__(self, url: str) -> None:
        self._url = url
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self._engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        Base.metadata.create_all(bind=self._engine)

    def describe(self) -> str:
        return f"sqlalchemy:{self._url.split('?')[0].split('//')[-1]}"

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def read_document(self) -> dict[str, Any] | None:
        try:
            with self._session_scope() as session:
                row = session.get(StoredDocument, self.DOCUMENT_ID)
                body = row.body if row else None
        except Exception as e:
            raise StorageError(f"Cannot read document: {e}") from e
        return json.loads(body) if body else None

    def write_document(self, document: dict[str, Any]) -> None:
        try:
            with self._session_scope() as session:
                session.merge(
                    StoredDocument(
                        id=self.DOCUMENT_ID,
                        body=json.dumps(document),
                        updated_at=int(time.time()),
                    )
                )
        except Exception as e:
            raise StorageError(f"Cannot write document: {e}") from e

    def dispose(self) -> None:
        self._engine.dispose()


# -----------------------------------------------------------------------------
# Database facade: in-memory mirror, id counter, transactions.
# -----------------------------------------------------------------------------


class Database:
    """
    In-memory mirror of the stored document.

    Services read the typed collections (users, profiles, ...) and mutate them
    only inside `with db.transaction():`. One instance per process; tests build
    their own over a MemoryBackend.
    """

    def __init__(self, backend: DatabaseBackend) -> None:
        self._backend = backend
        self._lock = threading.RLock()
        self._depth = 0
        self._loaded = False
        self.users: list[User] = []
        self.profiles: list[Profile] = []
        self.face_verifications: list[FaceVerification] = []
        self.wallet_verifications: list[WalletVerification] = []
        self.swipe_actions: list[SwipeAction] = []
        self.matches: list[Match] = []
        self.conversations: list[Conversation] = []
        self.messages: list[Message] = []
        self.id_counter = 1

    @property
    def backend(self) -> DatabaseBackend:
        return self._backend

    # --- Document <-> memory ---

    def _apply_document(self, document: dict[str, Any]) -> None:
        for key, (attr, cls) in COLLECTIONS.items():
            setattr(self, attr, [cls.from_dict(row) for row in document.get(key) or []])
        self.id_counter = int(document.get("idCounter") or 1)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            key: [row.to_dict() for row in getattr(self, attr)]
            for key, (attr, _) in COLLECTIONS.items()
        }
        doc["idCounter"] = self.id_counter
        return doc

    # --- Store contract ---

    def load(self) -> None:
        """Populate memory from the backend once; later calls are no-ops."""
        with self._lock:
            if self._loaded:
                return
            document = self._backend.read_document()
            if document is None:
                logger.info("store_initialized_empty", backend=self._backend.describe())
                document = empty_document()
            try:
                self._apply_document(document)
            except (TypeError, ValueError, AttributeError) as e:
                raise StorageError(f"Malformed document in {self._backend.describe()}: {e}") from e
            self._loaded = True
            logger.info(
                "store_loaded",
                backend=self._backend.describe(),
                users=len(self.users),
                profiles=len(self.profiles),
            )

    def reload(self) -> None:
        """Discard memory and read the backend again."""
        with self._lock:
            self._loaded = False
            self.load()

    def save(self) -> None:
        """Serialize the entire state and replace the stored document."""
        with self._lock:
            try:
                self._backend.write_document(self.to_document())
            except StorageError:
                logger.exception("store_save_failed", backend=self._backend.describe())
                raise
            logger.debug("store_saved", backend=self._backend.describe(), id_counter=self.id_counter)

    def next_id(self) -> int:
        """Return the shared counter and advance it. Ids are never reused."""
        with self._lock:
            self.load()
            value = self.id_counter
            self.id_counter += 1
            return value

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        """
        Exclusive load-mutate-save cycle.

        Nested calls join the outermost one. On error the in-memory state is
        restored to the snapshot taken at entry and nothing is written.
        """
        with self._lock:
            self.load()
            outermost = self._depth == 0
            snapshot = self.to_document() if outermost else None
            self._depth += 1
            try:
                yield self
                if outermost:
                    self.save()
            except BaseException:
                if outermost and snapshot is not None:
                    self._apply_document(snapshot)
                    logger.warning("store_transaction_rolled_back")
                raise
            finally:
                self._depth -= 1

    @contextmanager
    def read(self) -> Iterator[Database]:
        """Consistent read under the store lock; never writes."""
        with self._lock:
            self.load()
            yield self

    def stats(self) -> dict[str, int]:
        with self.read():
            out = {key: len(getattr(self, attr)) for key, (attr, _) in COLLECTIONS.items()}
            out["idCounter"] = self.id_counter
            return out


_DATABASES: dict[str, Database] = {}
_DATABASES_LOCK = threading.Lock()


def build_backend(store_backend: str, *, data_file: str | Path | None = None, sqlite_url: str | None = None) -> DatabaseBackend:
    if store_backend == "json":
        return JSONFileBackend(data_file or "data.json")
    if store_backend == "sqlite":
        return SQLAlchemyDocumentBackend(sqlite_url or "sqlite:///buzz.db")
    if store_backend == "memory":
        return MemoryBackend()
    raise ValueError(f"Unknown store backend: {store_backend!r}")


def get_database(settings: Any | None = None) -> Database:
    """
    Return the process-wide Database for the configured backend.

    One instance per (backend, location) so every request shares the same lock
    and in-memory mirror.
    """
    if settings is None:
        from backend_buzz.config import get_settings

        settings = get_settings()
    key = f"{settings.store_backend}:{settings.data_file}:{settings.sqlite_url}"
    with _DATABASES_LOCK:
        db = _DATABASES.get(key)
        if db is None:
            backend = build_backend(
                settings.store_backend,
                data_file=settings.data_file,
                sqlite_url=settings.sqlite_url,
            )
            db = Database(backend)
            _DATABASES[key] = db
            logger.info("store_created", backend=backend.describe())
        return db


def reset_database_cache() -> None:
    """Forget cached Database instances. For tests only."""
    with _DATABASES_LOCK:
        _DATABASES.clear()
