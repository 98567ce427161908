"""Database connection manager for the Registrar store."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from registrar.exceptions import TransactionConflictError
from registrar.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0


class Database:
    """Database connection manager.

    Manages SQLite database connections with WAL mode enabled. Every
    transaction starts with ``BEGIN IMMEDIATE`` so a unit of work holds the
    write lock from its first read until commit or rollback.
    """

    def __init__(
        self, db_path: str = "registrar.db", lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    ) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory DB.
            lock_timeout: Seconds a unit of work waits for the write lock.
        """
        self.db_path = db_path
        self.lock_timeout = lock_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        # In-memory databases share a single connection across threads
        self._memory_lock = threading.Lock() if db_path == ":memory:" else None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            connect_args = {"check_same_thread": False, "timeout": self.lock_timeout}
            if self.db_path == ":memory:":
                self._engine = create_engine(
                    "sqlite:///:memory:",
                    echo=False,
                    poolclass=StaticPool,
                    connect_args=connect_args,
                )
            else:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._engine = create_engine(
                    f"sqlite:///{self.db_path}",
                    echo=False,
                    connect_args=connect_args,
                )

            @event.listens_for(self._engine, "connect")
            def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                # Hand transaction control to the "begin" listener below
                dbapi_connection.isolation_level = None  # type: ignore[attr-defined]
                cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            @event.listens_for(self._engine, "begin")
            def begin_immediate(conn: object) -> None:
                conn.exec_driver_sql("BEGIN IMMEDIATE")  # type: ignore[attr-defined]

        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        with self._guard():
            Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution!"""
        with self._guard():
            Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Run a unit of work.

        Commits when the block exits normally and rolls back every change
        when it raises.

        Yields:
            A session bound to a fresh transaction.

        Raises:
            TransactionConflictError: If the write lock could not be obtained
                within ``lock_timeout`` seconds.
        """
        with self._guard():
            session = self.get_session()
            try:
                yield session
                session.commit()
            except OperationalError as e:
                session.rollback()
                if "database is locked" in str(e):
                    logger.warning("Write lock not acquired within %.1fs", self.lock_timeout)
                    raise TransactionConflictError(
                        f"Could not acquire the database write lock within {self.lock_timeout}s"
                    ) from e
                raise
            except BaseException:
                session.rollback()
                raise
            finally:
                session.close()

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled.

        Returns:
            True if WAL mode is enabled.
        """
        with self._guard(), self.engine.connect() as conn:
            result = conn.execute(text("PRAGMA journal_mode"))
            mode = result.scalar()
            return mode == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _guard(self) -> threading.Lock | nullcontext[None]:
        return self._memory_lock if self._memory_lock is not None else nullcontext()
