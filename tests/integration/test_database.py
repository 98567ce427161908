"""Integration tests for the Registrar database."""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import inspect, select, text

from registrar.exceptions import TransactionConflictError
from registrar.store.database import Database
from registrar.store.models import Course, StudentStatus


@pytest.fixture
def temp_db_path() -> Iterator[str]:
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield str(Path(tmpdir) / "registrar.db")


@pytest.fixture
def database(temp_db_path: str) -> Iterator[Database]:
    """Create a database instance with tables."""
    db = Database(temp_db_path, lock_timeout=0.2)
    db.create_tables()
    yield db
    db.close()


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for database setup."""

    def test_database_creates_file(self, temp_db_path: str) -> None:
        db = Database(temp_db_path)
        db.create_tables()
        assert Path(temp_db_path).exists()
        db.close()

    def test_database_creates_tables(self, database: Database) -> None:
        tables = inspect(database.engine).get_table_names()

        for table in (
            "student_statuses",
            "status_transition_rules",
            "students",
            "courses",
            "classes",
            "class_registrations",
            "class_registration_history",
            "student_status_history",
        ):
            assert table in tables

    def test_database_wal_mode(self, database: Database) -> None:
        assert database.is_wal_mode()

    def test_foreign_keys_enforced(self, database: Database) -> None:
        with database.transaction() as session:
            enabled = session.execute(text("PRAGMA foreign_keys")).scalar()
        assert enabled == 1


@pytest.mark.integration
class TestTransaction:
    """Tests for units of work."""

    def test_commit_on_success(self, database: Database) -> None:
        with database.transaction() as session:
            session.add(StudentStatus(name="Active"))

        with database.transaction() as session:
            names = session.execute(select(StudentStatus.name)).scalars().all()
        assert names == ["Active"]

    def test_rollback_on_error(self, database: Database) -> None:
        with pytest.raises(RuntimeError), database.transaction() as session:
            session.add(Course(code="CS101", name="Intro"))
            session.flush()
            raise RuntimeError("boom")

        with database.transaction() as session:
            assert session.execute(select(Course)).first() is None

    def test_second_writer_times_out(self, database: Database) -> None:
        """A unit of work waiting on another's write lock fails with a conflict."""
        other = Database(database.db_path, lock_timeout=0.2)
        try:
            with database.transaction() as session:
                session.add(StudentStatus(name="Active"))
                session.flush()

                with pytest.raises(TransactionConflictError), other.transaction() as blocked:
                    blocked.execute(select(StudentStatus)).all()
        finally:
            other.close()

        with database.transaction() as session:
            assert session.execute(select(StudentStatus.name)).scalars().all() == ["Active"]
