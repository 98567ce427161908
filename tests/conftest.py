"""Shared pytest fixtures and configuration."""

from collections.abc import Iterator

import pytest

from registrar import Registrar, Settings


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def registrar() -> Iterator[Registrar]:
    """Create a Registrar on an in-memory database."""
    r = Registrar(Settings(db_path=":memory:"))
    yield r
    r.close()


@pytest.fixture
def statuses(registrar: Registrar) -> dict[str, str]:
    """Install the reference rule set and return status IDs by name.

    Active <-> OnLeave, Active -> Withdrawn. Graduated has no rules at all.
    """
    registrar.rules.replace_rules(
        {
            "Active": ["OnLeave", "Withdrawn"],
            "OnLeave": ["Active"],
            "Withdrawn": [],
            "Graduated": [],
        }
    )
    return {s.name: s.id for s in registrar.records.list_statuses()}


@pytest.fixture
def course(registrar: Registrar):
    """Create an active course."""
    return registrar.records.create_course(code="CS101", name="Intro to Programming")


@pytest.fixture
def school_class(registrar: Registrar, course):
    """Create a class with two seats."""
    return registrar.records.create_class(course_id=course.id, name="CS101-A", max_students=2)


@pytest.fixture
def student(registrar: Registrar, statuses: dict[str, str]):
    """Create an Active student."""
    return registrar.records.create_student(full_name="Ada Lovelace", status_id=statuses["Active"])


@pytest.fixture
def other_student(registrar: Registrar, statuses: dict[str, str]):
    """Create a second Active student."""
    return registrar.records.create_student(full_name="Alan Turing", status_id=statuses["Active"])
