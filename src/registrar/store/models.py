"""SQLAlchemy models for the Registrar store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from registrar.exceptions import UnknownRegistrationStatusError


class RegistrationStatus(StrEnum):
    """Class registration status enum."""

    REGISTERED = "registered"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def parse_registration_status(value: RegistrationStatus | str) -> RegistrationStatus:
    """Convert a status value to RegistrationStatus.

    Raises:
        UnknownRegistrationStatusError: If value names no registration status
    """
    try:
        return RegistrationStatus(value)
    except ValueError as e:
        raise UnknownRegistrationStatusError(value) from e


ACTIVE_REGISTRATION_STATUSES = frozenset(
    {RegistrationStatus.REGISTERED, RegistrationStatus.COMPLETED}
)
TERMINAL_REGISTRATION_STATUSES = frozenset(
    {RegistrationStatus.CANCELLED, RegistrationStatus.COMPLETED}
)


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time in UTC with microsecond precision."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class StudentStatus(Base):
    """Academic status a student can hold (e.g. Active, On Leave)."""

    __tablename__ = "student_statuses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(self, name: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name

    def __repr__(self) -> str:
        return f"<StudentStatus(id={self.id!r}, name={self.name!r})>"


class StatusTransitionRule(Base):
    """Directed edge of the status graph: from_status may move to to_status."""

    __tablename__ = "status_transition_rules"
    __table_args__ = (UniqueConstraint("from_status_id", "to_status_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    from_status_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("student_statuses.id", ondelete="CASCADE"), nullable=False
    )
    to_status_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("student_statuses.id", ondelete="CASCADE"), nullable=False
    )

    def __init__(
        self, from_status_id: str, to_status_id: str, id: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.from_status_id = from_status_id
        self.to_status_id = to_status_id

    def __repr__(self) -> str:
        return (
            f"<StatusTransitionRule(from_status_id={self.from_status_id!r}, "
            f"to_status_id={self.to_status_id!r})>"
        )


class Student(Base):
    """Student model - holds the current academic status."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    current_status_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("student_statuses.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self, full_name: str, current_status_id: str, id: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.full_name = full_name
        self.current_status_id = current_status_id

    def __repr__(self) -> str:
        return (
            f"<Student(id={self.id!r}, full_name={self.full_name!r}, "
            f"current_status_id={self.current_status_id!r})>"
        )


class Course(Base):
    """Course model - only active courses admit new class registrations."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __init__(
        self,
        code: str,
        name: str,
        is_active: bool = True,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.code = code
        self.name = name
        self.is_active = is_active

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, code={self.code!r}, is_active={self.is_active!r})>"


class SchoolClass(Base):
    """A scheduled class of a course with a seat limit."""

    __tablename__ = "classes"
    __table_args__ = (CheckConstraint("max_students >= 0", name="ck_classes_max_students"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)

    def __init__(
        self,
        course_id: str,
        name: str,
        max_students: int,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = course_id
        self.name = name
        self.max_students = max_students

    def __repr__(self) -> str:
        return (
            f"<SchoolClass(id={self.id!r}, course_id={self.course_id!r}, "
            f"max_students={self.max_students!r})>"
        )


class ClassRegistration(Base):
    """A student's seat in a class."""

    __tablename__ = "class_registrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    class_id: Mapped[str] = mapped_column(String(36), ForeignKey("classes.id"), nullable=False)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("students.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    grade: Mapped[float | None] = mapped_column(Float, nullable=True)
    registered_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        class_id: str,
        student_id: str,
        id: str | None = None,
        status: str | None = None,
        grade: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        now = utcnow()
        self.id = id if id is not None else generate_uuid()
        self.class_id = class_id
        self.student_id = student_id
        self.status = status if status is not None else RegistrationStatus.REGISTERED.value
        self.grade = grade
        self.registered_at = now
        self.updated_at = now

    @property
    def registration_status(self) -> RegistrationStatus:
        """Get status as RegistrationStatus enum."""
        return RegistrationStatus(self.status)

    @registration_status.setter
    def registration_status(self, value: RegistrationStatus) -> None:
        """Set status from RegistrationStatus enum."""
        self.status = value.value

    @property
    def is_active(self) -> bool:
        return self.registration_status in ACTIVE_REGISTRATION_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.registration_status in TERMINAL_REGISTRATION_STATUSES

    def __repr__(self) -> str:
        return (
            f"<ClassRegistration(id={self.id!r}, class_id={self.class_id!r}, "
            f"student_id={self.student_id!r}, status={self.status!r})>"
        )


class ClassRegistrationHistory(Base):
    """Append-only audit ledger of registration status changes."""

    __tablename__ = "class_registration_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    registration_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("class_registrations.id"), nullable=False, index=True
    )
    previous_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        registration_id: str,
        previous_status: str | None,
        new_status: str,
        reason: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.registration_id = registration_id
        self.previous_status = previous_status
        self.new_status = new_status
        self.reason = reason
        self.changed_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"<ClassRegistrationHistory(registration_id={self.registration_id!r}, "
            f"previous_status={self.previous_status!r}, new_status={self.new_status!r})>"
        )


class StudentStatusHistory(Base):
    """Append-only audit ledger of student status changes."""

    __tablename__ = "student_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id"), nullable=False, index=True
    )
    previous_status_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    new_status_id: Mapped[str] = mapped_column(String(36), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        student_id: str,
        previous_status_id: str | None,
        new_status_id: str,
        reason: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.student_id = student_id
        self.previous_status_id = previous_status_id
        self.new_status_id = new_status_id
        self.reason = reason
        self.changed_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"<StudentStatusHistory(student_id={self.student_id!r}, "
            f"previous_status_id={self.previous_status_id!r}, "
            f"new_status_id={self.new_status_id!r})>"
        )


@dataclass
class ClassOccupancy:
    """Seat usage of a class."""

    class_id: str
    max_students: int
    registered_count: int

    @property
    def seats_left(self) -> int:
        return max(self.max_students - self.registered_count, 0)
