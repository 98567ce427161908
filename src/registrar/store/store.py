"""RecordStore - administrative operations on reference data."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from registrar.exceptions import (
    ClassNotFoundError,
    CourseNotFoundError,
    StatusExistsError,
    StatusInUseError,
    StudentNotFoundError,
    UnknownStatusError,
)
from registrar.store.database import Database
from registrar.store.models import (
    ACTIVE_REGISTRATION_STATUSES,
    ClassOccupancy,
    ClassRegistration,
    Course,
    SchoolClass,
    StatusTransitionRule,
    Student,
    StudentStatus,
    StudentStatusHistory,
)

logger = logging.getLogger(__name__)


def get_status_or_raise(session: Session, status_id: str) -> StudentStatus:
    status = session.get(StudentStatus, status_id)
    if status is None:
        raise UnknownStatusError(status_id)
    return status


def get_student_or_raise(session: Session, student_id: str) -> Student:
    student = session.get(Student, student_id)
    if student is None:
        raise StudentNotFoundError(f"Student with id '{student_id}' not found")
    return student


def get_class_or_raise(session: Session, class_id: str) -> SchoolClass:
    school_class = session.get(SchoolClass, class_id)
    if school_class is None:
        raise ClassNotFoundError(f"Class with id '{class_id}' not found")
    return school_class


def get_course_or_raise(session: Session, course_id: str) -> Course:
    course = session.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError(f"Course with id '{course_id}' not found")
    return course


def count_active_registrations(session: Session, class_id: str) -> int:
    """Count REGISTERED and COMPLETED registrations of a class."""
    stmt = select(func.count(ClassRegistration.id)).where(
        ClassRegistration.class_id == class_id,
        ClassRegistration.status.in_([s.value for s in ACTIVE_REGISTRATION_STATUSES]),
    )
    return session.execute(stmt).scalar_one()


class RecordStore:
    """Reference data operations for statuses, students, courses and classes.

    Every call runs in its own unit of work on the shared Database.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Student Status Operations ---

    def create_status(self, name: str) -> StudentStatus:
        """Create a new student status.

        Args:
            name: Unique status name

        Returns:
            Created StudentStatus with generated ID

        Raises:
            StatusExistsError: If a status with the same name already exists
        """
        try:
            with self._db.transaction() as session:
                status = StudentStatus(name=name)
                session.add(status)
                session.flush()
                session.refresh(status)
        except IntegrityError as e:
            raise StatusExistsError(f"Student status '{name}' already exists") from e
        logger.info("Created student status %s (%s)", name, status.id)
        return status

    def get_status(self, status_id: str) -> StudentStatus:
        """Get status by ID.

        Raises:
            UnknownStatusError: If status doesn't exist
        """
        with self._db.transaction() as session:
            return get_status_or_raise(session, status_id)

    def get_status_by_name(self, name: str) -> StudentStatus:
        """Get status by its unique name.

        Raises:
            UnknownStatusError: If no status has this name
        """
        with self._db.transaction() as session:
            stmt = select(StudentStatus).where(StudentStatus.name == name)
            status = session.execute(stmt).scalar_one_or_none()
            if status is None:
                raise UnknownStatusError(name)
            return status

    def list_statuses(self) -> list[StudentStatus]:
        """List all statuses, ordered by name."""
        with self._db.transaction() as session:
            stmt = select(StudentStatus).order_by(StudentStatus.name)
            return list(session.execute(stmt).scalars().all())

    def rename_status(self, status_id: str, name: str) -> StudentStatus:
        """Rename a status.

        Raises:
            UnknownStatusError: If status doesn't exist
            StatusExistsError: If another status already uses the name
        """
        try:
            with self._db.transaction() as session:
                status = get_status_or_raise(session, status_id)
                status.name = name
                session.flush()
        except IntegrityError as e:
            raise StatusExistsError(f"Student status '{name}' already exists") from e
        return status

    def delete_status(self, status_id: str) -> None:
        """Delete a status together with the transition rules touching it.

        Raises:
            UnknownStatusError: If status doesn't exist
            StatusInUseError: If any student currently holds the status
        """
        with self._db.transaction() as session:
            status = get_status_or_raise(session, status_id)

            stmt = select(func.count(Student.id)).where(Student.current_status_id == status_id)
            if session.execute(stmt).scalar_one() > 0:
                raise StatusInUseError(f"Student status '{status.name}' is still referenced")

            session.execute(
                delete(StatusTransitionRule).where(
                    (StatusTransitionRule.from_status_id == status_id)
                    | (StatusTransitionRule.to_status_id == status_id)
                )
            )
            session.delete(status)
        logger.info("Deleted student status %s", status_id)

    # --- Student Operations ---

    def create_student(self, full_name: str, status_id: str, reason: str = "enrolled") -> Student:
        """Create a student with an initial status.

        The initial assignment is not subject to transition rules. It is
        recorded in the student status history.

        Raises:
            UnknownStatusError: If the status doesn't exist
        """
        with self._db.transaction() as session:
            get_status_or_raise(session, status_id)
            student = Student(full_name=full_name, current_status_id=status_id)
            session.add(student)
            session.flush()
            session.refresh(student)
            session.add(
                StudentStatusHistory(
                    student_id=student.id,
                    previous_status_id=None,
                    new_status_id=status_id,
                    reason=reason,
                )
            )
        logger.info("Created student %s with status %s", student.id, status_id)
        return student

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        with self._db.transaction() as session:
            return get_student_or_raise(session, student_id)

    def list_students(self, status_id: str | None = None) -> list[Student]:
        """List students, optionally filtered by current status."""
        with self._db.transaction() as session:
            stmt = select(Student)
            if status_id is not None:
                stmt = stmt.where(Student.current_status_id == status_id)
            stmt = stmt.order_by(Student.full_name)
            return list(session.execute(stmt).scalars().all())

    # --- Course Operations ---

    def create_course(self, code: str, name: str, is_active: bool = True) -> Course:
        """Create a course."""
        with self._db.transaction() as session:
            course = Course(code=code, name=name, is_active=is_active)
            session.add(course)
        return course

    def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.transaction() as session:
            return get_course_or_raise(session, course_id)

    def set_course_active(self, course_id: str, is_active: bool) -> Course:
        """Open or close a course for new registrations.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.transaction() as session:
            course = get_course_or_raise(session, course_id)
            course.is_active = is_active
        logger.info("Course %s is_active=%s", course_id, is_active)
        return course

    # --- Class Operations ---

    def create_class(self, course_id: str, name: str, max_students: int) -> SchoolClass:
        """Create a class of a course.

        Raises:
            CourseNotFoundError: If course doesn't exist
            ValueError: If max_students is negative
        """
        if max_students < 0:
            raise ValueError("max_students must not be negative")
        with self._db.transaction() as session:
            get_course_or_raise(session, course_id)
            school_class = SchoolClass(course_id=course_id, name=name, max_students=max_students)
            session.add(school_class)
        return school_class

    def get_class(self, class_id: str) -> SchoolClass:
        """Get class by ID.

        Raises:
            ClassNotFoundError: If class doesn't exist
        """
        with self._db.transaction() as session:
            return get_class_or_raise(session, class_id)

    def get_class_occupancy(self, class_id: str) -> ClassOccupancy:
        """Get seat usage of a class.

        Raises:
            ClassNotFoundError: If class doesn't exist
        """
        with self._db.transaction() as session:
            school_class = get_class_or_raise(session, class_id)
            return ClassOccupancy(
                class_id=school_class.id,
                max_students=school_class.max_students,
                registered_count=count_active_registrations(session, class_id),
            )
