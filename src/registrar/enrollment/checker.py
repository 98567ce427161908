"""Registration Invariant Checker - preconditions for admitting an enrollment."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from registrar.exceptions import (
    CapacityExceededError,
    CourseInactiveError,
    DuplicateRegistrationError,
    EnrollmentError,
)
from registrar.logging import log_rejection
from registrar.store.models import ACTIVE_REGISTRATION_STATUSES, ClassRegistration, Course
from registrar.store.store import (
    count_active_registrations,
    get_class_or_raise,
    get_student_or_raise,
)

if TYPE_CHECKING:
    from registrar.store.database import Database

logger = logging.getLogger(__name__)


class RegistrationInvariantChecker:
    """Validates course-active, capacity and duplicate constraints.

    Checks run in a fixed order and the first failure wins:
    class exists, course active, seat available, student exists,
    no active registration of the student in the class.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def validate_enrollment(self, class_id: str, student_id: str) -> None:
        """Check whether the student could be enrolled in the class right now.

        Only a snapshot: the answer may be stale by the time the caller
        writes. RegistrationService.enroll runs the same checks and the insert
        in one unit of work.

        Raises:
            ClassNotFoundError: If class doesn't exist
            CourseInactiveError: If the class's course is not active
            CapacityExceededError: If the class is full
            StudentNotFoundError: If student doesn't exist
            DuplicateRegistrationError: If the student already holds an
                active registration in the class
        """
        with self._db.transaction() as session:
            self.check(session, class_id, student_id)

    def check(self, session: Session, class_id: str, student_id: str) -> None:
        """Run all checks inside the caller's unit of work."""
        try:
            self._check(session, class_id, student_id)
        except EnrollmentError as e:
            log_rejection(logger, f"enrollment of student {student_id} in class {class_id}", e)
            raise

    def _check(self, session: Session, class_id: str, student_id: str) -> None:
        school_class = get_class_or_raise(session, class_id)

        course = session.get(Course, school_class.course_id)
        if course is None or not course.is_active:
            raise CourseInactiveError(
                f"Course of class '{class_id}' is not accepting registrations"
            )

        registered = count_active_registrations(session, class_id)
        if registered >= school_class.max_students:
            raise CapacityExceededError(
                f"Class '{class_id}' is full ({registered}/{school_class.max_students})"
            )

        get_student_or_raise(session, student_id)

        stmt = select(ClassRegistration.id).where(
            ClassRegistration.class_id == class_id,
            ClassRegistration.student_id == student_id,
            ClassRegistration.status.in_([s.value for s in ACTIVE_REGISTRATION_STATUSES]),
        )
        if session.execute(stmt).first() is not None:
            raise DuplicateRegistrationError(
                f"Student '{student_id}' already has an active registration in class '{class_id}'"
            )
