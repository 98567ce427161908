"""RegistrationService - the class registration workflow.

State machine of ClassRegistration.status::

    REGISTERED -> COMPLETED   (terminal, requires a grade)
    REGISTERED -> CANCELLED   (terminal)

Every accepted change appends exactly one history entry in the same unit of
work as the change.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from registrar.enrollment.models import validate_grade
from registrar.exceptions import (
    InvalidGradeAssignmentError,
    RegistrationNotFoundError,
    RegistrationStateError,
    TerminalRegistrationStateError,
)
from registrar.logging import log_rejection
from registrar.store.models import (
    ClassRegistration,
    RegistrationStatus,
    parse_registration_status,
    utcnow,
)

if TYPE_CHECKING:
    from registrar.enrollment.checker import RegistrationInvariantChecker
    from registrar.history import RegistrationHistoryRecorder
    from registrar.store.database import Database

logger = logging.getLogger(__name__)


def get_registration_or_raise(session: Session, registration_id: str) -> ClassRegistration:
    registration = session.get(ClassRegistration, registration_id)
    if registration is None:
        raise RegistrationNotFoundError(f"Registration with id '{registration_id}' not found")
    return registration


class RegistrationService:
    """Enrolls students and moves registrations through their lifecycle."""

    def __init__(
        self,
        db: Database,
        checker: RegistrationInvariantChecker,
        recorder: RegistrationHistoryRecorder,
    ) -> None:
        self._db = db
        self._checker = checker
        self._recorder = recorder

    def enroll(
        self, class_id: str, student_id: str, reason: str = "registered"
    ) -> ClassRegistration:
        """Register a student in a class.

        The invariant checks and the insert share one unit of work holding
        the write lock, so two concurrent requests can never both take the
        last seat.

        Args:
            class_id: The class's unique ID
            student_id: The student's unique ID
            reason: Reason recorded with the initial history entry

        Returns:
            The new registration in REGISTERED state

        Raises:
            ClassNotFoundError: If class doesn't exist
            CourseInactiveError: If the class's course is not active
            CapacityExceededError: If the class is full
            StudentNotFoundError: If student doesn't exist
            DuplicateRegistrationError: If the student is already registered
            TransactionConflictError: If the write lock could not be obtained
        """
        with self._db.transaction() as session:
            self._checker.check(session, class_id, student_id)

            registration = ClassRegistration(class_id=class_id, student_id=student_id)
            session.add(registration)
            session.flush()
            self._recorder.append(
                session, registration.id, None, RegistrationStatus.REGISTERED, reason
            )

        logger.info(
            "Enrolled student %s in class %s (registration %s)",
            student_id,
            class_id,
            registration.id,
        )
        return registration

    def cancel(self, registration_id: str, reason: str = "") -> ClassRegistration:
        """Cancel a REGISTERED registration.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            TerminalRegistrationStateError: If already cancelled or completed
        """
        return self.change_status(registration_id, RegistrationStatus.CANCELLED, reason=reason)

    def complete(self, registration_id: str, grade: float, reason: str = "") -> ClassRegistration:
        """Complete a REGISTERED registration with a final grade.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            TerminalRegistrationStateError: If already cancelled or completed
            GradeOutOfRangeError: If grade is outside 0-10
        """
        return self.change_status(
            registration_id, RegistrationStatus.COMPLETED, grade=grade, reason=reason
        )

    def change_status(
        self,
        registration_id: str,
        new_status: RegistrationStatus | str,
        grade: float | None = None,
        reason: str = "",
    ) -> ClassRegistration:
        """Move a registration to a new status.

        Args:
            registration_id: The registration's unique ID
            new_status: CANCELLED or COMPLETED
            grade: Required for COMPLETED, forbidden otherwise
            reason: Reason recorded in the history entry

        Returns:
            The updated registration

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            TerminalRegistrationStateError: If the registration is cancelled
                or completed
            InvalidGradeAssignmentError: If a grade is missing for COMPLETED
                or supplied for any other target
            GradeOutOfRangeError: If grade is outside 0-10
            RegistrationStateError: If the target is REGISTERED
            UnknownRegistrationStatusError: If new_status names no status
        """
        target = parse_registration_status(new_status)

        with self._db.transaction() as session:
            registration = get_registration_or_raise(session, registration_id)
            current = registration.registration_status

            if registration.is_terminal:
                error = TerminalRegistrationStateError(
                    f"Registration '{registration_id}' is {current} and cannot change status"
                )
                log_rejection(logger, f"change of registration {registration_id}", error)
                raise error
            if target == RegistrationStatus.REGISTERED:
                raise RegistrationStateError(
                    f"Registration '{registration_id}' is already {RegistrationStatus.REGISTERED}"
                )

            if target == RegistrationStatus.COMPLETED:
                if grade is None:
                    raise InvalidGradeAssignmentError(
                        f"Completing registration '{registration_id}' requires a grade"
                    )
                registration.grade = validate_grade(grade)
            elif grade is not None:
                raise InvalidGradeAssignmentError(
                    f"A grade can only be set when completing registration '{registration_id}'"
                )

            registration.registration_status = target
            registration.updated_at = utcnow()
            self._recorder.append(session, registration.id, current, target, reason)

        logger.info("Registration %s: %s -> %s", registration_id, current, target)
        return registration

    def assign_grade(
        self, registration_id: str, grade: float, reason: str = "grade updated"
    ) -> ClassRegistration:
        """Correct the grade of a COMPLETED registration.

        The correction is recorded as a COMPLETED -> COMPLETED history entry.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            InvalidGradeAssignmentError: If the registration is not COMPLETED
            GradeOutOfRangeError: If grade is outside 0-10
        """
        with self._db.transaction() as session:
            registration = get_registration_or_raise(session, registration_id)
            if registration.registration_status != RegistrationStatus.COMPLETED:
                raise InvalidGradeAssignmentError(
                    f"Registration '{registration_id}' is {registration.status}; "
                    "grades can only be set on completed registrations"
                )

            registration.grade = validate_grade(grade)
            registration.updated_at = utcnow()
            self._recorder.append(
                session,
                registration.id,
                RegistrationStatus.COMPLETED,
                RegistrationStatus.COMPLETED,
                reason,
            )

        logger.info("Registration %s grade set to %s", registration_id, registration.grade)
        return registration

    def get_registration(self, registration_id: str) -> ClassRegistration:
        """Get registration by ID.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        with self._db.transaction() as session:
            return get_registration_or_raise(session, registration_id)

    def list_registrations(
        self,
        class_id: str | None = None,
        student_id: str | None = None,
        status: RegistrationStatus | None = None,
    ) -> list[ClassRegistration]:
        """List registrations with optional filters, oldest first."""
        with self._db.transaction() as session:
            stmt = select(ClassRegistration)

            if class_id is not None:
                stmt = stmt.where(ClassRegistration.class_id == class_id)
            if student_id is not None:
                stmt = stmt.where(ClassRegistration.student_id == student_id)
            if status is not None:
                stmt = stmt.where(ClassRegistration.status == status.value)

            stmt = stmt.order_by(ClassRegistration.registered_at)
            return list(session.execute(stmt).scalars().all())
