"""Status Transition Validator - checks student status changes against the rules."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from registrar.exceptions import InvalidStatusTransitionError
from registrar.logging import log_rejection
from registrar.rules.rule_store import has_edge
from registrar.store.store import get_status_or_raise, get_student_or_raise

if TYPE_CHECKING:
    from registrar.history import RegistrationHistoryRecorder, StatusHistoryEntry
    from registrar.store.database import Database
    from registrar.store.models import Student

logger = logging.getLogger(__name__)


def transition_allowed(session: Session, from_status_id: str, to_status_id: str) -> bool:
    """Exact-match lookup of the edge from_status -> to_status.

    No-op transitions are always allowed. Multi-step moves are not inferred.

    Raises:
        UnknownStatusError: If either status doesn't exist
    """
    get_status_or_raise(session, from_status_id)
    get_status_or_raise(session, to_status_id)
    if from_status_id == to_status_id:
        return True
    return has_edge(session, from_status_id, to_status_id)


class StatusTransitionValidator:
    """Predicate over the current rule set. Has no side effects."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def can_transition(self, from_status_id: str, to_status_id: str) -> bool:
        """Check whether a student may move between two statuses.

        Args:
            from_status_id: Current status ID
            to_status_id: Requested status ID

        Returns:
            True if a rule allows the move or both IDs are equal

        Raises:
            UnknownStatusError: If either status doesn't exist
        """
        with self._db.transaction() as session:
            return transition_allowed(session, from_status_id, to_status_id)

    def check_transition(self, from_status_id: str, to_status_id: str) -> None:
        """Like can_transition, but raises on rejection.

        Raises:
            UnknownStatusError: If either status doesn't exist
            InvalidStatusTransitionError: If no rule allows the move
        """
        if not self.can_transition(from_status_id, to_status_id):
            raise InvalidStatusTransitionError(from_status_id, to_status_id)


class StudentStatusService:
    """Applies validated status changes to students."""

    def __init__(self, db: Database, recorder: RegistrationHistoryRecorder) -> None:
        self._db = db
        self._recorder = recorder

    def change_status(self, student_id: str, new_status_id: str, reason: str = "") -> Student:
        """Move a student to a new status.

        Reading the current status, validating and writing happen in one
        unit of work, so concurrent changes to the same student are
        serialized. A rejected change leaves the student untouched.

        Args:
            student_id: The student's unique ID
            new_status_id: Requested status ID
            reason: Free-text reason recorded in the status history

        Returns:
            The updated Student

        Raises:
            StudentNotFoundError: If student doesn't exist
            UnknownStatusError: If the requested status doesn't exist
            InvalidStatusTransitionError: If no rule allows the move
        """
        with self._db.transaction() as session:
            student = get_student_or_raise(session, student_id)
            current_status_id = student.current_status_id

            if not transition_allowed(session, current_status_id, new_status_id):
                error = InvalidStatusTransitionError(current_status_id, new_status_id)
                log_rejection(logger, f"status change of student {student_id}", error)
                raise error

            if current_status_id == new_status_id:
                return student

            student.current_status_id = new_status_id
            self._recorder.append_status_change(
                session, student_id, current_status_id, new_status_id, reason
            )
            session.flush()
            session.refresh(student)

        logger.info(
            "Student %s status changed: %s -> %s", student_id, current_status_id, new_status_id
        )
        return student

    def status_history(self, student_id: str) -> list[StatusHistoryEntry]:
        """Get the status history of a student, oldest first."""
        return self._recorder.status_history_for(student_id)
