"""Registration History Recorder - append-only audit ledgers."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from registrar.exceptions import RegistrationNotFoundError
from registrar.history.models import HistoryEntry, StatusHistoryEntry
from registrar.store.database import Database
from registrar.store.models import (
    ClassRegistration,
    ClassRegistrationHistory,
    RegistrationStatus,
    StudentStatusHistory,
    parse_registration_status,
)
from registrar.store.store import get_student_or_raise

logger = logging.getLogger(__name__)


def _status_value(status: RegistrationStatus | str | None) -> str | None:
    if status is None:
        return None
    return parse_registration_status(status).value


class RegistrationHistoryRecorder:
    """Appends audit entries for accepted status changes.

    The recorder never updates or deletes an entry. Each accepted change is
    recorded exactly once, inside the same unit of work as the change itself.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Class registration ledger ---

    def record_transition(
        self,
        registration_id: str,
        previous_status: RegistrationStatus | str | None,
        new_status: RegistrationStatus | str,
        reason: str = "",
    ) -> HistoryEntry:
        """Append a registration history entry in its own unit of work.

        Args:
            registration_id: The registration that changed
            previous_status: Status before the change (None for the initial entry)
            new_status: Status after the change
            reason: Free-text reason for the change

        Returns:
            The appended entry

        Raises:
            RegistrationNotFoundError: If the registration doesn't exist
            UnknownRegistrationStatusError: If a status value names no status
        """
        with self._db.transaction() as session:
            return self.append(session, registration_id, previous_status, new_status, reason)

    def append(
        self,
        session: Session,
        registration_id: str,
        previous_status: RegistrationStatus | str | None,
        new_status: RegistrationStatus | str,
        reason: str = "",
    ) -> HistoryEntry:
        """Append a registration history entry inside the caller's unit of work."""
        if session.get(ClassRegistration, registration_id) is None:
            raise RegistrationNotFoundError(f"Registration with id '{registration_id}' not found")

        row = ClassRegistrationHistory(
            registration_id=registration_id,
            previous_status=_status_value(previous_status),
            new_status=_status_value(new_status),  # type: ignore[arg-type]
            reason=reason,
        )
        session.add(row)
        session.flush()
        logger.debug(
            "Recorded registration %s: %s -> %s",
            registration_id,
            row.previous_status,
            row.new_status,
        )
        return HistoryEntry.model_validate(row)

    def history_for(self, registration_id: str) -> list[HistoryEntry]:
        """Get all entries of a registration, oldest first.

        Raises:
            RegistrationNotFoundError: If the registration doesn't exist
        """
        with self._db.transaction() as session:
            if session.get(ClassRegistration, registration_id) is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            stmt = (
                select(ClassRegistrationHistory)
                .where(ClassRegistrationHistory.registration_id == registration_id)
                .order_by(ClassRegistrationHistory.id)
            )
            return [HistoryEntry.model_validate(row) for row in session.execute(stmt).scalars()]

    # --- Student status ledger ---

    def append_status_change(
        self,
        session: Session,
        student_id: str,
        previous_status_id: str | None,
        new_status_id: str,
        reason: str = "",
    ) -> StatusHistoryEntry:
        """Append a student status entry inside the caller's unit of work."""
        get_student_or_raise(session, student_id)
        row = StudentStatusHistory(
            student_id=student_id,
            previous_status_id=previous_status_id,
            new_status_id=new_status_id,
            reason=reason,
        )
        session.add(row)
        session.flush()
        return StatusHistoryEntry.model_validate(row)

    def status_history_for(self, student_id: str) -> list[StatusHistoryEntry]:
        """Get all status entries of a student, oldest first.

        Raises:
            StudentNotFoundError: If the student doesn't exist
        """
        with self._db.transaction() as session:
            get_student_or_raise(session, student_id)
            stmt = (
                select(StudentStatusHistory)
                .where(StudentStatusHistory.student_id == student_id)
                .order_by(StudentStatusHistory.id)
            )
            return [
                StatusHistoryEntry.model_validate(row) for row in session.execute(stmt).scalars()
            ]
