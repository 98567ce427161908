"""Exceptions for the Registrar rule engine.

All errors are local, recoverable validation failures. The engine raises them
and leaves translation into user-facing responses to its caller.
"""

from __future__ import annotations


class RegistrarError(Exception):
    """Base exception for Registrar errors."""


# --- Lookups ---


class RecordNotFoundError(RegistrarError):
    """Referenced record does not exist."""


class UnknownStatusError(RecordNotFoundError):
    """Student status with given ID does not exist."""

    def __init__(self, status_id: str) -> None:
        super().__init__(f"Student status with id '{status_id}' not found")
        self.status_id = status_id


class CourseNotFoundError(RecordNotFoundError):
    """Course with given ID does not exist."""


class RegistrationNotFoundError(RecordNotFoundError):
    """Class registration with given ID does not exist."""


# --- Administrative rules ---


class StatusExistsError(RegistrarError):
    """Student status with given name already exists."""


class StatusInUseError(RegistrarError):
    """Cannot delete a student status that students still reference."""


# --- Student status transitions ---


class StatusTransitionError(RegistrarError):
    """Base exception for student status transition errors."""


class InvalidStatusTransitionError(StatusTransitionError):
    """No transition rule allows moving between the two statuses."""

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"Transition from status '{from_status}' to '{to_status}' is not allowed")
        self.from_status = from_status
        self.to_status = to_status


# --- Enrollment ---


class EnrollmentError(RegistrarError):
    """Base exception for rejected enrollments."""


class ClassNotFoundError(RecordNotFoundError, EnrollmentError):
    """Class with given ID does not exist."""


class StudentNotFoundError(RecordNotFoundError, EnrollmentError):
    """Student with given ID does not exist."""


class CourseInactiveError(EnrollmentError):
    """The class belongs to a course that does not admit registrations."""


class CapacityExceededError(EnrollmentError):
    """The class has no seats left."""


class DuplicateRegistrationError(EnrollmentError):
    """Student already holds an active registration in the class."""


# --- Registration state ---


class RegistrationStateError(RegistrarError):
    """Base exception for illegal registration status or grade changes."""


class InvalidGradeAssignmentError(RegistrationStateError):
    """A grade was supplied where the registration cannot take one."""


class GradeOutOfRangeError(InvalidGradeAssignmentError):
    """Grade is outside the inclusive 0-10 range."""


class TerminalRegistrationStateError(RegistrationStateError):
    """Registration is cancelled or completed and admits no further transition."""


class UnknownRegistrationStatusError(RegistrationStateError):
    """Value is not one of the registration statuses."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown registration status {value!r}")
        self.value = value


# --- Storage ---


class TransactionConflictError(RegistrarError):
    """A unit of work could not obtain the write lock in time."""
