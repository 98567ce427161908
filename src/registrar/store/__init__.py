"""Store - persistent storage for academic records and audit ledgers."""

from registrar.store.database import Database
from registrar.store.models import (
    ACTIVE_REGISTRATION_STATUSES,
    TERMINAL_REGISTRATION_STATUSES,
    ClassOccupancy,
    ClassRegistration,
    ClassRegistrationHistory,
    Course,
    RegistrationStatus,
    SchoolClass,
    StatusTransitionRule,
    Student,
    StudentStatus,
    StudentStatusHistory,
    parse_registration_status,
)
from registrar.store.store import RecordStore

__all__ = [
    "ACTIVE_REGISTRATION_STATUSES",
    "TERMINAL_REGISTRATION_STATUSES",
    "ClassOccupancy",
    "ClassRegistration",
    "ClassRegistrationHistory",
    "Course",
    "Database",
    "RecordStore",
    "RegistrationStatus",
    "SchoolClass",
    "StatusTransitionRule",
    "Student",
    "StudentStatus",
    "StudentStatusHistory",
    "parse_registration_status",
]
