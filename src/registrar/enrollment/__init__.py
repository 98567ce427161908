"""Enrollment - class registration invariants and workflow."""

from registrar.enrollment.checker import RegistrationInvariantChecker
from registrar.enrollment.models import GradeEntry, validate_grade
from registrar.enrollment.service import RegistrationService

__all__ = [
    "GradeEntry",
    "RegistrationInvariantChecker",
    "RegistrationService",
    "validate_grade",
]
