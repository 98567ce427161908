"""Pydantic models for enrollment commands."""

from pydantic import BaseModel, Field, ValidationError

from registrar.exceptions import GradeOutOfRangeError

MIN_GRADE = 0.0
MAX_GRADE = 10.0


class GradeEntry(BaseModel):
    """A grade for a completed registration, inclusive 0-10.

    Strict: booleans and numeric strings are not grades.
    """

    grade: float = Field(..., ge=MIN_GRADE, le=MAX_GRADE, allow_inf_nan=False, strict=True)


def validate_grade(grade: float) -> float:
    """Return the grade as float if it is a number within 0-10.

    Raises:
        GradeOutOfRangeError: If the value is not a number between 0 and 10
    """
    try:
        return GradeEntry(grade=grade).grade
    except ValidationError as e:
        raise GradeOutOfRangeError(
            f"Grade must be a number between {MIN_GRADE:g} and {MAX_GRADE:g}, got {grade!r}"
        ) from e
