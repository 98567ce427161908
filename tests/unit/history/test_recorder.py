"""Unit tests for the registration history recorder."""

import pytest
from pydantic import ValidationError

from registrar import Registrar
from registrar.exceptions import (
    GradeOutOfRangeError,
    RegistrationNotFoundError,
    StudentNotFoundError,
    TerminalRegistrationStateError,
    UnknownRegistrationStatusError,
)
from registrar.store import RegistrationStatus


@pytest.fixture
def registration(registrar: Registrar, school_class, student):
    """Create a REGISTERED registration."""
    return registrar.registrations.enroll(school_class.id, student.id)


@pytest.mark.unit
class TestRecordTransition:
    """Tests for record_transition."""

    def test_record_appends_entry(self, registrar: Registrar, registration) -> None:
        entry = registrar.record_transition(
            registration.id,
            RegistrationStatus.REGISTERED,
            RegistrationStatus.CANCELLED,
            "imported from paper form",
        )

        assert entry.id is not None
        assert entry.registration_id == registration.id
        assert entry.previous_status == "registered"
        assert entry.new_status == "cancelled"
        assert entry.reason == "imported from paper form"
        assert entry.changed_at is not None

    def test_record_accepts_plain_strings(self, registrar: Registrar, registration) -> None:
        entry = registrar.record_transition(registration.id, "registered", "completed")

        assert entry.new_status == "completed"
        assert entry.reason == ""

    @pytest.mark.parametrize(
        ("previous", "new"), [("REGISTERED", "cancelled"), ("registered", "withdrawn")]
    )
    def test_record_unknown_status_value(
        self, registrar: Registrar, registration, previous, new
    ) -> None:
        with pytest.raises(UnknownRegistrationStatusError):
            registrar.record_transition(registration.id, previous, new)

        assert len(registrar.history.history_for(registration.id)) == 1

    def test_record_unknown_registration(self, registrar: Registrar) -> None:
        with pytest.raises(RegistrationNotFoundError):
            registrar.record_transition("nonexistent", None, RegistrationStatus.REGISTERED)

    def test_record_never_overwrites(self, registrar: Registrar, registration) -> None:
        registrar.record_transition(registration.id, "registered", "registered", "first note")
        registrar.record_transition(registration.id, "registered", "registered", "second note")

        reasons = [h.reason for h in registrar.history.history_for(registration.id)]
        assert reasons == ["registered", "first note", "second note"]

    def test_entries_are_frozen(self, registrar: Registrar, registration) -> None:
        entry = registrar.history.history_for(registration.id)[0]

        with pytest.raises(ValidationError):
            entry.reason = "edited"


@pytest.mark.unit
class TestAuditCompleteness:
    """One entry per accepted change, none for rejected ones."""

    def test_entry_count_matches_accepted_changes(
        self, registrar: Registrar, registration
    ) -> None:
        registrar.registrations.complete(registration.id, grade=6)
        registrar.registrations.assign_grade(registration.id, 7)
        with pytest.raises(TerminalRegistrationStateError):
            registrar.registrations.cancel(registration.id)
        with pytest.raises(GradeOutOfRangeError):
            registrar.registrations.assign_grade(registration.id, 11)

        history = registrar.history.history_for(registration.id)
        assert [(h.previous_status, h.new_status) for h in history] == [
            (None, "registered"),
            ("registered", "completed"),
            ("completed", "completed"),
        ]

    def test_history_isolated_per_registration(
        self, registrar: Registrar, school_class, other_student, registration
    ) -> None:
        other = registrar.registrations.enroll(school_class.id, other_student.id)
        registrar.registrations.cancel(other.id)

        assert len(registrar.history.history_for(registration.id)) == 1
        assert len(registrar.history.history_for(other.id)) == 2

    def test_history_for_unknown_registration(self, registrar: Registrar) -> None:
        with pytest.raises(RegistrationNotFoundError):
            registrar.history.history_for("nonexistent")

    def test_status_history_for_unknown_student(self, registrar: Registrar) -> None:
        with pytest.raises(StudentNotFoundError):
            registrar.history.status_history_for("nonexistent")
