"""Unit tests for RecordStore operations."""

import pytest

from registrar import Registrar
from registrar.exceptions import (
    ClassNotFoundError,
    CourseNotFoundError,
    StatusExistsError,
    StatusInUseError,
    StudentNotFoundError,
    UnknownStatusError,
)


@pytest.mark.unit
class TestStatusOperations:
    """Tests for student status CRUD."""

    def test_create_and_get_status(self, registrar: Registrar) -> None:
        status = registrar.records.create_status("Active")

        assert registrar.records.get_status(status.id).name == "Active"
        assert registrar.records.get_status_by_name("Active").id == status.id

    def test_duplicate_name_raises(self, registrar: Registrar) -> None:
        registrar.records.create_status("Active")

        with pytest.raises(StatusExistsError):
            registrar.records.create_status("Active")

    def test_get_unknown_status_raises(self, registrar: Registrar) -> None:
        with pytest.raises(UnknownStatusError) as exc_info:
            registrar.records.get_status("nonexistent")
        assert exc_info.value.status_id == "nonexistent"

    def test_list_statuses_ordered_by_name(self, registrar: Registrar) -> None:
        registrar.records.create_status("Withdrawn")
        registrar.records.create_status("Active")

        names = [s.name for s in registrar.records.list_statuses()]
        assert names == ["Active", "Withdrawn"]

    def test_rename_status(self, registrar: Registrar) -> None:
        status = registrar.records.create_status("Actve")

        renamed = registrar.records.rename_status(status.id, "Active")

        assert renamed.name == "Active"
        assert registrar.records.get_status_by_name("Active").id == status.id

    def test_rename_to_existing_name_raises(self, registrar: Registrar) -> None:
        registrar.records.create_status("Active")
        other = registrar.records.create_status("OnLeave")

        with pytest.raises(StatusExistsError):
            registrar.records.rename_status(other.id, "Active")
        assert registrar.records.get_status(other.id).name == "OnLeave"

    def test_delete_unused_status_removes_its_rules(
        self, registrar: Registrar, statuses: dict[str, str]
    ) -> None:
        registrar.records.delete_status(statuses["OnLeave"])

        with pytest.raises(UnknownStatusError):
            registrar.records.get_status(statuses["OnLeave"])
        edges = registrar.rules.load_edges()
        assert edges[statuses["Active"]] == frozenset({statuses["Withdrawn"]})
        assert statuses["OnLeave"] not in edges

    def test_delete_referenced_status_raises(
        self, registrar: Registrar, statuses: dict[str, str], student
    ) -> None:
        with pytest.raises(StatusInUseError):
            registrar.records.delete_status(statuses["Active"])
        assert registrar.records.get_status(statuses["Active"]).name == "Active"


@pytest.mark.unit
class TestStudentOperations:
    """Tests for student records."""

    def test_create_student_with_initial_status(
        self, registrar: Registrar, statuses: dict[str, str]
    ) -> None:
        student = registrar.records.create_student("Grace Hopper", statuses["Graduated"])

        fetched = registrar.records.get_student(student.id)
        assert fetched.full_name == "Grace Hopper"
        assert fetched.current_status_id == statuses["Graduated"]

    def test_initial_assignment_recorded(
        self, registrar: Registrar, statuses: dict[str, str]
    ) -> None:
        student = registrar.records.create_student("Grace Hopper", statuses["Active"])

        history = registrar.history.status_history_for(student.id)
        assert len(history) == 1
        assert history[0].previous_status_id is None
        assert history[0].new_status_id == statuses["Active"]

    def test_create_student_unknown_status_raises(self, registrar: Registrar) -> None:
        with pytest.raises(UnknownStatusError):
            registrar.records.create_student("Grace Hopper", "nonexistent")
        assert registrar.records.list_students() == []

    def test_get_unknown_student_raises(self, registrar: Registrar) -> None:
        with pytest.raises(StudentNotFoundError):
            registrar.records.get_student("nonexistent")

    def test_list_students_by_status(
        self, registrar: Registrar, statuses: dict[str, str]
    ) -> None:
        registrar.records.create_student("Active One", statuses["Active"])
        registrar.records.create_student("On Leave One", statuses["OnLeave"])

        on_leave = registrar.records.list_students(status_id=statuses["OnLeave"])
        assert [s.full_name for s in on_leave] == ["On Leave One"]


@pytest.mark.unit
class TestCourseAndClassOperations:
    """Tests for courses and classes."""

    def test_set_course_active(self, registrar: Registrar, course) -> None:
        registrar.records.set_course_active(course.id, False)
        assert registrar.records.get_course(course.id).is_active is False

    def test_unknown_course_raises(self, registrar: Registrar) -> None:
        with pytest.raises(CourseNotFoundError):
            registrar.records.set_course_active("nonexistent", True)

    def test_create_class_unknown_course_raises(self, registrar: Registrar) -> None:
        with pytest.raises(CourseNotFoundError):
            registrar.records.create_class("nonexistent", "X-1", 10)

    def test_create_class_negative_capacity_raises(self, registrar: Registrar, course) -> None:
        with pytest.raises(ValueError):
            registrar.records.create_class(course.id, "X-1", -1)

    def test_get_unknown_class_raises(self, registrar: Registrar) -> None:
        with pytest.raises(ClassNotFoundError):
            registrar.records.get_class("nonexistent")

    def test_occupancy_counts_active_registrations(
        self, registrar: Registrar, school_class, student, other_student
    ) -> None:
        first = registrar.registrations.enroll(school_class.id, student.id)
        registrar.registrations.enroll(school_class.id, other_student.id)
        registrar.registrations.cancel(first.id)

        occupancy = registrar.records.get_class_occupancy(school_class.id)
        assert occupancy.max_students == 2
        assert occupancy.registered_count == 1
        assert occupancy.seats_left == 1
