"""Tests for double-booking detection."""

from datetime import datetime, timedelta

import pytest

from rosterlens.analysis.conflicts import (
    ConflictDetector,
    find_conflicts,
    group_assignments_by_staff,
    is_valid,
)
from rosterlens.domain.models import Schedule, StaffAssignment, StaffMember

DAY = datetime(2024, 1, 15)


def at(hour: float) -> datetime:
    return DAY + timedelta(hours=hour)


def assign(assignment_id, staff, start, end, slot="Shift"):
    return StaffAssignment(assignment_id, staff, slot, at(start), at(end))


class TestFindConflicts:
    """Tests for find_conflicts."""

    def test_same_staff_overlap(self):
        """One overlapping pair is one conflict."""
        a = assign("A", "Nurse A", 8, 16)
        b = assign("B", "Nurse A", 12, 20)
        conflicts = find_conflicts([a, b])
        assert len(conflicts) == 1
        assert conflicts[0].staff_name == "Nurse A"
        assert conflicts[0].first is a
        assert conflicts[0].second is b
        assert conflicts[0].overlap_hours == 4

    def test_different_staff_no_conflict(self):
        a = assign("A", "Nurse A", 8, 16)
        b = assign("B", "Nurse B", 12, 20)
        assert find_conflicts([a, b]) == []

    def test_no_overlap_no_conflict(self):
        a = assign("A", "Nurse A", 8, 12)
        b = assign("B", "Nurse A", 13, 17)
        assert find_conflicts([a, b]) == []

    def test_adjacent_no_conflict(self):
        a = assign("A", "Nurse A", 8, 12)
        b = assign("B", "Nurse A", 12, 16)
        assert find_conflicts([a, b]) == []

    def test_empty_and_single(self):
        assert find_conflicts([]) == []
        assert find_conflicts([assign("A", "Nurse A", 8, 12)]) == []

    def test_record_and_name_refs_same_identity(self):
        """A member record and a bare name refer to the same person."""
        member = StaffMember("Nurse A", 1, datetime(2020, 1, 1))
        a = StaffAssignment("A", member, "Shift", at(8), at(16))
        b = assign("B", "Nurse A", 12, 20)
        assert len(find_conflicts([a, b])) == 1

    def test_exact_name_identity(self):
        """Names differing in case are different staff."""
        a = assign("A", "Nurse A", 8, 16)
        b = assign("B", "nurse a", 12, 20)
        assert find_conflicts([a, b]) == []

    def test_reporting_order(self):
        """Staff in first-seen order, then pairs (i, j) with i < j."""
        assignments = [
            assign("B1", "Nurse B", 8, 16),
            assign("A1", "Nurse A", 8, 16),
            assign("A2", "Nurse A", 9, 10),
            assign("B2", "Nurse B", 10, 12),
            assign("A3", "Nurse A", 15, 18),
        ]
        conflicts = find_conflicts(assignments)
        assert [(c.first.id, c.second.id) for c in conflicts] == [
            ("B1", "B2"),
            ("A1", "A2"),
            ("A1", "A3"),
        ]

    def test_input_not_modified(self):
        assignments = [assign("B", "Nurse A", 12, 20), assign("A", "Nurse A", 8, 16)]
        snapshot = list(assignments)
        find_conflicts(assignments)
        assert assignments == snapshot


class TestConflictDetector:
    """Tests for the detector's schedule-level helpers."""

    @pytest.fixture
    def detector(self):
        return ConflictDetector()

    @pytest.fixture
    def schedule(self):
        return Schedule(
            id="s1",
            schedule_start=at(0),
            schedule_end=at(24),
            assignments=[
                assign("A", "Nurse A", 8, 16),
                assign("B", "Nurse A", 12, 20),
                assign("C", "Nurse B", 8, 16),
            ],
        )

    def test_is_valid_reports_conflicts(self, detector, schedule):
        result = detector.is_valid(schedule)
        assert not result.valid
        assert len(result.conflicts) == 1

    def test_empty_schedule_valid(self):
        schedule = Schedule(id="s0", schedule_start=at(0), schedule_end=at(24))
        assert is_valid(schedule).valid

    def test_conflicts_by_staff(self, detector, schedule):
        grouped = detector.conflicts_by_staff(schedule.assignments)
        assert list(grouped) == ["Nurse A"]

    def test_group_assignments_by_staff(self, schedule):
        grouped = group_assignments_by_staff(schedule.assignments)
        assert list(grouped) == ["Nurse A", "Nurse B"]
        assert [a.id for a in grouped["Nurse A"]] == ["A", "B"]

    def test_find_overlapping_pairs_ignores_staff(self, detector, schedule):
        pairs = detector.find_overlapping_pairs(schedule.assignments)
        assert [(a.id, b.id) for a, b in pairs] == [("A", "B"), ("A", "C"), ("B", "C")]

    def test_is_staff_available_at(self, detector, schedule):
        assert not detector.is_staff_available_at(schedule.assignments, "Nurse A", at(19), at(21))
        assert detector.is_staff_available_at(schedule.assignments, "Nurse A", at(20), at(22))
        assert detector.is_staff_available_at(schedule.assignments, "Nurse C", at(8), at(9))

    def test_conflict_str(self, detector, schedule):
        conflict = detector.find_conflicts(schedule.assignments)[0]
        assert str(conflict) == "Nurse A: A (Shift) overlaps B (Shift) by 4.0h"
