"""Tests for domain model construction and validation."""

from datetime import datetime, timedelta

import pytest

from rosterlens.domain.errors import ConstructionError
from rosterlens.domain.models import (
    FillStatus,
    PreferenceLevel,
    RefKind,
    Schedule,
    ScheduleRequirement,
    SlotRef,
    StaffAssignment,
    StaffConstraint,
    StaffMember,
    StaffRef,
    StaffSlot,
    UnfilledSlot,
    validate_schedule_requirement,
    validate_staff_assignment,
    validate_staff_constraint,
)

DAY = datetime(2024, 1, 15)


def at(hour: float) -> datetime:
    return DAY + timedelta(hours=hour)


class TestPreferenceLevel:
    """Tests for PreferenceLevel."""

    def test_restrictiveness_order(self):
        """unavailable > not_preferred > neutral > preferred."""
        ranks = [level.rank for level in PreferenceLevel]
        assert ranks == sorted(ranks, reverse=True)

    def test_parse_string(self):
        assert PreferenceLevel.parse("not_preferred") is PreferenceLevel.NOT_PREFERRED

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            PreferenceLevel.parse("maybe")

    def test_is_valid(self):
        assert PreferenceLevel.is_valid("neutral")
        assert not PreferenceLevel.is_valid("maybe")
        assert not PreferenceLevel.is_valid(None)


class TestStaffConstraint:
    """Tests for StaffConstraint."""

    def test_fields_read_back(self):
        """Valid data is stored unchanged."""
        constraint = StaffConstraint(at(8), at(12), PreferenceLevel.UNAVAILABLE, "Appointment")
        assert constraint.start_time == at(8)
        assert constraint.end_time == at(12)
        assert constraint.preference is PreferenceLevel.UNAVAILABLE
        assert constraint.reason == "Appointment"
        assert constraint.is_blocking
        assert constraint.duration_hours == 4

    def test_string_preference_converted(self):
        constraint = StaffConstraint(at(8), at(12), "preferred")
        assert constraint.preference is PreferenceLevel.PREFERRED
        assert not constraint.is_blocking

    def test_all_errors_reported(self):
        """Every bad field is listed, not just the first."""
        with pytest.raises(ConstructionError) as exc_info:
            StaffConstraint(at(12), at(8), "maybe", reason=5)
        assert exc_info.value.fields == ["end_time", "preference", "reason"]
        assert exc_info.value.record_type == "StaffConstraint"

    def test_validate_returns_errors_without_raising(self):
        errors = validate_staff_constraint(
            {"start_time": at(8), "end_time": at(12), "preference": "neutral"}
        )
        assert errors == []


class TestStaffMember:
    """Tests for StaffMember."""

    @pytest.fixture
    def member(self):
        return StaffMember(
            name="Nurse A",
            rank=2,
            start_of_service=datetime(2020, 1, 15),
            qualifications=["RN", "ACLS"],
        )

    def test_sequences_stored_as_tuples(self, member):
        """Input lists are copied, not shared."""
        qualifications = ["RN"]
        m = StaffMember("Nurse B", 1, datetime(2020, 1, 1), qualifications)
        qualifications.append("ACLS")
        assert m.qualifications == ("RN",)
        assert member.constraints == ()

    def test_qualification_checks(self, member):
        assert member.has_qualification("RN")
        assert not member.has_qualification("rn")
        assert member.has_all_qualifications(["RN", "ACLS"])
        assert not member.has_all_qualifications(["RN", "CNA"])
        assert member.has_any_qualification(["CNA", "ACLS"])

    def test_years_of_service(self, member):
        years = member.years_of_service(as_of=datetime(2024, 1, 15))
        assert years == pytest.approx(4.0, abs=0.01)

    def test_years_of_service_never_negative(self, member):
        assert member.years_of_service(as_of=datetime(2019, 1, 1)) == 0.0

    def test_staff_id_is_name(self, member):
        assert member.staff_id == "Nurse A"

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"name": ""}, "name"),
            ({"name": 7}, "name"),
            ({"rank": -1}, "rank"),
            ({"rank": float("inf")}, "rank"),
            ({"rank": True}, "rank"),
            ({"start_of_service": "2020-01-01"}, "start_of_service"),
            ({"qualifications": "RN"}, "qualifications"),
            ({"qualifications": ["RN", 3]}, "qualifications[1]"),
        ],
    )
    def test_invalid_fields(self, kwargs, field):
        data = {"name": "Nurse A", "rank": 1, "start_of_service": datetime(2020, 1, 1)}
        data.update(kwargs)
        with pytest.raises(ConstructionError) as exc_info:
            StaffMember(**data)
        assert field in exc_info.value.fields


class TestStaffSlot:
    """Tests for StaffSlot."""

    @pytest.fixture
    def slot(self):
        return StaffSlot("Day RN", at(7), at(15), ["RN", "ACLS"])

    def test_fields_read_back(self, slot):
        assert slot.name == "Day RN"
        assert slot.required_qualifications == ("RN", "ACLS")
        assert slot.duration_hours == 8

    def test_is_within(self, slot):
        assert slot.is_within(at(7), at(15))
        assert not slot.is_within(at(8), at(20))

    def test_is_on_date(self, slot):
        assert slot.is_on_date(DAY.date())
        assert slot.is_on_date(at(23))
        assert not slot.is_on_date((DAY + timedelta(days=1)).date())

    def test_requirements(self, slot):
        assert slot.requires("RN")
        assert slot.requires_all_qualifications(["RN", "ACLS"])
        assert not slot.requires_all_qualifications(["RN", "CNA"])
        assert slot.requires_any_qualification(["CNA", "RN"])

    def test_invalid_window(self):
        with pytest.raises(ConstructionError) as exc_info:
            StaffSlot("Day RN", at(15), at(7))
        assert exc_info.value.fields == ["end_time"]


class TestStaffAssignment:
    """Tests for StaffAssignment and references."""

    def test_name_references(self):
        assignment = StaffAssignment("a1", "Nurse A", "Day RN", at(7), at(15))
        assert assignment.staff.kind is RefKind.NAME
        assert assignment.staff_name == "Nurse A"
        assert assignment.slot_name == "Day RN"
        assert assignment.duration_hours == 8

    def test_record_references(self):
        member = StaffMember("Nurse A", 1, datetime(2020, 1, 1))
        slot = StaffSlot("Day RN", at(7), at(15))
        assignment = StaffAssignment("a1", member, slot, at(7), at(15))
        assert assignment.staff == StaffRef.of(member)
        assert assignment.slot.kind is RefKind.RECORD
        assert assignment.staff_id == "Nurse A"
        assert assignment.slot_name == "Day RN"

    def test_named_and_record_refs_share_identity(self):
        member = StaffMember("Nurse A", 1, datetime(2020, 1, 1))
        assert StaffRef.named("Nurse A").staff_id == StaffRef.of(member).staff_id

    def test_metadata_copied(self):
        metadata = {"preference_score": 10}
        assignment = StaffAssignment("a1", "Nurse A", "Day RN", at(7), at(15), metadata)
        metadata["preference_score"] = -100
        assert assignment.preference_score == 10

    def test_preference_score_absent(self):
        assignment = StaffAssignment("a1", "Nurse A", "Day RN", at(7), at(15))
        assert assignment.preference_score is None

    def test_empty_staff_name_rejected(self):
        with pytest.raises(ConstructionError) as exc_info:
            StaffAssignment("a1", "  ", "Day RN", at(7), at(15))
        assert exc_info.value.fields == ["staff"]

    def test_wrong_ref_type_rejected(self):
        errors = validate_staff_assignment(
            {
                "id": "a1",
                "staff": 42,
                "slot": SlotRef.named("Day RN"),
                "start_time": at(7),
                "end_time": at(15),
                "metadata": {"preference_score": "high"},
            }
        )
        assert [e.field for e in errors] == ["staff", "metadata.preference_score"]


class TestScheduleRecords:
    """Tests for requirements, schedules and unfilled slots."""

    def test_requirement_converts_slot_mappings(self):
        requirement = ScheduleRequirement(
            id="req-1",
            schedule_start=at(0),
            schedule_end=at(24),
            staff_slots=[{"name": "Day RN", "start_time": at(7), "end_time": at(15)}],
        )
        assert isinstance(requirement.staff_slots[0], StaffSlot)
        assert requirement.display_name == "req-1"
        assert requirement.interval.duration_hours == 24

    def test_requirement_reports_nested_slot_errors(self):
        errors = validate_schedule_requirement(
            {
                "id": "req-1",
                "schedule_start": at(0),
                "schedule_end": at(24),
                "staff_slots": [{"name": "", "start_time": at(7), "end_time": at(15)}],
            }
        )
        assert [e.field for e in errors] == ["staff_slots[0].name"]

    def test_requirement_slot_with_unknown_key_rejected(self):
        with pytest.raises(ConstructionError) as exc_info:
            ScheduleRequirement(
                id="req-1",
                schedule_start=at(0),
                schedule_end=at(24),
                staff_slots=[
                    {"name": "Day RN", "start_time": at(7), "end_time": at(15), "ward": "4B"}
                ],
            )
        assert exc_info.value.fields == ["staff_slots[0].ward"]

    def test_schedule_may_hold_double_booking(self):
        """Conflicts are not a construction error."""
        schedule = Schedule(
            id="s1",
            schedule_start=at(0),
            schedule_end=at(24),
            assignments=[
                StaffAssignment("a1", "Nurse A", "Day", at(8), at(16)),
                StaffAssignment("a2", "Nurse A", "Cover", at(12), at(20)),
            ],
            name="Week 3",
        )
        assert schedule.total_assignments == 2
        assert schedule.display_name == "Week 3"

    def test_schedule_rejects_foreign_items(self):
        with pytest.raises(ConstructionError) as exc_info:
            Schedule(id="s1", schedule_start=at(0), schedule_end=at(24), assignments=["a1"])
        assert exc_info.value.fields == ["assignments[0]"]

    def test_unfilled_slot(self):
        unfilled = UnfilledSlot("Night RN", "No staff", True, FillStatus(needed=2, assigned=1))
        assert unfilled.slot_name == "Night RN"
        assert unfilled.fill_status.assigned == 1

    def test_fill_status_non_negative(self):
        with pytest.raises(ConstructionError):
            FillStatus(needed=-1, assigned=0)
