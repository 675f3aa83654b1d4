"""Domain models for staff scheduling records.

This module contains the records the analysis layer works on: staff
members and their availability constraints, the slots a schedule needs
filled, the assignments pairing staff with slots, and the schedules that
collect them.

Every record validates itself on construction and raises
``ConstructionError`` listing each bad field. The ``validate_*`` functions
run the same checks over a raw field mapping and return the errors instead
of raising, for callers that want to report problems without building the
record.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, NewType, Optional, Union

from rosterlens.domain.errors import FieldError, raise_if_invalid
from rosterlens.domain.interval import Interval, check_interval, duration_hours

DAYS_PER_YEAR = 365.25

# Normalized staff identity. Every per-staff map is keyed by this type.
StaffId = NewType("StaffId", str)


def normalize_staff_id(name: str) -> StaffId:
    """Derive the identity key for a staff display name.

    Identity is exact-match on the name: two distinct people sharing a
    display name are merged, and "Nurse A" / "nurse a" are kept apart.
    """
    return StaffId(name)


class PreferenceLevel(Enum):
    """How a staff member feels about working during a window."""

    UNAVAILABLE = "unavailable"  # Cannot work
    NOT_PREFERRED = "not_preferred"  # Can work, would rather not
    NEUTRAL = "neutral"
    PREFERRED = "preferred"

    @property
    def rank(self) -> int:
        """Restrictiveness rank; higher is more restrictive."""
        return PREFERENCE_RANK[self]

    @classmethod
    def parse(cls, value: Union["PreferenceLevel", str]) -> "PreferenceLevel":
        """Accept a member or its string value.

        Raises:
            ValueError: If the value names no preference level.
        """
        if isinstance(value, cls):
            return value
        return cls(value)

    @classmethod
    def is_valid(cls, value: object) -> bool:
        """Check whether a value names a preference level."""
        try:
            cls.parse(value)
        except (TypeError, ValueError):
            return False
        return True


PREFERENCE_RANK = {
    PreferenceLevel.UNAVAILABLE: 3,
    PreferenceLevel.NOT_PREFERRED: 2,
    PreferenceLevel.NEUTRAL: 1,
    PreferenceLevel.PREFERRED: 0,
}

PREFERENCE_CHOICES = ", ".join(f"'{level.value}'" for level in PreferenceLevel)


class RefKind(Enum):
    """Which form a staff or slot reference was given in."""

    NAME = "name"
    RECORD = "record"


# --- Field checks shared by the validate_* functions -------------------------


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_name(value: object, name: str, errors: list[FieldError]) -> None:
    if not isinstance(value, str):
        errors.append(FieldError(name, f"{name} must be a string"))
    elif not value.strip():
        errors.append(FieldError(name, f"{name} cannot be empty"))


def _check_optional_str(value: object, name: str, errors: list[FieldError]) -> None:
    if value is not None and not isinstance(value, str):
        errors.append(FieldError(name, f"{name} must be a string if provided"))


def _check_datetime(value: object, name: str, errors: list[FieldError]) -> None:
    if not isinstance(value, datetime):
        errors.append(FieldError(name, f"{name} must be a datetime"))


def _is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple))


def _check_strings(value: object, name: str, errors: list[FieldError]) -> None:
    if not isinstance(value, (list, tuple, set, frozenset)):
        errors.append(FieldError(name, f"{name} must be a list"))
        return
    for index, item in enumerate(value):
        if not isinstance(item, str):
            errors.append(
                FieldError(
                    f"{name}[{index}]",
                    f"qualification at index {index} must be a string",
                )
            )


def _check_items(
    value: object,
    name: str,
    item_type: type,
    errors: list[FieldError],
) -> None:
    if not _is_sequence(value):
        errors.append(FieldError(name, f"{name} must be a list"))
        return
    for index, item in enumerate(value):
        if not isinstance(item, item_type):
            errors.append(
                FieldError(f"{name}[{index}]", f"must be a {item_type.__name__}")
            )


def _check_metadata(value: object, errors: list[FieldError]) -> None:
    if value is None:
        return
    if not isinstance(value, Mapping):
        errors.append(FieldError("metadata", "metadata must be a mapping if provided"))
        return
    score = value.get("preference_score")
    if score is not None and not _is_number(score):
        errors.append(
            FieldError("metadata.preference_score", "preference_score must be a number")
        )


# --- Records -----------------------------------------------------------------


@dataclass(frozen=True)
class StaffConstraint:
    """A window during which a staff member has a stated preference.

    Constraints for one person may overlap and even disagree; resolving
    them is the job of the constraint resolver.

    Attributes:
        start_time: Start of the window (inclusive).
        end_time: End of the window (exclusive).
        preference: Preference level during the window. A string value
            such as "unavailable" is accepted and converted.
        reason: Optional note, e.g. "School pickup".
    """

    start_time: datetime
    end_time: datetime
    preference: PreferenceLevel
    reason: Optional[str] = None

    def __post_init__(self):
        raise_if_invalid("StaffConstraint", validate_staff_constraint(vars(self)))
        object.__setattr__(self, "preference", PreferenceLevel.parse(self.preference))

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    @property
    def duration_hours(self) -> float:
        return duration_hours(self)

    @property
    def is_blocking(self) -> bool:
        """True for unavailable constraints."""
        return self.preference is PreferenceLevel.UNAVAILABLE


@dataclass(frozen=True)
class StaffMember:
    """A person who can be assigned to slots.

    Attributes:
        name: Display name; also the staff identity key.
        rank: Non-negative seniority or authority rank.
        start_of_service: When the member started.
        qualifications: Certifications held (e.g. "RN", "ACLS").
        constraints: Availability constraints for this member.
    """

    name: str
    rank: float
    start_of_service: datetime
    qualifications: tuple[str, ...] = ()
    constraints: tuple[StaffConstraint, ...] = ()

    def __post_init__(self):
        raise_if_invalid("StaffMember", validate_staff_member(vars(self)))
        object.__setattr__(self, "qualifications", tuple(self.qualifications))
        object.__setattr__(self, "constraints", tuple(self.constraints))

    @property
    def staff_id(self) -> StaffId:
        return normalize_staff_id(self.name)

    def years_of_service(self, as_of: Optional[datetime] = None) -> float:
        """Years since start of service, never negative."""
        as_of = as_of or datetime.now(self.start_of_service.tzinfo)
        days = (as_of - self.start_of_service).total_seconds() / 86400
        return max(0.0, days / DAYS_PER_YEAR)

    def has_qualification(self, qualification: str) -> bool:
        return qualification in self.qualifications

    def has_all_qualifications(self, qualifications) -> bool:
        return all(q in self.qualifications for q in qualifications)

    def has_any_qualification(self, qualifications) -> bool:
        return any(q in self.qualifications for q in qualifications)


@dataclass(frozen=True)
class StaffSlot:
    """A position that needs filling for a window of time.

    Attributes:
        name: Slot name, e.g. "Morning Shift Nurse".
        start_time: Start of the slot (inclusive).
        end_time: End of the slot (exclusive).
        required_qualifications: Qualifications the filler must hold.
    """

    name: str
    start_time: datetime
    end_time: datetime
    required_qualifications: tuple[str, ...] = ()

    def __post_init__(self):
        raise_if_invalid("StaffSlot", validate_staff_slot(vars(self)))
        object.__setattr__(
            self, "required_qualifications", tuple(self.required_qualifications)
        )

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    @property
    def duration_hours(self) -> float:
        return duration_hours(self)

    def is_within(self, window_start: datetime, window_end: datetime) -> bool:
        """Check the slot lies inside a window (inclusive)."""
        return self.start_time >= window_start and self.end_time <= window_end

    def is_on_date(self, day: date) -> bool:
        """Check the slot starts on a calendar day (time ignored)."""
        if isinstance(day, datetime):
            day = day.date()
        return self.start_time.date() == day

    def requires(self, qualification: str) -> bool:
        return qualification in self.required_qualifications

    def requires_all_qualifications(self, qualifications) -> bool:
        return all(q in self.required_qualifications for q in qualifications)

    def requires_any_qualification(self, qualifications) -> bool:
        return any(q in self.required_qualifications for q in qualifications)


@dataclass(frozen=True)
class StaffRef:
    """Reference to a staff member, either by name or by full record."""

    kind: RefKind
    name: Optional[str] = None
    member: Optional[StaffMember] = None

    @classmethod
    def named(cls, name: str) -> "StaffRef":
        return cls(RefKind.NAME, name=name)

    @classmethod
    def of(cls, member: StaffMember) -> "StaffRef":
        return cls(RefKind.RECORD, member=member)

    @classmethod
    def coerce(cls, value: Union["StaffRef", StaffMember, str]) -> "StaffRef":
        """Wrap a name or record given at a construction boundary."""
        if isinstance(value, cls):
            return value
        if isinstance(value, StaffMember):
            return cls.of(value)
        return cls.named(value)

    @property
    def display_name(self) -> str:
        if self.kind is RefKind.RECORD:
            return self.member.name
        return self.name

    @property
    def staff_id(self) -> StaffId:
        return normalize_staff_id(self.display_name)

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class SlotRef:
    """Reference to a staff slot, either by name or by full record."""

    kind: RefKind
    name: Optional[str] = None
    slot: Optional[StaffSlot] = None

    @classmethod
    def named(cls, name: str) -> "SlotRef":
        return cls(RefKind.NAME, name=name)

    @classmethod
    def of(cls, slot: StaffSlot) -> "SlotRef":
        return cls(RefKind.RECORD, slot=slot)

    @classmethod
    def coerce(cls, value: Union["SlotRef", StaffSlot, str]) -> "SlotRef":
        """Wrap a name or record given at a construction boundary."""
        if isinstance(value, cls):
            return value
        if isinstance(value, StaffSlot):
            return cls.of(value)
        return cls.named(value)

    @property
    def display_name(self) -> str:
        if self.kind is RefKind.RECORD:
            return self.slot.name
        return self.name

    def __str__(self) -> str:
        return self.display_name


StaffLike = Union[StaffRef, StaffMember, str]
SlotLike = Union[SlotRef, StaffSlot, str]


@dataclass(frozen=True)
class StaffAssignment:
    """A committed pairing of one staff member to one slot.

    The assignment window may differ from the slot's own window, e.g. for
    a partial cover.

    Attributes:
        id: Unique assignment identifier.
        staff: The staff member (name, StaffMember or StaffRef).
        slot: The slot being filled (name, StaffSlot or SlotRef).
        start_time: Start of the assignment (inclusive).
        end_time: End of the assignment (exclusive).
        metadata: Free-form details; ``preference_score`` is read back by
            the analysis layer when present.
    """

    id: str
    staff: StaffRef
    slot: SlotRef
    start_time: datetime
    end_time: datetime
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        raise_if_invalid("StaffAssignment", validate_staff_assignment(vars(self)))
        object.__setattr__(self, "staff", StaffRef.coerce(self.staff))
        object.__setattr__(self, "slot", SlotRef.coerce(self.slot))
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    @property
    def duration_hours(self) -> float:
        return duration_hours(self)

    @property
    def staff_name(self) -> str:
        return self.staff.display_name

    @property
    def staff_id(self) -> StaffId:
        return self.staff.staff_id

    @property
    def slot_name(self) -> str:
        return self.slot.display_name

    @property
    def preference_score(self) -> Optional[float]:
        """Score recorded when the assignment was made, if any."""
        return self.metadata.get("preference_score")


@dataclass(frozen=True)
class FillStatus:
    """How many staff a slot needed versus how many it got."""

    needed: int
    assigned: int

    def __post_init__(self):
        errors = []
        for name in ("needed", "assigned"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(FieldError(name, f"{name} must be a non-negative integer"))
        raise_if_invalid("FillStatus", errors)


@dataclass(frozen=True)
class UnfilledSlot:
    """A slot the schedule could not fill, and why."""

    slot: SlotRef
    reason: str
    partially_filled: bool = False
    fill_status: Optional[FillStatus] = None

    def __post_init__(self):
        raise_if_invalid("UnfilledSlot", validate_unfilled_slot(vars(self)))
        object.__setattr__(self, "slot", SlotRef.coerce(self.slot))

    @property
    def slot_name(self) -> str:
        return self.slot.display_name


@dataclass(frozen=True)
class ScheduleRequirement:
    """The full set of slots a schedule period needs filled.

    Attributes:
        id: Unique identifier.
        schedule_start: Start of the schedule window.
        schedule_end: End of the schedule window.
        staff_slots: Slots to fill. Field mappings are converted to
            StaffSlot records.
        name: Optional label, e.g. "Holiday Coverage".
        metadata: Free-form details.
    """

    id: str
    schedule_start: datetime
    schedule_end: datetime
    staff_slots: tuple[StaffSlot, ...] = ()
    name: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        raise_if_invalid(
            "ScheduleRequirement", validate_schedule_requirement(vars(self))
        )
        slots = tuple(
            slot if isinstance(slot, StaffSlot) else StaffSlot(**slot)
            for slot in self.staff_slots
        )
        object.__setattr__(self, "staff_slots", slots)
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    @property
    def start_time(self) -> datetime:
        return self.schedule_start

    @property
    def end_time(self) -> datetime:
        return self.schedule_end

    @property
    def interval(self) -> Interval:
        return Interval(self.schedule_start, self.schedule_end)

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class Schedule:
    """A schedule period with its assignments and unfilled slots.

    A schedule may be built with double-booked staff; detecting that is
    the conflict detector's job, not the constructor's.

    Attributes:
        id: Unique identifier.
        schedule_start: Start of the schedule window.
        schedule_end: End of the schedule window.
        assignments: Committed assignments (order is not significant).
        unfilled_slots: Slots that received no assignment.
        name: Optional label.
        source_requirement: Id of the requirement this schedule answers.
        metadata: Free-form details such as "algorithm" or "generated_at".
    """

    id: str
    schedule_start: datetime
    schedule_end: datetime
    assignments: tuple[StaffAssignment, ...] = ()
    unfilled_slots: tuple[UnfilledSlot, ...] = ()
    name: Optional[str] = None
    source_requirement: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        raise_if_invalid("Schedule", validate_schedule(vars(self)))
        object.__setattr__(self, "assignments", tuple(self.assignments))
        object.__setattr__(self, "unfilled_slots", tuple(self.unfilled_slots))
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    @property
    def start_time(self) -> datetime:
        return self.schedule_start

    @property
    def end_time(self) -> datetime:
        return self.schedule_end

    @property
    def interval(self) -> Interval:
        return Interval(self.schedule_start, self.schedule_end)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def total_assignments(self) -> int:
        return len(self.assignments)

    @property
    def total_unfilled_slots(self) -> int:
        return len(self.unfilled_slots)


# --- Validation over raw field mappings --------------------------------------


def validate_staff_constraint(data: Mapping[str, Any]) -> list[FieldError]:
    """Check the fields of a staff constraint.

    Args:
        data: Mapping with start_time, end_time, preference and an
            optional reason.

    Returns:
        Field errors, empty when the constraint is valid.
    """
    errors = check_interval(data.get("start_time"), data.get("end_time"))

    if not PreferenceLevel.is_valid(data.get("preference")):
        errors.append(
            FieldError("preference", f"preference must be one of: {PREFERENCE_CHOICES}")
        )

    reason = data.get("reason")
    if reason is not None and not isinstance(reason, str):
        errors.append(FieldError("reason", "reason must be a string if provided"))

    return errors


def validate_staff_member(data: Mapping[str, Any]) -> list[FieldError]:
    """Check the fields of a staff member."""
    errors = []
    _check_name(data.get("name"), "name", errors)

    rank = data.get("rank")
    if not _is_number(rank):
        errors.append(FieldError("rank", "rank must be a number"))
    elif not math.isfinite(rank):
        errors.append(FieldError("rank", "rank must be a finite number"))
    elif rank < 0:
        errors.append(FieldError("rank", "rank cannot be negative"))

    _check_datetime(data.get("start_of_service"), "start_of_service", errors)
    _check_strings(data.get("qualifications", ()), "qualifications", errors)

    constraints = data.get("constraints")
    if constraints is not None:
        _check_items(constraints, "constraints", StaffConstraint, errors)

    return errors


def validate_staff_slot(data: Mapping[str, Any]) -> list[FieldError]:
    """Check the fields of a staff slot."""
    errors = []
    _check_name(data.get("name"), "name", errors)
    errors.extend(check_interval(data.get("start_time"), data.get("end_time")))
    _check_strings(
        data.get("required_qualifications", ()), "required_qualifications", errors
    )
    return errors


def _check_ref(
    value: object,
    name: str,
    ref_type: type,
    record_type: type,
    errors: list[FieldError],
) -> None:
    label = record_type.__name__
    message = f"{name} must be a non-empty name or {label} record"
    if isinstance(value, ref_type):
        target = value.member if ref_type is StaffRef else value.slot
        if value.kind is RefKind.RECORD and not isinstance(target, record_type):
            errors.append(FieldError(name, message))
        elif value.kind is RefKind.NAME and not (
            isinstance(value.name, str) and value.name.strip()
        ):
            errors.append(FieldError(name, message))
    elif isinstance(value, record_type):
        return
    elif not (isinstance(value, str) and value.strip()):
        errors.append(FieldError(name, message))


def validate_staff_assignment(data: Mapping[str, Any]) -> list[FieldError]:
    """Check the fields of a staff assignment."""
    errors = []
    _check_name(data.get("id"), "id", errors)
    _check_ref(data.get("staff"), "staff", StaffRef, StaffMember, errors)
    _check_ref(data.get("slot"), "slot", SlotRef, StaffSlot, errors)
    errors.extend(check_interval(data.get("start_time"), data.get("end_time")))
    _check_metadata(data.get("metadata"), errors)
    return errors


def validate_unfilled_slot(data: Mapping[str, Any]) -> list[FieldError]:
    """Check the fields of an unfilled slot record."""
    errors = []
    _check_ref(data.get("slot"), "slot", SlotRef, StaffSlot, errors)
    if not isinstance(data.get("reason"), str):
        errors.append(FieldError("reason", "reason must be a string"))
    if not isinstance(data.get("partially_filled", False), bool):
        errors.append(FieldError("partially_filled", "partially_filled must be a bool"))
    fill_status = data.get("fill_status")
    if fill_status is not None and not isinstance(fill_status, FillStatus):
        errors.append(FieldError("fill_status", "fill_status must be a FillStatus"))
    return errors


_STAFF_SLOT_FIELDS = frozenset(
    ("name", "start_time", "end_time", "required_qualifications")
)


def validate_schedule_requirement(data: Mapping[str, Any]) -> list[FieldError]:
    """Check the fields of a schedule requirement.

    Slots given as field mappings are validated in place, with their
    errors reported as ``staff_slots[i].<field>``.
    """
    errors = []
    _check_name(data.get("id"), "id", errors)
    _check_optional_str(data.get("name"), "name", errors)
    errors.extend(
        check_interval(
            data.get("schedule_start"),
            data.get("schedule_end"),
            "schedule_start",
            "schedule_end",
        )
    )

    slots = data.get("staff_slots", ())
    if not _is_sequence(slots):
        errors.append(FieldError("staff_slots", "staff_slots must be a list"))
    else:
        for index, slot in enumerate(slots):
            if isinstance(slot, StaffSlot):
                continue
            if isinstance(slot, Mapping):
                for key in sorted(set(slot) - _STAFF_SLOT_FIELDS, key=str):
                    errors.append(
                        FieldError(f"staff_slots[{index}].{key}", "unknown field")
                    )
                for error in validate_staff_slot(slot):
                    errors.append(
                        FieldError(f"staff_slots[{index}].{error.field}", error.message)
                    )
            else:
                errors.append(
                    FieldError(f"staff_slots[{index}]", "must be a StaffSlot")
                )

    _check_metadata(data.get("metadata"), errors)
    return errors


def validate_schedule(data: Mapping[str, Any]) -> list[FieldError]:
    """Check the fields of a schedule."""
    errors = []
    _check_name(data.get("id"), "id", errors)
    _check_optional_str(data.get("name"), "name", errors)
    _check_optional_str(data.get("source_requirement"), "source_requirement", errors)
    errors.extend(
        check_interval(
            data.get("schedule_start"),
            data.get("schedule_end"),
            "schedule_start",
            "schedule_end",
        )
    )
    _check_items(data.get("assignments", ()), "assignments", StaffAssignment, errors)
    _check_items(data.get("unfilled_slots", ()), "unfilled_slots", UnfilledSlot, errors)
    _check_metadata(data.get("metadata"), errors)
    return errors
