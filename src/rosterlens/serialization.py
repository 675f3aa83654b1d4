"""JSON boundary: parse request bodies into records and render results.

Incoming documents use camelCase keys and ISO-8601 timestamp strings, e.g.::

    {
      "staff": [{"name": "Nurse A", "rank": 2, "startOfService": "2020-01-06",
                 "qualifications": ["RN"], "constraints": [...]}],
      "requirement": {"id": "req-1", "scheduleStart": "...", "staffSlots": [...]},
      "schedule": {"id": "s-1", "scheduleStart": "...", "assignments": [...]}
    }

Parsing errors are reported as ConstructionError, the same error the
records raise themselves.
"""

import dataclasses
import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from rosterlens.domain.errors import ConstructionError, FieldError
from rosterlens.domain.interval import Interval
from rosterlens.domain.models import (
    FillStatus,
    Schedule,
    ScheduleRequirement,
    SlotRef,
    StaffAssignment,
    StaffConstraint,
    StaffId,
    StaffMember,
    StaffRef,
    StaffSlot,
    UnfilledSlot,
)

_CAMEL_BOUNDARY = re.compile(r"_([a-z])")


def to_camel(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string into an aware datetime.

    A trailing ``Z`` means UTC, and so does a missing offset, so every
    timestamp read from a document can be compared with every other.

    Raises:
        ValueError: If the value is not a parseable timestamp string.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO-8601 string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _timestamp(
    data: Mapping[str, Any], key: str, errors: list[FieldError]
) -> Optional[datetime]:
    try:
        return parse_timestamp(data.get(key))
    except ValueError:
        errors.append(FieldError(key, f"{key} must be an ISO-8601 timestamp"))
        return None


def _require_mapping(record_type: str, data: Any) -> None:
    if not isinstance(data, Mapping):
        raise ConstructionError(
            record_type, [FieldError("root", f"{record_type} must be an object")]
        )


def constraint_from_dict(data: Mapping[str, Any]) -> StaffConstraint:
    _require_mapping("StaffConstraint", data)
    errors: list[FieldError] = []
    start = _timestamp(data, "startTime", errors)
    end = _timestamp(data, "endTime", errors)
    if errors:
        raise ConstructionError("StaffConstraint", errors)
    return StaffConstraint(
        start_time=start,
        end_time=end,
        preference=data.get("preference"),
        reason=data.get("reason"),
    )


def member_from_dict(data: Mapping[str, Any]) -> StaffMember:
    _require_mapping("StaffMember", data)
    errors: list[FieldError] = []
    start_of_service = _timestamp(data, "startOfService", errors)
    if errors:
        raise ConstructionError("StaffMember", errors)
    return StaffMember(
        name=data.get("name"),
        rank=data.get("rank"),
        start_of_service=start_of_service,
        qualifications=data.get("qualifications", []),
        constraints=[constraint_from_dict(c) for c in data.get("constraints") or []],
    )


def slot_from_dict(data: Mapping[str, Any]) -> StaffSlot:
    _require_mapping("StaffSlot", data)
    errors: list[FieldError] = []
    start = _timestamp(data, "startTime", errors)
    end = _timestamp(data, "endTime", errors)
    if errors:
        raise ConstructionError("StaffSlot", errors)
    return StaffSlot(
        name=data.get("name"),
        start_time=start,
        end_time=end,
        required_qualifications=data.get("requiredQualifications", []),
    )


def _staff_ref(value: Any) -> Union[StaffRef, str]:
    if isinstance(value, Mapping):
        return StaffRef.of(member_from_dict(value))
    return value


def _slot_ref(value: Any) -> Union[SlotRef, str]:
    if isinstance(value, Mapping):
        return SlotRef.of(slot_from_dict(value))
    return value


def _metadata(data: Mapping[str, Any]) -> dict[str, Any]:
    metadata = dict(data.get("metadata") or {})
    if "preferenceScore" in metadata:
        metadata["preference_score"] = metadata.pop("preferenceScore")
    return metadata


def assignment_from_dict(data: Mapping[str, Any]) -> StaffAssignment:
    _require_mapping("StaffAssignment", data)
    errors: list[FieldError] = []
    start = _timestamp(data, "startTime", errors)
    end = _timestamp(data, "endTime", errors)
    if errors:
        raise ConstructionError("StaffAssignment", errors)
    return StaffAssignment(
        id=data.get("id"),
        staff=_staff_ref(data.get("staffMember")),
        slot=_slot_ref(data.get("staffSlot")),
        start_time=start,
        end_time=end,
        metadata=_metadata(data),
    )


def unfilled_slot_from_dict(data: Mapping[str, Any]) -> UnfilledSlot:
    _require_mapping("UnfilledSlot", data)
    fill_status = data.get("fillStatus")
    if fill_status is not None:
        if not isinstance(fill_status, Mapping):
            raise ConstructionError(
                "UnfilledSlot", [FieldError("fillStatus", "fillStatus must be an object")]
            )
        fill_status = FillStatus(
            needed=fill_status.get("needed"), assigned=fill_status.get("assigned")
        )
    return UnfilledSlot(
        slot=_slot_ref(data.get("slot")),
        reason=data.get("reason"),
        partially_filled=data.get("partiallyFilled", False),
        fill_status=fill_status,
    )


def requirement_from_dict(data: Mapping[str, Any]) -> ScheduleRequirement:
    _require_mapping("ScheduleRequirement", data)
    errors: list[FieldError] = []
    start = _timestamp(data, "scheduleStart", errors)
    end = _timestamp(data, "scheduleEnd", errors)
    if errors:
        raise ConstructionError("ScheduleRequirement", errors)
    return ScheduleRequirement(
        id=data.get("id"),
        schedule_start=start,
        schedule_end=end,
        staff_slots=[slot_from_dict(s) for s in data.get("staffSlots") or []],
        name=data.get("name"),
        metadata=dict(data.get("metadata") or {}),
    )


def schedule_from_dict(data: Mapping[str, Any]) -> Schedule:
    _require_mapping("Schedule", data)
    errors: list[FieldError] = []
    start = _timestamp(data, "scheduleStart", errors)
    end = _timestamp(data, "scheduleEnd", errors)
    if errors:
        raise ConstructionError("Schedule", errors)
    return Schedule(
        id=data.get("id"),
        schedule_start=start,
        schedule_end=end,
        assignments=[assignment_from_dict(a) for a in data.get("assignments") or []],
        unfilled_slots=[
            unfilled_slot_from_dict(u) for u in data.get("unfilledSlots") or []
        ],
        name=data.get("name"),
        source_requirement=data.get("sourceRequirement"),
        metadata=dict(data.get("metadata") or {}),
    )


@dataclass
class Document:
    """The records found in one input document."""

    staff: list[StaffMember] = field(default_factory=list)
    requirement: Optional[ScheduleRequirement] = None
    schedule: Optional[Schedule] = None

    def members_by_id(self) -> dict[StaffId, StaffMember]:
        return {member.staff_id: member for member in self.staff}

    def constraints_by_staff(self) -> dict[StaffId, tuple[StaffConstraint, ...]]:
        """Constraints per listed member, empty for members without any."""
        return {member.staff_id: member.constraints for member in self.staff}


def document_from_dict(data: Mapping[str, Any]) -> Document:
    """Parse a document holding any of staff, requirement and schedule."""
    _require_mapping("Document", data)
    requirement = data.get("requirement")
    schedule = data.get("schedule")
    return Document(
        staff=[member_from_dict(m) for m in data.get("staff") or []],
        requirement=requirement_from_dict(requirement) if requirement else None,
        schedule=schedule_from_dict(schedule) if schedule else None,
    )


def load_document(path: Union[str, Path]) -> Document:
    with open(path, encoding="utf-8") as f:
        return document_from_dict(json.load(f))


def to_jsonable(value: Any) -> Any:
    """Convert analysis output into JSON-ready data.

    Dataclasses become objects with camelCase keys, enums their values,
    timestamps ISO strings, references their display names. Maps keyed by
    staff identity or preference level become plain objects.
    """
    if isinstance(value, (StaffRef, SlotRef)):
        return value.display_name
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Interval):
        return {"startTime": value.start_time.isoformat(), "endTime": value.end_time.isoformat()}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            to_camel(f.name): to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def dumps(value: Any, indent: Optional[int] = 2) -> str:
    return json.dumps(to_jsonable(value), indent=indent)
