"""Domain models, time intervals and policies for staff scheduling."""

from rosterlens.domain.errors import ConstructionError, FieldError
from rosterlens.domain.interval import (
    Interval,
    Timed,
    contains,
    duration_hours,
    overlaps,
    point_in_interval,
)
from rosterlens.domain.models import (
    FillStatus,
    PreferenceLevel,
    RefKind,
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
    normalize_staff_id,
)
from rosterlens.domain.policies import (
    DefaultPreferencePolicy,
    HourTarget,
    PreferencePolicy,
    UtilizationBand,
)

__all__ = [
    # Errors
    "ConstructionError",
    "FieldError",
    # Intervals
    "Interval",
    "Timed",
    "contains",
    "duration_hours",
    "overlaps",
    "point_in_interval",
    # Models
    "FillStatus",
    "PreferenceLevel",
    "RefKind",
    "Schedule",
    "ScheduleRequirement",
    "SlotRef",
    "StaffAssignment",
    "StaffConstraint",
    "StaffId",
    "StaffMember",
    "StaffRef",
    "StaffSlot",
    "UnfilledSlot",
    "normalize_staff_id",
    # Policies
    "DefaultPreferencePolicy",
    "HourTarget",
    "PreferencePolicy",
    "UtilizationBand",
]
