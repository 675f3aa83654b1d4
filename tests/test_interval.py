"""Tests for half-open intervals and their predicates."""

from datetime import datetime, timedelta, timezone

import pytest

from rosterlens.domain.errors import ConstructionError
from rosterlens.domain.interval import (
    Interval,
    as_interval,
    check_interval,
    contains,
    duration_hours,
    overlaps,
    point_in_interval,
)

DAY = datetime(2024, 1, 15)


def at(hour: float) -> datetime:
    return DAY + timedelta(hours=hour)


class TestInterval:
    """Tests for Interval construction."""

    def test_valid_interval(self):
        """Start before end should construct."""
        interval = Interval(at(8), at(16))
        assert interval.start_time == at(8)
        assert interval.end_time == at(16)

    def test_empty_interval_rejected(self):
        """Zero-length windows are not intervals."""
        with pytest.raises(ConstructionError) as exc_info:
            Interval(at(8), at(8))
        assert exc_info.value.fields == ["end_time"]

    def test_inverted_interval_rejected(self):
        """End before start should fail."""
        with pytest.raises(ConstructionError):
            Interval(at(16), at(8))

    def test_non_datetime_rejected(self):
        """Both endpoints are reported when neither is a datetime."""
        with pytest.raises(ConstructionError) as exc_info:
            Interval("08:00", None)
        assert exc_info.value.fields == ["start_time", "end_time"]

    def test_construction_error_is_value_error(self):
        """Callers may catch ValueError."""
        with pytest.raises(ValueError):
            Interval(at(16), at(8))

    def test_mixed_timezone_awareness_rejected(self):
        """Naive and aware endpoints cannot be compared."""
        errors = check_interval(at(8), at(16).replace(tzinfo=timezone.utc))
        assert len(errors) == 1
        assert "timezone-aware" in errors[0].message

    def test_custom_field_names(self):
        """Errors carry the field names they were asked to use."""
        errors = check_interval(at(8), at(7), "schedule_start", "schedule_end")
        assert [e.field for e in errors] == ["schedule_end"]
        assert errors[0].message == "schedule_end must be after schedule_start"


class TestOverlaps:
    """Tests for the overlap predicate."""

    def test_reflexive(self):
        """Every interval overlaps itself."""
        a = Interval(at(8), at(9))
        assert overlaps(a, a)

    def test_symmetric(self):
        """Overlap does not depend on argument order."""
        pairs = [
            (Interval(at(8), at(16)), Interval(at(12), at(20))),
            (Interval(at(8), at(12)), Interval(at(13), at(17))),
            (Interval(at(8), at(20)), Interval(at(10), at(11))),
        ]
        for a, b in pairs:
            assert overlaps(a, b) == overlaps(b, a)

    def test_adjacent_do_not_overlap(self):
        """Back-to-back windows touch but do not overlap."""
        assert not overlaps(Interval(at(8), at(12)), Interval(at(12), at(16)))

    def test_nested_overlap(self):
        """A window inside another overlaps it."""
        assert Interval(at(8), at(20)).overlaps(Interval(at(10), at(11)))

    def test_disjoint(self):
        """Separated windows do not overlap."""
        assert not overlaps(Interval(at(8), at(12)), Interval(at(13), at(17)))


class TestContainment:
    """Tests for contains, point membership and duration."""

    def test_contains_is_inclusive(self):
        """A window contains itself."""
        outer = Interval(at(8), at(16))
        assert contains(outer, at(8), at(16))
        assert outer.contains(at(9), at(10))

    def test_contains_rejects_overhang(self):
        outer = Interval(at(8), at(16))
        assert not contains(outer, at(7), at(10))
        assert not contains(outer, at(15), at(17))

    def test_point_in_interval_half_open(self):
        """Start is inside, end is outside."""
        interval = Interval(at(8), at(16))
        assert point_in_interval(interval, at(8))
        assert interval.contains_point(at(15.5))
        assert not point_in_interval(interval, at(16))

    def test_duration_hours_fractional(self):
        assert duration_hours(Interval(at(8), at(9.5))) == 1.5
        assert Interval(at(0), at(36)).duration_hours == 36

    def test_intersection(self):
        a = Interval(at(8), at(16))
        b = Interval(at(12), at(20))
        assert a.intersection(b) == Interval(at(12), at(16))
        assert a.intersection(Interval(at(16), at(20))) is None

    def test_as_interval_copies_window(self):
        """Any timed record can be turned into an Interval."""
        original = Interval(at(1), at(2))
        assert as_interval(original) == original
