"""Tests for inclusive date-range algebra."""
import pytest
from datetime import date
from app.backend.services.intervals import (
    DateRange,
    booking_coverage,
    contains,
    find_gaps,
    intersect,
    overlaps,
    subtract,
)


def d(value: str) -> date:
    return date.fromisoformat(value)


def test_date_range_rejects_reversed_bounds():
    """A range may not end before it starts."""
    with pytest.raises(ValueError):
        DateRange(d("2025-01-10"), d("2025-01-09"))


def test_single_day_range():
    r = DateRange(d("2025-01-10"), d("2025-01-10"))
    assert r.day_count == 1
    assert r.exclusive_end == d("2025-01-11")
    assert list(r.iter_days()) == [d("2025-01-10")]


def test_booking_coverage_excludes_departure_day():
    """The departure day of a booking is not charged."""
    coverage = booking_coverage(d("2025-01-15"), d("2025-01-20"))
    assert coverage == DateRange(d("2025-01-15"), d("2025-01-19"))
    assert coverage.day_count == 5
    assert coverage.to_dict() == {"start_date": "2025-01-15", "end_date": "2025-01-20"}


def test_booking_coverage_rejects_same_day():
    with pytest.raises(ValueError):
        booking_coverage(d("2025-01-15"), d("2025-01-15"))


def test_overlaps_and_intersect_inclusive_boundaries():
    """Windows sharing only their boundary day overlap on that day."""
    a = DateRange(d("2025-01-01"), d("2025-06-30"))
    b = DateRange(d("2025-06-30"), d("2025-12-31"))
    c = DateRange(d("2025-07-01"), d("2025-12-31"))

    assert overlaps(a, b)
    assert intersect(a, b) == DateRange(d("2025-06-30"), d("2025-06-30"))
    assert not overlaps(a, c)
    assert intersect(a, c) is None


def test_contains():
    year = DateRange(d("2025-01-01"), d("2025-12-31"))
    assert contains(year, DateRange(d("2025-03-01"), d("2025-03-31")))
    assert not contains(year, DateRange(d("2024-12-31"), d("2025-01-05")))


def test_subtract_middle_splits_range():
    a = DateRange(d("2025-01-01"), d("2025-01-31"))
    b = DateRange(d("2025-01-10"), d("2025-01-20"))
    assert subtract(a, b) == [
        DateRange(d("2025-01-01"), d("2025-01-09")),
        DateRange(d("2025-01-21"), d("2025-01-31")),
    ]


def test_subtract_covering_range_leaves_nothing():
    a = DateRange(d("2025-01-10"), d("2025-01-20"))
    assert subtract(a, DateRange(d("2025-01-01"), d("2025-01-31"))) == []


def test_subtract_disjoint_range_is_noop():
    a = DateRange(d("2025-01-10"), d("2025-01-20"))
    assert subtract(a, DateRange(d("2025-02-01"), d("2025-02-05"))) == [a]


def test_find_gaps_reports_every_uncovered_piece():
    """Gaps are listed chronologically and never include covered days."""
    target = DateRange(d("2025-01-01"), d("2025-12-31"))
    covering = [
        DateRange(d("2025-07-01"), d("2025-09-30")),
        DateRange(d("2025-01-01"), d("2025-03-31")),
    ]
    assert find_gaps(target, covering) == [
        DateRange(d("2025-04-01"), d("2025-06-30")),
        DateRange(d("2025-10-01"), d("2025-12-31")),
    ]


def test_find_gaps_without_cover_is_whole_target():
    target = DateRange(d("2025-05-01"), d("2025-05-03"))
    assert find_gaps(target, []) == [target]
