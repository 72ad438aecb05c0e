"""Date-range algebra over whole calendar days.

Ranges are inclusive on both ends, matching how rate validity windows are
stored. Bookings use an exclusive end (nights model) and are converted with
``booking_coverage`` before being compared against rates.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, List, Optional


ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, order=True)
class DateRange:
    """Inclusive range of calendar days ``[start, end]``."""
    
    start: date
    end: date
    
    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"start must not be after end: {self.start} > {self.end}")
    
    @property
    def day_count(self) -> int:
        return (self.end - self.start).days + 1
    
    @property
    def exclusive_end(self) -> date:
        """Day after the last covered day."""
        return self.end + ONE_DAY
    
    def iter_days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += ONE_DAY
    
    def contains_day(self, day: date) -> bool:
        return self.start <= day <= self.end
    
    def to_dict(self) -> dict:
        """Half-open representation used in API payloads."""
        return {"start_date": self.start.isoformat(), "end_date": self.exclusive_end.isoformat()}
    
    def __str__(self) -> str:
        return f"{self.start.isoformat()} and {self.end.isoformat()}"


def booking_coverage(start_date: date, end_date: date) -> DateRange:
    """Days charged for a booking whose ``end_date`` is the (exclusive) departure day."""
    if start_date >= end_date:
        raise ValueError(f"start_date must be before end_date: {start_date} >= {end_date}")
    return DateRange(start_date, end_date - ONE_DAY)


def overlaps(a: DateRange, b: DateRange) -> bool:
    return a.start <= b.end and b.start <= a.end


def contains(outer: DateRange, inner: DateRange) -> bool:
    return outer.start <= inner.start and inner.end <= outer.end


def intersect(a: DateRange, b: DateRange) -> Optional[DateRange]:
    if not overlaps(a, b):
        return None
    return DateRange(max(a.start, b.start), min(a.end, b.end))


def subtract(a: DateRange, b: DateRange) -> List[DateRange]:
    """Parts of ``a`` not covered by ``b``, in chronological order."""
    overlap = intersect(a, b)
    if overlap is None:
        return [a]
    
    remainder = []
    if a.start < overlap.start:
        remainder.append(DateRange(a.start, overlap.start - ONE_DAY))
    if overlap.end < a.end:
        remainder.append(DateRange(overlap.end + ONE_DAY, a.end))
    return remainder


def sort_by_start(ranges: Iterable[DateRange]) -> List[DateRange]:
    return sorted(ranges, key=lambda r: (r.start, r.end))


def find_gaps(target: DateRange, covering: Iterable[DateRange]) -> List[DateRange]:
    """Sub-ranges of ``target`` covered by none of ``covering``."""
    uncovered = [target]
    for cover in sort_by_start(covering):
        next_uncovered = []
        for piece in uncovered:
            next_uncovered.extend(subtract(piece, cover))
        uncovered = next_uncovered
        if not uncovered:
            break
    return sort_by_start(uncovered)
