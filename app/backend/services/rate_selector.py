"""Rate selection: which rate record owns which days of a booking."""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
from app.backend.db.models import RateType
from app.backend.schemas.pricing import RateRecord
from app.backend.services.errors import InternalInconsistencyError
from app.backend.services.intervals import DateRange, find_gaps, intersect, subtract, sort_by_start


@dataclass(frozen=True)
class RateClaim:
    """Sub-range of the booking won by a single rate."""
    period: DateRange
    rate: RateRecord


@dataclass(frozen=True)
class RateOverlap:
    """Two same-type rates whose windows share ``period``; ``winner_id`` owns it."""
    room_type_id: str
    rate_type: RateType
    superseded_id: str
    winner_id: str
    period: DateRange
    
    @property
    def warning(self) -> str:
        return (
            f"OVERLAPPING_RATES_WARNING: overlapping rates detected for room_type "
            f"{self.room_type_id} between {self.period} "
            f"({self.winner_id} supersedes {self.superseded_id})"
        )
    
    def to_dict(self) -> dict:
        return {
            "room_type_id": self.room_type_id,
            "rate_type": self.rate_type.value,
            "superseded_rate_id": self.superseded_id,
            "winning_rate_id": self.winner_id,
            "start_date": self.period.start.isoformat(),
            "end_date": self.period.end.isoformat(),
        }


@dataclass
class Resolution:
    """Winning claims for one rate type over the booking coverage."""
    room_type_id: str
    rate_type: RateType
    claims: List[RateClaim] = field(default_factory=list)
    overlaps: List[RateOverlap] = field(default_factory=list)
    
    @property
    def warnings(self) -> List[str]:
        return [overlap.warning for overlap in self.overlaps]


def rate_window(rate: RateRecord) -> DateRange:
    """Inclusive validity window of a rate."""
    if rate.effective_date > rate.end_date:
        raise InternalInconsistencyError(
            f"Rate {rate.rate_id} ends before it becomes effective",
            {"rate_id": rate.rate_id}
        )
    return DateRange(rate.effective_date, rate.end_date)


def priority_key(rate: RateRecord) -> Tuple:
    """Ascending priority: the later effective date wins, then later end date, then rate id."""
    return (rate.effective_date, rate.end_date, rate.rate_id)


def candidate_rates(rates: Iterable[RateRecord], rate_type: RateType, coverage: DateRange) -> List[RateRecord]:
    """Rates of ``rate_type`` whose window intersects ``coverage``, lowest priority first."""
    matching = [
        rate for rate in rates
        if rate.rate_type == rate_type and intersect(rate_window(rate), coverage) is not None
    ]
    return sorted(matching, key=priority_key)


def fully_covers(rates: Iterable[RateRecord], rate_type: RateType, coverage: DateRange) -> bool:
    windows = [rate_window(rate) for rate in candidate_rates(rates, rate_type, coverage)]
    return bool(windows) and not find_gaps(coverage, windows)


def _pairwise_overlaps(ordered: List[RateRecord], within: Optional[DateRange] = None) -> List[RateOverlap]:
    overlaps = []
    for index, earlier in enumerate(ordered):
        for later in ordered[index + 1:]:
            shared = intersect(rate_window(earlier), rate_window(later))
            if shared is not None and within is not None:
                shared = intersect(shared, within)
            if shared is None:
                continue
            overlaps.append(RateOverlap(
                room_type_id=later.room_type_id,
                rate_type=later.rate_type,
                superseded_id=earlier.rate_id,
                winner_id=later.rate_id,
                period=shared,
            ))
    return overlaps


def resolve(
    rates: Iterable[RateRecord],
    rate_type: RateType,
    coverage: DateRange,
    room_type_id: str
) -> Resolution:
    """
    Assign every day of ``coverage`` to at most one rate of ``rate_type``.
    
    Rates are processed from highest to lowest priority; each claims whatever
    part of its window is still unclaimed, so an overlap always goes to the
    rate with the later ``effective_date``.
    
    Args:
        rates: All rate records of the room type
        rate_type: Granularity to resolve
        coverage: Inclusive range of charged days
        room_type_id: Room type the rates belong to (for warnings)
    
    Returns:
        Resolution with chronologically ordered claims and overlap notices
    """
    candidates = candidate_rates(rates, rate_type, coverage)
    
    claims: List[RateClaim] = []
    claimed: List[DateRange] = []
    for rate in reversed(candidates):
        window = intersect(rate_window(rate), coverage)
        pieces = [window]
        for taken in claimed:
            pieces = [rest for piece in pieces for rest in subtract(piece, taken)]
        claims.extend(RateClaim(piece, rate) for piece in pieces)
        claimed.append(window)
    
    claims.sort(key=lambda claim: (claim.period.start, claim.period.end))
    return Resolution(
        room_type_id=room_type_id,
        rate_type=rate_type,
        claims=claims,
        overlaps=_pairwise_overlaps(candidates, coverage),
    )


def find_overlaps(rates: Iterable[RateRecord]) -> List[RateOverlap]:
    """Every overlapping same-type pair in a rate set, grouped by room type and rate type."""
    groups: Dict[Tuple[str, RateType], List[RateRecord]] = defaultdict(list)
    for rate in rates:
        groups[(rate.room_type_id, rate.rate_type)].append(rate)
    
    overlaps = []
    for key in sorted(groups, key=lambda k: (k[0], k[1].value)):
        overlaps.extend(_pairwise_overlaps(sorted(groups[key], key=priority_key)))
    return sorted(overlaps, key=lambda o: (o.room_type_id, o.rate_type.value, o.period.start))


def coverage_gaps(rates: Iterable[RateRecord], rate_type: RateType, coverage: DateRange) -> List[DateRange]:
    """Days of ``coverage`` with no rate of ``rate_type``."""
    windows = [rate_window(rate) for rate in candidate_rates(rates, rate_type, coverage)]
    return sort_by_start(find_gaps(coverage, windows))
