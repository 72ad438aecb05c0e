"""Partition a booking into priced segments and uncovered gaps."""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional
from app.backend.schemas.pricing import RateRecord
from app.backend.services.errors import InternalInconsistencyError, RateGapError
from app.backend.services.intervals import DateRange, ONE_DAY
from app.backend.services.rate_selector import RateClaim, Resolution


@dataclass(frozen=True)
class Segment:
    period: DateRange
    rate: RateRecord
    
    @property
    def days(self) -> int:
        return self.period.day_count


@dataclass(frozen=True)
class Gap:
    period: DateRange


@dataclass
class Segmentation:
    segments: List[Segment] = field(default_factory=list)
    gaps: List[Gap] = field(default_factory=list)
    
    @property
    def complete(self) -> bool:
        return not self.gaps


def _day_owners(coverage: DateRange, claims: List[RateClaim]) -> Dict[date, RateRecord]:
    owners: Dict[date, RateRecord] = {}
    for claim in claims:
        for day in claim.period.iter_days():
            if not coverage.contains_day(day):
                raise InternalInconsistencyError(
                    f"Rate {claim.rate.rate_id} claims {day} outside the booking",
                    {"rate_id": claim.rate.rate_id, "day": day.isoformat()}
                )
            if day in owners:
                raise InternalInconsistencyError(
                    f"Rates {owners[day].rate_id} and {claim.rate.rate_id} both claim {day}",
                    {"rate_ids": [owners[day].rate_id, claim.rate.rate_id], "day": day.isoformat()}
                )
            owners[day] = claim.rate
    return owners


def walk(coverage: DateRange, claims: List[RateClaim]) -> Segmentation:
    """Walk ``coverage`` day by day, grouping maximal runs with the same owner."""
    owners = _day_owners(coverage, claims)
    result = Segmentation()
    
    def close(run_start: date, run_end: date, rate: Optional[RateRecord]) -> None:
        period = DateRange(run_start, run_end)
        if rate is None:
            result.gaps.append(Gap(period))
        else:
            result.segments.append(Segment(period, rate))
    
    run_start = coverage.start
    run_rate = owners.get(coverage.start)
    for day in coverage.iter_days():
        rate = owners.get(day)
        same_owner = (rate is None and run_rate is None) or (
            rate is not None and run_rate is not None and rate.rate_id == run_rate.rate_id
        )
        if same_owner:
            continue
        close(run_start, day - ONE_DAY, run_rate)
        run_start, run_rate = day, rate
    close(run_start, coverage.end, run_rate)
    
    return result


def segment(coverage: DateRange, resolution: Resolution, allow_partial: bool = False) -> Segmentation:
    """
    Segment a booking and enforce the gap policy.
    
    Gaps fail the request with every uncovered period listed, unless
    ``allow_partial`` is set and at least one night could be priced.
    """
    result = walk(coverage, resolution.claims)
    if result.gaps and (not allow_partial or not result.segments):
        raise RateGapError(
            resolution.room_type_id,
            resolution.rate_type.value,
            [gap.period.to_dict() for gap in result.gaps]
        )
    return result
