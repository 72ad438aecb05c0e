"""Convert segments into money."""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List
from app.backend.db.models import RateType
from app.backend.services.errors import CurrencyMismatchError, InternalInconsistencyError
from app.backend.services.segmenter import Segment


TWO_PLACES = Decimal("0.01")
HOURS_PER_DAY = 24


def round_money(value: Decimal) -> Decimal:
    """Round half-up to cents."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def duration_units(rate_type: RateType, days: int, proration_days: int = 30) -> Decimal:
    """Billable units for ``days`` whole days at the given granularity."""
    if rate_type == RateType.HOURLY:
        return Decimal(HOURS_PER_DAY * days)
    if rate_type == RateType.DAILY:
        return Decimal(days)
    if rate_type == RateType.MONTHLY:
        return Decimal(days) / Decimal(proration_days)
    raise InternalInconsistencyError(f"Unsupported rate type {rate_type}", {"rate_type": str(rate_type)})


@dataclass(frozen=True)
class SegmentCharge:
    segment: Segment
    units: Decimal
    subtotal: Decimal  # unrounded


@dataclass(frozen=True)
class Calculation:
    currency: str
    charges: List[SegmentCharge]
    subtotal: Decimal  # rounded once, from the unrounded charges


def ensure_single_currency(segments: List[Segment]) -> str:
    currencies = sorted({segment.rate.currency for segment in segments})
    if len(currencies) != 1:
        raise CurrencyMismatchError(currencies)
    return currencies[0]


def calculate(segments: List[Segment], proration_days: int = 30) -> Calculation:
    """Price each segment and total them without intermediate rounding."""
    if not segments:
        raise InternalInconsistencyError("No priced segments to calculate", {})
    
    currency = ensure_single_currency(segments)
    charges = []
    for segment in segments:
        units = duration_units(segment.rate.rate_type, segment.days, proration_days)
        charges.append(SegmentCharge(segment, units, segment.rate.amount * units))
    
    return Calculation(
        currency=currency,
        charges=charges,
        subtotal=round_money(sum((charge.subtotal for charge in charges), Decimal("0"))),
    )
