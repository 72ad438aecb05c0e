"""Business rules layered on top of rate resolution."""
from decimal import Decimal
from typing import List, Optional
from app.backend.db.models import RateType
from app.backend.schemas.pricing import PricingConfig, PriceAdjustment, RateRecord
from app.backend.services.errors import MinimumStayViolationError
from app.backend.services.intervals import DateRange
from app.backend.services.price_calculator import SegmentCharge, round_money
from app.backend.services.rate_selector import candidate_rates, fully_covers


MONTHLY_THRESHOLD_NIGHTS = 30

# Tie-break order when several rate types are otherwise equal
GRANULARITY_ORDER = [RateType.DAILY, RateType.MONTHLY, RateType.HOURLY]

WEEKDAY_NAMES = {1: "Mon", 2: "Tue", 3: "Wed", 4: "Thu", 5: "Fri", 6: "Sat", 7: "Sun"}


def validate_minimum_stay(nights: int, config: PricingConfig) -> None:
    if config.minimum_stay_nights and nights < config.minimum_stay_nights:
        raise MinimumStayViolationError(nights, config.minimum_stay_nights)


def preferred_rate_types(nights: int, config: PricingConfig) -> List[RateType]:
    """Rate types in order of preference for a booking of ``nights`` nights."""
    strategy = config.rate_selection_strategy
    if strategy in ("hourly", "daily", "monthly"):
        return [RateType(strategy)]
    if strategy == "lowest_total":
        return list(GRANULARITY_ORDER)
    if strategy == "no_monthly":
        return [RateType.DAILY, RateType.HOURLY]
    
    # duration_based
    if nights >= MONTHLY_THRESHOLD_NIGHTS:
        return [RateType.MONTHLY, RateType.DAILY, RateType.HOURLY]
    return [RateType.DAILY, RateType.HOURLY, RateType.MONTHLY]


def choose_rate_types(
    rates: List[RateRecord],
    coverage: DateRange,
    config: PricingConfig
) -> List[RateType]:
    """
    Pick the rate type(s) to price a whole booking with.
    
    Under ``duration_based`` and ``no_monthly`` a room type that offers daily
    rates is priced at daily: only a monthly rate covering every night of a
    stay of 30+ nights replaces it, and a gappy daily set is left to report
    its gaps. Otherwise the first preferred type that covers every night wins.
    ``lowest_total`` returns all fully covering types so the caller can keep
    the cheapest. Without full coverage the first preferred type with any
    candidate is used, so its gaps get reported; with no candidate at all the
    first preferred type the room type offers (else the first preferred type)
    is used.

    Args:
        rates: All rate records of the room type
        coverage: Inclusive range of charged days
        config: Pricing configuration of the room type

    Returns:
        Non-empty list of rate types to price
    """
    strategy = config.rate_selection_strategy
    if strategy in ("duration_based", "no_monthly") and any(rate.rate_type == RateType.DAILY for rate in rates):
        # Hourly never replaces daily: bookings are whole days
        if (
            strategy == "duration_based"
            and coverage.day_count >= MONTHLY_THRESHOLD_NIGHTS
            and fully_covers(rates, RateType.MONTHLY, coverage)
        ):
            return [RateType.MONTHLY]
        return [RateType.DAILY]

    preferred = preferred_rate_types(coverage.day_count, config)

    covering = [rate_type for rate_type in preferred if fully_covers(rates, rate_type, coverage)]
    if covering:
        return covering if config.rate_selection_strategy == "lowest_total" else covering[:1]
    
    partial = [rate_type for rate_type in preferred if candidate_rates(rates, rate_type, coverage)]
    if partial:
        return partial[:1]
    
    offered = [rate_type for rate_type in preferred if any(rate.rate_type == rate_type for rate in rates)]
    return (offered or preferred)[:1]


def weekend_adjustment(charges: List[SegmentCharge], config: PricingConfig) -> Optional[PriceAdjustment]:
    """Premium on daily-rate nights that fall on the configured weekdays."""
    weekend = config.weekend_pricing
    if weekend is None:
        return None
    
    weekend_nights = 0
    premium = Decimal("0")
    for charge in charges:
        rate = charge.segment.rate
        if rate.rate_type != RateType.DAILY:
            continue
        nights = sum(1 for day in charge.segment.period.iter_days() if day.isoweekday() in weekend.days)
        weekend_nights += nights
        premium += rate.amount * nights * weekend.premium_pct / Decimal(100)
    
    if weekend_nights == 0:
        return None
    
    day_names = "/".join(WEEKDAY_NAMES[day] for day in weekend.days)
    return PriceAdjustment(
        kind="weekend_premium",
        description=f"{weekend.premium_pct}% premium on {weekend_nights} {day_names} night(s)",
        amount=round_money(premium),
    )


def length_of_stay_adjustment(total: Decimal, nights: int, config: PricingConfig) -> Optional[PriceAdjustment]:
    """Highest discount tier reached by ``nights``, taken off the rounded ``total``."""
    tiers = [tier for tier in config.length_of_stay_discounts if tier.min_nights <= nights]
    if not tiers:
        return None
    
    tier = max(tiers, key=lambda t: t.min_nights)
    return PriceAdjustment(
        kind="length_of_stay_discount",
        description=f"{tier.discount_pct}% discount for stays of {tier.min_nights}+ nights",
        amount=-round_money(total * tier.discount_pct / Decimal(100)),
    )
