"""Rate resolution and pricing engine."""
import enum
import logging
import re
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Union
from app.backend.core.config import settings
from app.backend.db.models import RateType
from app.backend.schemas.pricing import (
    BookingDetails,
    GapPeriod,
    PriceAdjustment,
    PriceBreakdown,
    PriceSegment,
    PricingConfig,
    RateRecord,
)
from app.backend.services.errors import (
    InvalidDateRangeError,
    PricingError,
    RoomTypeNotFoundError,
    UnitNotFoundError,
)
from app.backend.services.intervals import DateRange, booking_coverage
from app.backend.services.price_calculator import calculate, round_money
from app.backend.services.pricing_policy import (
    choose_rate_types,
    length_of_stay_adjustment,
    validate_minimum_stay,
    weekend_adjustment,
)
from app.backend.services.rate_selector import resolve
from app.backend.services.repository import RateRepository
from app.backend.services.segmenter import segment


logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
UNIT_PLACES = Decimal("0.0001")


class PricingStage(str, enum.Enum):
    """Stages a single pricing request moves through."""
    VALIDATING = "VALIDATING"
    RESOLVING_RATES = "RESOLVING_RATES"
    SEGMENTING = "SEGMENTING"
    CALCULATING = "CALCULATING"
    APPLYING_POLICY = "APPLYING_POLICY"
    DONE = "DONE"
    FAILED = "FAILED"


def parse_booking_date(value: Union[date, datetime, str, None], field_name: str) -> date:
    """Accept a date, a datetime (its calendar day) or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE.match(value):
        raise InvalidDateRangeError(
            f"{field_name} must be a valid ISO date (YYYY-MM-DD)",
            {field_name: value}
        )
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidDateRangeError(
            f"{field_name} is not a valid calendar date",
            {field_name: value}
        ) from e


def validate_booking_interval(start_date: date, end_date: date) -> DateRange:
    """Charged days of the booking; same-day and reversed ranges are rejected."""
    if start_date >= end_date:
        raise InvalidDateRangeError(
            "start_date must be before end_date",
            {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}
        )
    return booking_coverage(start_date, end_date)


class PricingEngine:
    """
    Pure pricing computation over an already fetched rate snapshot.
    
    The engine holds no per-request state; one instance can serve concurrent
    requests.
    """
    
    def __init__(self, monthly_proration_days: Optional[int] = None):
        self.monthly_proration_days = monthly_proration_days or settings.monthly_proration_days
    
    def price(
        self,
        room_type_id: str,
        rates: List[RateRecord],
        config: PricingConfig,
        start_date: date,
        end_date: date,
        allow_partial: bool = False
    ) -> PriceBreakdown:
        """
        Price a booking of ``[start_date, end_date)`` for one room type.
        
        Args:
            room_type_id: Room type being priced
            rates: Snapshot of every rate record of the room type
            config: Pricing configuration of the room type
            start_date: First night
            end_date: Departure day (exclusive)
            allow_partial: Price covered nights and report gaps instead of failing
        
        Returns:
            PriceBreakdown
        
        Raises:
            PricingError: Typed failure; never a zero price
        """
        trace: List[PricingStage] = []
        try:
            self._enter(trace, room_type_id, PricingStage.VALIDATING)
            coverage = validate_booking_interval(start_date, end_date)
            validate_minimum_stay(coverage.day_count, config)
            
            self._enter(trace, room_type_id, PricingStage.RESOLVING_RATES)
            rate_types = choose_rate_types(rates, coverage, config)
            
            quotes = [
                self._price_rate_type(trace, room_type_id, rates, rate_type, config, coverage, allow_partial)
                for rate_type in rate_types
            ]
            # min() keeps the earliest (most preferred) quote on ties
            breakdown = min(quotes, key=lambda quote: quote.total_price)
        except PricingError as e:
            logger.info(
                "Pricing %s %s in %s: %s", room_type_id, PricingStage.FAILED.value, trace[-1].value, e.code
            )
            raise
        
        self._enter(trace, room_type_id, PricingStage.DONE)
        return breakdown
    
    def _price_rate_type(
        self,
        trace: List[PricingStage],
        room_type_id: str,
        rates: List[RateRecord],
        rate_type: RateType,
        config: PricingConfig,
        coverage: DateRange,
        allow_partial: bool
    ) -> PriceBreakdown:
        resolution = resolve(rates, rate_type, coverage, room_type_id)
        
        self._enter(trace, room_type_id, PricingStage.SEGMENTING)
        segmentation = segment(coverage, resolution, allow_partial=allow_partial)
        
        self._enter(trace, room_type_id, PricingStage.CALCULATING)
        calculation = calculate(segmentation.segments, self.monthly_proration_days)
        
        self._enter(trace, room_type_id, PricingStage.APPLYING_POLICY)
        adjustments: List[PriceAdjustment] = []
        running_total = calculation.subtotal
        
        premium = weekend_adjustment(calculation.charges, config)
        if premium is not None:
            adjustments.append(premium)
            running_total += premium.amount
        
        discount = length_of_stay_adjustment(running_total, coverage.day_count, config)
        if discount is not None:
            adjustments.append(discount)
            running_total += discount.amount
        
        warnings = list(resolution.warnings)
        for gap in segmentation.gaps:
            warnings.append(
                f"RATE_GAP: no {rate_type.value} rate between {gap.period}; nights left unpriced"
            )
        
        breakdown = PriceBreakdown(
            total_price=round_money(running_total),
            currency=calculation.currency,
            subtotal=calculation.subtotal,
            rate_type=rate_type,
            total_nights=coverage.day_count,
            segments=[
                PriceSegment(
                    period_start=charge.segment.period.start,
                    period_end=charge.segment.period.exclusive_end,
                    days=charge.segment.days,
                    units_of_duration=charge.units.quantize(UNIT_PLACES),
                    rate_id=charge.segment.rate.rate_id,
                    rate_type=charge.segment.rate.rate_type,
                    rate_amount=charge.segment.rate.amount,
                    currency=charge.segment.rate.currency,
                    subtotal=round_money(charge.subtotal),
                )
                for charge in calculation.charges
            ],
            adjustments=adjustments,
            gaps=[GapPeriod(**gap.period.to_dict()) for gap in segmentation.gaps],
            complete=segmentation.complete,
            warnings=warnings,
        )
        return breakdown
    
    @staticmethod
    def _enter(trace: List[PricingStage], room_type_id: str, stage: PricingStage) -> None:
        trace.append(stage)
        logger.debug("Pricing %s: %s", room_type_id, stage.value)


class PricingService:
    """Resolves a unit to its room type and rate snapshot, then prices it."""
    
    def __init__(self, repository: RateRepository, engine: Optional[PricingEngine] = None):
        self.repository = repository
        self.engine = engine or PricingEngine()
    
    def calculate_price(
        self,
        unit_id: str,
        start_date: Union[date, str],
        end_date: Union[date, str],
        allow_partial: bool = False
    ) -> PriceBreakdown:
        """
        Calculate the price of booking ``unit_id`` from ``start_date`` to ``end_date``.
        
        Args:
            unit_id: Unit to price
            start_date: First night (date or ISO string)
            end_date: Departure day, exclusive (date or ISO string)
            allow_partial: Price covered nights and report gaps instead of failing
        
        Returns:
            PriceBreakdown including booking details
        
        Raises:
            PricingError: UNIT_NOT_FOUND, ROOM_TYPE_NOT_FOUND, INVALID_DATE_RANGE,
                RATE_GAP, CURRENCY_MISMATCH, MINIMUM_STAY_VIOLATION or
                INTERNAL_INCONSISTENCY
        """
        start = parse_booking_date(start_date, "start_date")
        end = parse_booking_date(end_date, "end_date")
        validate_booking_interval(start, end)
        
        unit = self.repository.get_unit(unit_id)
        if unit is None:
            logger.info("Pricing failed: unit %s not found", unit_id)
            raise UnitNotFoundError(unit_id)
        
        room_type = self.repository.get_room_type(unit.room_type_id)
        if room_type is None:
            logger.warning("Unit %s references missing room type %s", unit_id, unit.room_type_id)
            raise RoomTypeNotFoundError(unit.room_type_id, unit_id)
        
        # Single read of the rate set; the engine never goes back to storage
        rates = self.repository.get_rates_for_room_type(room_type.room_type_id)
        config = self.repository.get_pricing_config(room_type.room_type_id)
        
        breakdown = self.engine.price(
            room_type.room_type_id, rates, config, start, end, allow_partial=allow_partial
        )
        logger.info(
            "Priced unit %s %s..%s: %s %s (%d segment(s), %d warning(s))",
            unit_id, start, end, breakdown.total_price, breakdown.currency,
            len(breakdown.segments), len(breakdown.warnings)
        )
        return breakdown.model_copy(update={
            "booking_details": BookingDetails(
                unit_id=unit_id,
                room_type_id=room_type.room_type_id,
                room_type=room_type.name,
                start_date=start,
                end_date=end,
                total_nights=breakdown.total_nights,
            )
        })
