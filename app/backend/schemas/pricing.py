"""Pricing Pydantic schemas: engine inputs and the price breakdown."""
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from typing import Annotated, List, Literal, Optional
from datetime import date
from decimal import Decimal
from app.backend.db.models import RateType


# Decimals stay exact internally and are emitted as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

RateSelectionStrategy = Literal["duration_based", "no_monthly", "lowest_total", "hourly", "daily", "monthly"]


class RateRecord(BaseModel):
    """Immutable snapshot of a rate as handed to the pricing engine."""
    model_config = ConfigDict(from_attributes=True, frozen=True)
    
    rate_id: str
    room_type_id: str
    rate_type: RateType
    amount: Decimal = Field(..., gt=0)
    currency: str
    effective_date: date
    end_date: date


class LengthOfStayDiscount(BaseModel):
    """Discount tier applied once a booking reaches ``min_nights``."""
    min_nights: int = Field(..., gt=0)
    discount_pct: Decimal = Field(..., gt=0, le=100)


class WeekendPricing(BaseModel):
    """Premium applied to daily-rate nights falling on the listed ISO weekdays."""
    premium_pct: Decimal = Field(..., gt=0)
    days: List[int] = Field(default_factory=lambda: [5, 6], description="ISO weekdays (Mon=1 .. Sun=7)")
    
    @field_validator("days")
    @classmethod
    def check_days(cls, days: List[int]) -> List[int]:
        if any(day < 1 or day > 7 for day in days):
            raise ValueError("days must be ISO weekdays between 1 and 7")
        return sorted(set(days))


class PricingConfig(BaseModel):
    """Per room type business rules consumed by the pricing policy."""
    model_config = ConfigDict(frozen=True)
    
    rate_selection_strategy: RateSelectionStrategy = "duration_based"
    minimum_stay_nights: Optional[int] = Field(None, gt=0)
    length_of_stay_discounts: List[LengthOfStayDiscount] = Field(default_factory=list)
    weekend_pricing: Optional[WeekendPricing] = None


class PriceSegment(BaseModel):
    """A maximal run of nights charged at one rate; ``period_end`` is exclusive."""
    period_start: date
    period_end: date
    days: int
    units_of_duration: Money
    rate_id: str
    rate_type: RateType
    rate_amount: Money
    currency: str
    subtotal: Money


class PriceAdjustment(BaseModel):
    """Policy line applied on top of the segment subtotal (negative for discounts)."""
    kind: Literal["weekend_premium", "length_of_stay_discount"]
    description: str
    amount: Money


class GapPeriod(BaseModel):
    """Uncovered part of a booking; ``end_date`` is exclusive."""
    start_date: date
    end_date: date


class BookingDetails(BaseModel):
    unit_id: str
    room_type_id: str
    room_type: str
    start_date: date
    end_date: date
    total_nights: int


class PriceBreakdown(BaseModel):
    """Full, auditable result of a price calculation."""
    total_price: Money
    currency: str
    subtotal: Money
    rate_type: RateType
    total_nights: int
    segments: List[PriceSegment]
    adjustments: List[PriceAdjustment] = Field(default_factory=list)
    gaps: List[GapPeriod] = Field(default_factory=list)
    complete: bool = True
    warnings: List[str] = Field(default_factory=list)
    booking_details: Optional[BookingDetails] = None
    
    @property
    def rate_ids(self) -> List[str]:
        """Distinct rates referenced by the segments, in order of first use."""
        return list(dict.fromkeys(segment.rate_id for segment in self.segments))


class PriceRequest(BaseModel):
    """Schema for a price calculation request."""
    unit_id: str = Field(..., min_length=1, description="Unit to price")
    start_date: str = Field(..., description="First night (YYYY-MM-DD)")
    end_date: str = Field(..., description="Departure day, exclusive (YYYY-MM-DD)")
    allow_partial: bool = Field(default=False, description="Price covered nights and report gaps instead of failing")
