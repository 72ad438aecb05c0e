"""Booking Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from datetime import date, datetime
import re
from app.backend.db.models import BookingStatus
from app.backend.schemas.pricing import Money


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class BookingCreate(BaseModel):
    """Schema for creating a booking."""
    unit_id: str = Field(..., min_length=1, description="Unit to book")
    customer_name: str = Field(..., min_length=1, description="Customer name")
    customer_email: str = Field(..., description="Customer email")
    start_date: date = Field(..., description="First night")
    end_date: date = Field(..., description="Departure day (exclusive)")
    
    @field_validator("customer_name")
    @classmethod
    def check_name(cls, name: str) -> str:
        if not name.strip():
            raise ValueError("customer_name is required")
        return name.strip()
    
    @field_validator("customer_email")
    @classmethod
    def check_email(cls, email: str) -> str:
        if not EMAIL_PATTERN.match(email):
            raise ValueError("customer_email must be a valid email address")
        return email
    
    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        if self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")
        return self


class BookingUpdate(BaseModel):
    """Schema for updating a booking."""
    customer_name: Optional[str] = Field(None, min_length=1)
    customer_email: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[BookingStatus] = None
    
    @field_validator("customer_email")
    @classmethod
    def check_email(cls, email: Optional[str]) -> Optional[str]:
        if email is not None and not EMAIL_PATTERN.match(email):
            raise ValueError("customer_email must be a valid email address")
        return email


class Booking(BaseModel):
    """Schema for booking response."""
    booking_id: str
    unit_id: str
    customer_name: str
    customer_email: str
    start_date: date
    end_date: date
    calculated_price: Money
    currency: str
    status: BookingStatus
    price_breakdown: Optional[Dict[str, Any]] = None
    rate_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class BookingList(BaseModel):
    """Schema for list of bookings."""
    bookings: List[Booking]
    count: int
