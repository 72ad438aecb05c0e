"""Rate Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.backend.db.models import RateType
from app.backend.schemas.pricing import Money


# Active ISO-4217 alphabetic codes
ISO_4217_CODES = frozenset("""
AED AFN ALL AMD ANG AOA ARS AUD AWG AZN BAM BBD BDT BGN BHD BIF BMD BND BOB BRL BSD BTN BWP BYN BZD
CAD CDF CHF CLP CNY COP CRC CUP CVE CZK DJF DKK DOP DZD EGP ERN ETB EUR FJD FKP GBP GEL GHS GIP GMD
GNF GTQ GYD HKD HNL HTG HUF IDR ILS INR IQD IRR ISK JMD JOD JPY KES KGS KHR KMF KPW KRW KWD KYD KZT
LAK LBP LKR LRD LSL LYD MAD MDL MGA MKD MMK MNT MOP MRU MUR MVR MWK MXN MYR MZN NAD NGN NIO NOK NPR
NZD OMR PAB PEN PGK PHP PKR PLN PYG QAR RON RSD RUB RWF SAR SBD SCR SDG SEK SGD SHP SLE SOS SRD SSP
STN SVC SYP SZL THB TJS TMT TND TOP TRY TTD TWD TZS UAH UGX USD UYU UZS VES VND VUV WST XAF XCD XOF
XPF YER ZAR ZMW ZWL
""".split())


class RateCreate(BaseModel):
    """Schema for creating a rate."""
    room_type_id: str = Field(..., min_length=1, description="Room type the rate applies to")
    rate_type: RateType = Field(..., description="hourly, daily or monthly")
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Price per rate unit")
    currency: str = Field(..., description="ISO-4217 currency code")
    effective_date: date = Field(..., description="First valid day (inclusive)")
    end_date: date = Field(..., description="Last valid day (inclusive)")
    
    @field_validator("currency")
    @classmethod
    def check_currency(cls, currency: str) -> str:
        if currency not in ISO_4217_CODES:
            raise ValueError("currency must be a valid ISO-4217 code")
        return currency
    
    @model_validator(mode="after")
    def check_window(self) -> "RateCreate":
        if self.effective_date >= self.end_date:
            raise ValueError("effective_date must be before end_date")
        return self


class RateUpdate(BaseModel):
    """Schema for updating a rate; the merged result is re-validated as RateCreate."""
    rate_type: Optional[RateType] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    currency: Optional[str] = None
    effective_date: Optional[date] = None
    end_date: Optional[date] = None


class Rate(BaseModel):
    """Schema for rate response."""
    rate_id: str
    room_type_id: str
    rate_type: RateType
    amount: Money
    currency: str
    effective_date: date
    end_date: date
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class RateList(BaseModel):
    """Schema for list of rates."""
    rates: List[Rate]
    count: int


class RoomTypeRates(BaseModel):
    """Rates of a single room type, optionally filtered to one day."""
    room_type_id: str
    rates: List[Rate]
    count: int


class RateOverlapReport(BaseModel):
    """Overlapping same-type windows detected in a room type's rate set."""
    room_type_id: str
    overlaps: List[dict]
    count: int


class RateSyncResult(BaseModel):
    """Outcome of an external rate feed sync."""
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[dict] = Field(default_factory=list)
