"""Typed errors raised by the pricing engine and the admin API."""
from typing import Any, Dict, List, Optional


class PricingError(Exception):
    """
    Base class for every failure reported to a caller of the pricing core or admin API.
    
    Attributes:
        code: Stable machine-readable error code
        message: Human-readable description
        details: Structured payload for the caller
        status_code: Suggested HTTP status for the API layer
    """
    
    code = "PRICING_ERROR"
    status_code = 400
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the JSON error envelope."""
        return {"code": self.code, "message": self.message, "details": self.details}


class UnitNotFoundError(PricingError):
    code = "UNIT_NOT_FOUND"
    status_code = 404
    
    def __init__(self, unit_id: str):
        super().__init__(f"Unit {unit_id} not found", {"unit_id": unit_id})


class RoomTypeNotFoundError(PricingError):
    """Unit references a room type that does not exist."""
    
    code = "ROOM_TYPE_NOT_FOUND"
    status_code = 409
    
    def __init__(self, room_type_id: str, unit_id: Optional[str] = None):
        super().__init__(
            f"Room type {room_type_id} not found",
            {"room_type_id": room_type_id, "unit_id": unit_id}
        )


class InvalidDateRangeError(PricingError):
    code = "INVALID_DATE_RANGE"
    status_code = 400


class RateGapError(PricingError):
    """One or more sub-intervals of the booking have no applicable rate."""
    
    code = "RATE_GAP"
    status_code = 422
    
    def __init__(self, room_type_id: str, rate_type: str, gaps: List[Dict[str, str]]):
        super().__init__(
            f"No {rate_type} rate configured for {len(gaps)} period(s) of the booking",
            {"room_type_id": room_type_id, "rate_type": rate_type, "gaps": gaps}
        )
        self.gaps = gaps


class CurrencyMismatchError(PricingError):
    code = "CURRENCY_MISMATCH"
    status_code = 422
    
    def __init__(self, currencies: List[str]):
        super().__init__(
            f"Contributing rates disagree on currency: {', '.join(currencies)}",
            {"currencies": currencies}
        )


class MinimumStayViolationError(PricingError):
    code = "MINIMUM_STAY_VIOLATION"
    status_code = 422
    
    def __init__(self, nights: int, minimum_nights: int):
        super().__init__(
            f"Booking of {nights} night(s) is shorter than the minimum stay of {minimum_nights}",
            {"nights": nights, "minimum_stay_nights": minimum_nights}
        )


class InternalInconsistencyError(PricingError):
    """An engine invariant was violated; pricing halts instead of guessing."""
    
    code = "INTERNAL_INCONSISTENCY"
    status_code = 500


class RateLockedError(PricingError):
    """Rate is referenced by a confirmed booking and may no longer change."""
    
    code = "RATE_LOCKED"
    status_code = 409
    
    def __init__(self, rate_id: str, booking_ids: List[str]):
        super().__init__(
            f"Rate {rate_id} is referenced by confirmed bookings and cannot be modified",
            {"rate_id": rate_id, "booking_ids": booking_ids}
        )


class RateOverlapError(PricingError):
    code = "RATE_OVERLAP"
    status_code = 409


class RateSyncError(PricingError):
    code = "RATE_SYNC_FAILED"
    status_code = 422


class ResourceNotFoundError(PricingError):
    """Admin lookup by id found nothing; code is ``<ENTITY>_NOT_FOUND``."""
    
    status_code = 404
    
    def __init__(self, entity: str, entity_id: str):
        self.code = f"{entity.upper()}_NOT_FOUND"
        label = entity.replace("_", " ").capitalize()
        super().__init__(f"{label} {entity_id} not found", {f"{entity}_id": entity_id})


class UnitNotAvailableError(PricingError):
    code = "UNIT_NOT_AVAILABLE"
    status_code = 400
    
    def __init__(self, unit_id: str, unit_status: str):
        super().__init__(
            f"Unit {unit_id} is not available for booking (status: {unit_status})",
            {"unit_id": unit_id, "status": unit_status}
        )


class BookingCancelledError(PricingError):
    code = "BOOKING_CANCELLED"
    status_code = 400
    
    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} is cancelled", {"booking_id": booking_id})


class BookingConfirmedError(PricingError):
    """Confirmed bookings keep their dates and price."""
    
    code = "BOOKING_CONFIRMED"
    status_code = 409
    
    def __init__(self, booking_id: str):
        super().__init__(
            f"Booking {booking_id} is confirmed; its dates and price are final",
            {"booking_id": booking_id}
        )


class ResourceInUseError(PricingError):
    """Delete refused while dependent records still reference the entity."""
    
    code = "RESOURCE_IN_USE"
    status_code = 409
