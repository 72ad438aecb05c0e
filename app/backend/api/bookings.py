"""Booking API endpoints, including price calculation."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from app.backend.db.session import get_db
from app.backend.db.models import Booking as BookingModel, BookingStatus, Unit as UnitModel, UnitStatus
from app.backend.schemas.booking import BookingCreate, BookingUpdate, Booking as BookingSchema, BookingList
from app.backend.schemas.pricing import PriceBreakdown, PriceRequest
from app.backend.services.audit import AuditService
from app.backend.services.errors import (
    BookingCancelledError,
    BookingConfirmedError,
    ResourceNotFoundError,
    UnitNotAvailableError,
    UnitNotFoundError,
)
from app.backend.services.pricing import PricingService
from app.backend.services.repository import SqlRateRepository

router = APIRouter()
audit_service = AuditService()
logger = logging.getLogger(__name__)


def booking_state(booking: BookingModel) -> dict:
    """Audit view of a booking; customer PII is left out."""
    return {
        "booking_id": booking.booking_id,
        "unit_id": booking.unit_id,
        "start_date": booking.start_date.isoformat(),
        "end_date": booking.end_date.isoformat(),
        "calculated_price": str(booking.calculated_price),
        "currency": booking.currency,
        "status": booking.status.value,
        "rate_ids": booking.rate_ids or [],
    }


def _price_booking(db: Session, unit_id: str, start_date, end_date) -> PriceBreakdown:
    return PricingService(SqlRateRepository(db)).calculate_price(unit_id, start_date, end_date)


def _get_booking_or_404(db: Session, booking_id: str) -> BookingModel:
    booking = db.query(BookingModel).filter_by(booking_id=booking_id).first()
    if not booking:
        raise ResourceNotFoundError("booking", booking_id)
    return booking


def _apply_price(booking: BookingModel, breakdown: PriceBreakdown) -> None:
    booking.calculated_price = breakdown.total_price
    booking.currency = breakdown.currency
    booking.price_breakdown = breakdown.model_dump(mode="json")
    booking.rate_ids = breakdown.rate_ids


@router.post("/bookings/calculate-price", response_model=PriceBreakdown)
async def calculate_price(
    request: PriceRequest,
    db: Session = Depends(get_db)
):
    """Calculate the price of a booking without creating it."""
    service = PricingService(SqlRateRepository(db))
    return service.calculate_price(
        request.unit_id,
        request.start_date,
        request.end_date,
        allow_partial=request.allow_partial
    )


@router.get("/bookings", response_model=BookingList)
async def list_bookings(
    unit_id: Optional[str] = None,
    status: Optional[BookingStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """List bookings with optional filters."""
    query = db.query(BookingModel)
    if unit_id:
        query = query.filter_by(unit_id=unit_id)
    if status:
        query = query.filter_by(status=status)
    
    bookings = query.order_by(BookingModel.start_date).offset(skip).limit(limit).all()
    return BookingList(bookings=bookings, count=len(bookings))


@router.get("/bookings/{booking_id}", response_model=BookingSchema)
async def get_booking(
    booking_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific booking by ID."""
    return _get_booking_or_404(db, booking_id)


@router.post("/bookings", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate,
    db: Session = Depends(get_db)
):
    """Create a pending booking priced by the pricing engine and reserve the unit."""
    unit = db.query(UnitModel).filter_by(unit_id=booking.unit_id).first()
    if not unit:
        raise UnitNotFoundError(booking.unit_id)
    
    if unit.status != UnitStatus.AVAILABLE:
        raise UnitNotAvailableError(unit.unit_id, unit.status.value)
    
    breakdown = _price_booking(db, booking.unit_id, booking.start_date, booking.end_date)
    
    db_booking = BookingModel(**booking.model_dump(), status=BookingStatus.PENDING)
    _apply_price(db_booking, breakdown)
    db.add(db_booking)
    unit.status = UnitStatus.RESERVED
    db.flush()
    
    audit_service.log_action("create", "booking", db_booking.booking_id, None, booking_state(db_booking), db=db)
    db.commit()
    db.refresh(db_booking)
    
    logger.info("Created booking %s for unit %s", db_booking.booking_id, unit.unit_id)
    return db_booking


@router.put("/bookings/{booking_id}", response_model=BookingSchema)
async def update_booking(
    booking_id: str,
    booking_update: BookingUpdate,
    db: Session = Depends(get_db)
):
    """Update a booking; date changes re-price it."""
    booking = _get_booking_or_404(db, booking_id)
    if booking.status == BookingStatus.CANCELLED:
        raise BookingCancelledError(booking_id)
    
    before = booking_state(booking)
    update_data = booking_update.model_dump(exclude_unset=True)
    new_status = update_data.pop("status", None)
    
    start_date = update_data.get("start_date", booking.start_date)
    end_date = update_data.get("end_date", booking.end_date)
    dates_changed = (start_date, end_date) != (booking.start_date, booking.end_date)
    if dates_changed:
        if booking.status == BookingStatus.CONFIRMED:
            raise BookingConfirmedError(booking_id)
        breakdown = _price_booking(db, booking.unit_id, start_date, end_date)
        _apply_price(booking, breakdown)
    
    for field, value in update_data.items():
        setattr(booking, field, value)
    
    if new_status is not None and new_status != booking.status:
        booking.status = new_status
        if new_status == BookingStatus.CANCELLED and booking.unit:
            booking.unit.status = UnitStatus.AVAILABLE
    
    audit_service.log_action("update", "booking", booking_id, before, booking_state(booking), db=db)
    db.commit()
    db.refresh(booking)
    
    return booking


@router.delete("/bookings/{booking_id}")
async def cancel_booking(
    booking_id: str,
    db: Session = Depends(get_db)
):
    """Cancel a booking (soft delete) and release its unit."""
    booking = _get_booking_or_404(db, booking_id)
    before = booking_state(booking)
    
    booking.status = BookingStatus.CANCELLED
    if booking.unit and booking.unit.status in (UnitStatus.RESERVED, UnitStatus.OCCUPIED):
        booking.unit.status = UnitStatus.AVAILABLE
    
    audit_service.log_action("cancel", "booking", booking_id, before, booking_state(booking), db=db)
    db.commit()
    
    return {"message": "Booking cancelled successfully", "booking_id": booking_id}
