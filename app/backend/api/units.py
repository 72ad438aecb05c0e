"""Unit CRUD API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from app.backend.db.session import get_db
from app.backend.db.models import (
    Booking as BookingModel,
    BookingStatus,
    RoomType as RoomTypeModel,
    Unit as UnitModel,
    UnitStatus,
)
from app.backend.schemas.property import UnitCreate, UnitUpdate, Unit as UnitSchema, UnitList
from app.backend.services.errors import ResourceInUseError, ResourceNotFoundError, UnitNotFoundError

router = APIRouter()


def _get_unit_or_404(db: Session, unit_id: str) -> UnitModel:
    unit = db.query(UnitModel).filter_by(unit_id=unit_id).first()
    if not unit:
        raise UnitNotFoundError(unit_id)
    return unit


@router.post("/units", response_model=UnitSchema, status_code=status.HTTP_201_CREATED)
async def create_unit(
    unit: UnitCreate,
    db: Session = Depends(get_db)
):
    """Create a unit of an existing room type."""
    if not db.query(RoomTypeModel).filter_by(room_type_id=unit.room_type_id).first():
        raise ResourceNotFoundError("room_type", unit.room_type_id)
    
    db_unit = UnitModel(**unit.model_dump())
    db.add(db_unit)
    db.commit()
    db.refresh(db_unit)
    
    return db_unit


@router.get("/units", response_model=UnitList)
async def list_units(
    room_type_id: Optional[str] = None,
    status: Optional[UnitStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """List units with optional filters."""
    query = db.query(UnitModel)
    if room_type_id:
        query = query.filter_by(room_type_id=room_type_id)
    if status:
        query = query.filter_by(status=status)
    units = query.order_by(UnitModel.unit_number).offset(skip).limit(limit).all()
    return UnitList(units=units, count=len(units))


@router.get("/units/{unit_id}", response_model=UnitSchema)
async def get_unit(
    unit_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific unit by ID."""
    return _get_unit_or_404(db, unit_id)


@router.put("/units/{unit_id}", response_model=UnitSchema)
async def update_unit(
    unit_id: str,
    unit_update: UnitUpdate,
    db: Session = Depends(get_db)
):
    """Update a unit."""
    unit = _get_unit_or_404(db, unit_id)
    
    for field, value in unit_update.model_dump(exclude_unset=True).items():
        setattr(unit, field, value)
    
    db.commit()
    db.refresh(unit)
    
    return unit


@router.delete("/units/{unit_id}")
async def delete_unit(
    unit_id: str,
    db: Session = Depends(get_db)
):
    """Delete a unit that has never been booked."""
    unit = _get_unit_or_404(db, unit_id)
    
    bookings = db.query(BookingModel).filter_by(unit_id=unit_id).all()
    active = [b for b in bookings if b.status != BookingStatus.CANCELLED]
    if active:
        raise ResourceInUseError(
            f"Unit {unit_id} has {len(active)} active booking(s)",
            {"unit_id": unit_id, "booking_ids": [b.booking_id for b in active]}
        )
    if bookings:
        raise ResourceInUseError(
            f"Unit {unit_id} has booking history; set its status to maintenance instead",
            {"unit_id": unit_id, "booking_ids": [b.booking_id for b in bookings]}
        )
    
    db.delete(unit)
    db.commit()
    
    return {"message": "Unit deleted successfully", "unit_id": unit_id}
