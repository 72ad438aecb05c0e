"""Rate CRUD, overlap audit and external sync API endpoints."""
from fastapi import APIRouter, Depends, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Optional
from app.backend.db.session import get_db
from app.backend.db.models import Rate as RateModel, RateType, RoomType as RoomTypeModel, new_id
from app.backend.schemas.pricing import RateRecord
from app.backend.schemas.rate import (
    RateCreate,
    RateUpdate,
    Rate as RateSchema,
    RateList,
    RateOverlapReport,
    RateSyncResult,
    RoomTypeRates,
)
from app.backend.services.audit import AuditService
from app.backend.services.errors import ResourceNotFoundError
from app.backend.services.pricing import parse_booking_date
from app.backend.services.rates import RateAdminService, rate_state

router = APIRouter()
audit_service = AuditService()
rate_admin = RateAdminService()


def _get_rate_or_404(db: Session, rate_id: str) -> RateModel:
    rate = db.query(RateModel).filter_by(rate_id=rate_id).first()
    if not rate:
        raise ResourceNotFoundError("rate", rate_id)
    return rate


@router.get("/rates", response_model=RateList)
async def list_rates(
    room_type_id: Optional[str] = None,
    rate_type: Optional[RateType] = None,
    skip: int = 0,
    limit: int = 500,
    db: Session = Depends(get_db)
):
    """List rates with optional filters."""
    query = db.query(RateModel)
    if room_type_id:
        query = query.filter_by(room_type_id=room_type_id)
    if rate_type:
        query = query.filter_by(rate_type=rate_type)
    
    rates = query.order_by(RateModel.room_type_id, RateModel.effective_date).offset(skip).limit(limit).all()
    return RateList(rates=rates, count=len(rates))


@router.get("/rates/room-type/{room_type_id}", response_model=RoomTypeRates)
async def list_room_type_rates(
    room_type_id: str,
    date: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Rates of a room type, optionally only those valid on ``date``."""
    query = db.query(RateModel).filter_by(room_type_id=room_type_id)
    if date is not None:
        target = parse_booking_date(date, "date")
        query = query.filter(RateModel.effective_date <= target, RateModel.end_date >= target)
    
    rates = query.order_by(RateModel.effective_date).all()
    return RoomTypeRates(room_type_id=room_type_id, rates=rates, count=len(rates))


@router.get("/rates/room-type/{room_type_id}/overlaps", response_model=RateOverlapReport)
async def list_room_type_overlaps(
    room_type_id: str,
    db: Session = Depends(get_db)
):
    """Overlapping same-type rate windows of a room type."""
    overlaps = rate_admin.room_type_overlaps(room_type_id, db)
    return RateOverlapReport(
        room_type_id=room_type_id,
        overlaps=[overlap.to_dict() for overlap in overlaps],
        count=len(overlaps)
    )


@router.get("/rates/{rate_id}", response_model=RateSchema)
async def get_rate(
    rate_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific rate by ID."""
    return _get_rate_or_404(db, rate_id)


@router.post("/rates", response_model=RateSchema, status_code=status.HTTP_201_CREATED)
async def create_rate(
    rate: RateCreate,
    db: Session = Depends(get_db)
):
    """Create a rate; overlaps are logged or rejected per configuration."""
    if not db.query(RoomTypeModel).filter_by(room_type_id=rate.room_type_id).first():
        raise ResourceNotFoundError("room_type", rate.room_type_id)
    
    db_rate = RateModel(rate_id=new_id("rate"), **rate.model_dump())
    rate_admin.check_overlaps(RateRecord.model_validate(db_rate), db)
    
    db.add(db_rate)
    audit_service.log_action("create", "rate", db_rate.rate_id, None, rate_state(db_rate), db=db)
    db.commit()
    db.refresh(db_rate)
    
    return db_rate


@router.put("/rates/{rate_id}", response_model=RateSchema)
async def update_rate(
    rate_id: str,
    rate_update: RateUpdate,
    db: Session = Depends(get_db)
):
    """Update a rate that no confirmed booking references."""
    rate = _get_rate_or_404(db, rate_id)
    rate_admin.ensure_unlocked(rate_id, db)
    
    before = rate_state(rate)
    merged = {
        "room_type_id": rate.room_type_id,
        "rate_type": rate.rate_type,
        "amount": rate.amount,
        "currency": rate.currency,
        "effective_date": rate.effective_date,
        "end_date": rate.end_date,
        **rate_update.model_dump(exclude_unset=True),
    }
    try:
        validated = RateCreate.model_validate(merged)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    
    rate_admin.check_overlaps(RateRecord(rate_id=rate_id, **validated.model_dump()), db)
    
    for field, value in validated.model_dump().items():
        setattr(rate, field, value)
    
    audit_service.log_action("update", "rate", rate_id, before, rate_state(rate), db=db)
    db.commit()
    db.refresh(rate)
    
    return rate


@router.delete("/rates/{rate_id}")
async def delete_rate(
    rate_id: str,
    db: Session = Depends(get_db)
):
    """Delete a rate that no confirmed booking references."""
    rate = _get_rate_or_404(db, rate_id)
    rate_admin.ensure_unlocked(rate_id, db)
    
    audit_service.log_action("delete", "rate", rate_id, rate_state(rate), None, db=db)
    db.delete(rate)
    db.commit()
    
    return {"message": "Rate deleted successfully", "rate_id": rate_id}


@router.post("/rates/sync", response_model=RateSyncResult)
async def sync_rates(db: Session = Depends(get_db)):
    """Import rates from the external rate feed."""
    return rate_admin.sync_external_rates(db)
