"""Room type CRUD API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from app.backend.db.session import get_db
from app.backend.db.models import (
    Property as PropertyModel,
    Rate as RateModel,
    RoomType as RoomTypeModel,
    Unit as UnitModel,
)
from app.backend.schemas.property import RoomTypeCreate, RoomTypeUpdate, RoomType as RoomTypeSchema, RoomTypeList
from app.backend.services.errors import ResourceInUseError, ResourceNotFoundError

router = APIRouter()


def _get_room_type_or_404(db: Session, room_type_id: str) -> RoomTypeModel:
    room_type = db.query(RoomTypeModel).filter_by(room_type_id=room_type_id).first()
    if not room_type:
        raise ResourceNotFoundError("room_type", room_type_id)
    return room_type


@router.post("/room-types", response_model=RoomTypeSchema, status_code=status.HTTP_201_CREATED)
async def create_room_type(
    room_type: RoomTypeCreate,
    db: Session = Depends(get_db)
):
    """Create a room type under an existing property."""
    if not db.query(PropertyModel).filter_by(property_id=room_type.property_id).first():
        raise ResourceNotFoundError("property", room_type.property_id)
    
    data = room_type.model_dump(exclude={"pricing_config"})
    db_room_type = RoomTypeModel(**data)
    if room_type.pricing_config is not None:
        db_room_type.pricing_config = room_type.pricing_config.model_dump(mode="json", exclude_none=True)
    
    db.add(db_room_type)
    db.commit()
    db.refresh(db_room_type)
    
    return db_room_type


@router.get("/room-types", response_model=RoomTypeList)
async def list_room_types(
    property_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """List room types, optionally for one property."""
    query = db.query(RoomTypeModel)
    if property_id:
        query = query.filter_by(property_id=property_id)
    room_types = query.order_by(RoomTypeModel.name).offset(skip).limit(limit).all()
    return RoomTypeList(room_types=room_types, count=len(room_types))


@router.get("/room-types/{room_type_id}", response_model=RoomTypeSchema)
async def get_room_type(
    room_type_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific room type by ID."""
    return _get_room_type_or_404(db, room_type_id)


@router.put("/room-types/{room_type_id}", response_model=RoomTypeSchema)
async def update_room_type(
    room_type_id: str,
    room_type_update: RoomTypeUpdate,
    db: Session = Depends(get_db)
):
    """Update a room type; a new pricing_config replaces the old one."""
    room_type = _get_room_type_or_404(db, room_type_id)
    
    update_data = room_type_update.model_dump(exclude_unset=True, exclude={"pricing_config"})
    for field, value in update_data.items():
        setattr(room_type, field, value)
    
    if "pricing_config" in room_type_update.model_fields_set:
        config = room_type_update.pricing_config
        room_type.pricing_config = config.model_dump(mode="json", exclude_none=True) if config else None
    
    db.commit()
    db.refresh(room_type)
    
    return room_type


@router.delete("/room-types/{room_type_id}")
async def delete_room_type(
    room_type_id: str,
    db: Session = Depends(get_db)
):
    """Delete a room type that has no units and no rates."""
    room_type = _get_room_type_or_404(db, room_type_id)
    
    if db.query(UnitModel).filter_by(room_type_id=room_type_id).count():
        raise ResourceInUseError(
            f"Room type {room_type_id} still has units",
            {"room_type_id": room_type_id}
        )
    if db.query(RateModel).filter_by(room_type_id=room_type_id).count():
        raise ResourceInUseError(
            f"Room type {room_type_id} still has rates",
            {"room_type_id": room_type_id}
        )
    
    db.delete(room_type)
    db.commit()
    
    return {"message": "Room type deleted successfully", "room_type_id": room_type_id}
