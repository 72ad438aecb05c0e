"""Property CRUD API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from app.backend.db.session import get_db
from app.backend.db.models import Property as PropertyModel, PropertyStatus, RoomType as RoomTypeModel
from app.backend.schemas.property import PropertyCreate, PropertyUpdate, Property as PropertySchema, PropertyList
from app.backend.services.errors import ResourceInUseError, ResourceNotFoundError

router = APIRouter()


def _get_property_or_404(db: Session, property_id: str) -> PropertyModel:
    prop = db.query(PropertyModel).filter_by(property_id=property_id).first()
    if not prop:
        raise ResourceNotFoundError("property", property_id)
    return prop


@router.post("/properties", response_model=PropertySchema, status_code=status.HTTP_201_CREATED)
async def create_property(
    prop: PropertyCreate,
    db: Session = Depends(get_db)
):
    """Create a new property."""
    db_property = PropertyModel(**prop.model_dump())
    db.add(db_property)
    db.commit()
    db.refresh(db_property)
    
    return db_property


@router.get("/properties", response_model=PropertyList)
async def list_properties(
    status: Optional[PropertyStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """List properties."""
    query = db.query(PropertyModel)
    if status:
        query = query.filter_by(status=status)
    properties = query.order_by(PropertyModel.name).offset(skip).limit(limit).all()
    return PropertyList(properties=properties, count=len(properties))


@router.get("/properties/{property_id}", response_model=PropertySchema)
async def get_property(
    property_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific property by ID."""
    return _get_property_or_404(db, property_id)


@router.put("/properties/{property_id}", response_model=PropertySchema)
async def update_property(
    property_id: str,
    prop_update: PropertyUpdate,
    db: Session = Depends(get_db)
):
    """Update a property."""
    prop = _get_property_or_404(db, property_id)
    
    for field, value in prop_update.model_dump(exclude_unset=True).items():
        setattr(prop, field, value)
    
    db.commit()
    db.refresh(prop)
    
    return prop


@router.delete("/properties/{property_id}")
async def delete_property(
    property_id: str,
    db: Session = Depends(get_db)
):
    """Delete a property without room types."""
    prop = _get_property_or_404(db, property_id)
    
    if db.query(RoomTypeModel).filter_by(property_id=property_id).count():
        raise ResourceInUseError(
            f"Property {property_id} still has room types",
            {"property_id": property_id}
        )
    
    db.delete(prop)
    db.commit()
    
    return {"message": "Property deleted successfully", "property_id": property_id}
