"""Property, room type and unit Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from app.backend.db.models import PropertyStatus, UnitStatus
from app.backend.schemas.pricing import PricingConfig


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value.strip() if value is not None else value


class PropertyCreate(BaseModel):
    """Schema for creating a property."""
    name: str = Field(..., description="Property name")
    address: str = Field(..., description="Street address")
    timezone: str = Field(..., min_length=1, description="IANA timezone")
    status: PropertyStatus = Field(default=PropertyStatus.ACTIVE)
    
    @field_validator("name", "address")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class PropertyUpdate(BaseModel):
    """Schema for updating a property."""
    name: Optional[str] = None
    address: Optional[str] = None
    timezone: Optional[str] = Field(None, min_length=1)
    status: Optional[PropertyStatus] = None
    
    @field_validator("name", "address")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class Property(BaseModel):
    """Schema for property response."""
    property_id: str
    name: str
    address: str
    timezone: str
    status: PropertyStatus
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class PropertyList(BaseModel):
    properties: List[Property]
    count: int


class RoomTypeCreate(BaseModel):
    """Schema for creating a room type."""
    property_id: str = Field(..., min_length=1)
    name: str = Field(..., description="Room type name")
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    amenities: List[str] = Field(default_factory=list)
    pricing_config: Optional[PricingConfig] = None
    
    @field_validator("name")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class RoomTypeUpdate(BaseModel):
    """Schema for updating a room type."""
    name: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    pricing_config: Optional[PricingConfig] = None
    
    @field_validator("name")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class RoomType(BaseModel):
    """Schema for room type response."""
    room_type_id: str
    property_id: str
    name: str
    description: Optional[str]
    capacity: Optional[int]
    amenities: List[str]
    pricing_config: Optional[Dict[str, Any]]
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class RoomTypeList(BaseModel):
    room_types: List[RoomType]
    count: int


class UnitCreate(BaseModel):
    """Schema for creating a unit."""
    room_type_id: str = Field(..., min_length=1)
    unit_number: str = Field(..., description="Door number, e.g. EO-101")
    floor: Optional[int] = None
    status: UnitStatus = Field(default=UnitStatus.AVAILABLE)
    
    @field_validator("unit_number")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class UnitUpdate(BaseModel):
    """Schema for updating a unit."""
    unit_number: Optional[str] = None
    floor: Optional[int] = None
    status: Optional[UnitStatus] = None
    
    @field_validator("unit_number")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class Unit(BaseModel):
    """Schema for unit response."""
    unit_id: str
    room_type_id: str
    unit_number: str
    floor: Optional[int]
    status: UnitStatus
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class UnitList(BaseModel):
    units: List[Unit]
    count: int
