"""SQLAlchemy 2.0 database models."""
from sqlalchemy import Column, String, Integer, DateTime, Date, ForeignKey, JSON, Enum as SQLEnum, Numeric, Text
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime
import enum
import uuid


Base = declarative_base()


def new_id(prefix: str) -> str:
    """Generate an id like ``rate_<uuid4>``."""
    return f"{prefix}_{uuid.uuid4()}"


class RateType(str, enum.Enum):
    """Rate granularity enumeration."""
    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"


class PropertyStatus(str, enum.Enum):
    """Property status enumeration."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class UnitStatus(str, enum.Enum):
    """Unit availability enumeration."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Property(Base):
    """Property (building) model."""
    __tablename__ = "properties"
    
    property_id = Column(String, primary_key=True, default=lambda: new_id("prop"))
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    timezone = Column(String, nullable=False)
    status = Column(SQLEnum(PropertyStatus), default=PropertyStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    room_types = relationship("RoomType", back_populates="property")


class RoomType(Base):
    """Room type model; owns rates and units."""
    __tablename__ = "room_types"
    
    room_type_id = Column(String, primary_key=True, default=lambda: new_id("rt"))
    property_id = Column(String, ForeignKey("properties.property_id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=True)
    amenities = Column(JSON, default=list)
    pricing_config = Column(JSON, nullable=True)  # {rate_selection_strategy, minimum_stay_nights, ...}
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    property = relationship("Property", back_populates="room_types")
    units = relationship("Unit", back_populates="room_type")
    rates = relationship("Rate", back_populates="room_type")


class Unit(Base):
    """Bookable unit model."""
    __tablename__ = "units"
    
    unit_id = Column(String, primary_key=True, default=lambda: new_id("unit"))
    room_type_id = Column(String, ForeignKey("room_types.room_type_id"), nullable=False, index=True)
    unit_number = Column(String, nullable=False)
    floor = Column(Integer, nullable=True)
    status = Column(SQLEnum(UnitStatus), default=UnitStatus.AVAILABLE, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    room_type = relationship("RoomType", back_populates="units")
    bookings = relationship("Booking", back_populates="unit")


class Rate(Base):
    """Rate record: a priced validity window, inclusive of both dates."""
    __tablename__ = "rates"
    
    rate_id = Column(String, primary_key=True, default=lambda: new_id("rate"))
    room_type_id = Column(String, ForeignKey("room_types.room_type_id"), nullable=False, index=True)
    rate_type = Column(SQLEnum(RateType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    effective_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    room_type = relationship("RoomType", back_populates="rates")


class Booking(Base):
    """Booking model."""
    __tablename__ = "bookings"
    
    booking_id = Column(String, primary_key=True, default=lambda: new_id("book"))
    unit_id = Column(String, ForeignKey("units.unit_id"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    calculated_price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(SQLEnum(BookingStatus), default=BookingStatus.PENDING, nullable=False)
    price_breakdown = Column(JSON, nullable=True)  # Frozen PriceBreakdown at pricing time
    rate_ids = Column(JSON, default=list)  # Rates referenced by the breakdown
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    unit = relationship("Unit", back_populates="bookings")


class AuditLog(Base):
    """Audit log model for tracking rate and booking mutations."""
    __tablename__ = "audit_logs"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    entity_type = Column(String, nullable=False)  # rate, booking
    entity_id = Column(String, nullable=True, index=True)
    user = Column(String, nullable=False)
    action = Column(String, nullable=False)  # create, update, delete, sync, cancel
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    before_hash = Column(String, nullable=True)
    after_hash = Column(String, nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True)
