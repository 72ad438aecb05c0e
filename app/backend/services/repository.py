"""Rate repository: the lookups the pricing core needs from storage."""
from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.backend.db.models import Rate, RoomType, Unit
from app.backend.schemas.pricing import PricingConfig, RateRecord
from app.backend.services.errors import InternalInconsistencyError


class RateRepository(ABC):
    """Abstract collaborator the pricing service reads from."""
    
    @abstractmethod
    def get_unit(self, unit_id: str) -> Optional[Unit]:
        """Return the unit or None if it does not exist."""
        pass
    
    @abstractmethod
    def get_room_type(self, room_type_id: str) -> Optional[RoomType]:
        """Return the room type or None if it does not exist."""
        pass
    
    @abstractmethod
    def get_rates_for_room_type(self, room_type_id: str) -> List[RateRecord]:
        """Return an immutable snapshot of every rate of the room type."""
        pass
    
    @abstractmethod
    def get_pricing_config(self, room_type_id: str) -> PricingConfig:
        """Return the room type's pricing config, or the default config."""
        pass


class SqlRateRepository(RateRepository):
    """SQLAlchemy-backed repository."""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.db.query(Unit).filter_by(unit_id=unit_id).first()
    
    def get_room_type(self, room_type_id: str) -> Optional[RoomType]:
        return self.db.query(RoomType).filter_by(room_type_id=room_type_id).first()
    
    def get_rates_for_room_type(self, room_type_id: str) -> List[RateRecord]:
        rates = (
            self.db.query(Rate)
            .filter_by(room_type_id=room_type_id)
            .order_by(Rate.effective_date, Rate.rate_id)
            .all()
        )
        return [RateRecord.model_validate(rate) for rate in rates]
    
    def get_pricing_config(self, room_type_id: str) -> PricingConfig:
        room_type = self.get_room_type(room_type_id)
        if room_type is None or not room_type.pricing_config:
            return PricingConfig()
        
        try:
            return PricingConfig.model_validate(room_type.pricing_config)
        except ValidationError as e:
            raise InternalInconsistencyError(
                f"Room type {room_type_id} has an invalid pricing_config",
                {"room_type_id": room_type_id, "errors": [err["msg"] for err in e.errors()]}
            ) from e
