"""Rate administration: overlap checks, locking and external feed sync."""
import json
import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.backend.core.config import settings
from app.backend.db.models import Booking, BookingStatus, Rate, RoomType, new_id
from app.backend.schemas.pricing import RateRecord
from app.backend.schemas.rate import RateCreate, RateSyncResult
from app.backend.services.audit import AuditService
from app.backend.services.errors import RateLockedError, RateOverlapError, RateSyncError
from app.backend.services.rate_selector import RateOverlap, find_overlaps


logger = logging.getLogger(__name__)


def rate_state(rate: Rate) -> Dict[str, Any]:
    """JSON-friendly view of a rate for audit hashing."""
    return {
        "rate_id": rate.rate_id,
        "room_type_id": rate.room_type_id,
        "rate_type": rate.rate_type.value if rate.rate_type else None,
        "amount": str(rate.amount),
        "currency": rate.currency,
        "effective_date": rate.effective_date.isoformat() if rate.effective_date else None,
        "end_date": rate.end_date.isoformat() if rate.end_date else None,
    }


class RateAdminService:
    """Guards rate mutations and imports the external rate feed."""
    
    def __init__(self):
        self.audit_service = AuditService()
    
    def locking_bookings(self, rate_id: str, db: Session) -> List[str]:
        """Confirmed bookings whose frozen breakdown references ``rate_id``."""
        confirmed = db.query(Booking).filter_by(status=BookingStatus.CONFIRMED).all()
        return sorted(booking.booking_id for booking in confirmed if rate_id in (booking.rate_ids or []))
    
    def ensure_unlocked(self, rate_id: str, db: Session) -> None:
        booking_ids = self.locking_bookings(rate_id, db)
        if booking_ids:
            raise RateLockedError(rate_id, booking_ids)
    
    def check_overlaps(self, candidate: RateRecord, db: Session) -> List[RateOverlap]:
        """
        Overlaps the candidate would form with the other rates of its room type.
        
        Raises RateOverlapError when overlapping rates are rejected at write
        time; otherwise the overlaps are logged and returned.
        """
        others = [
            RateRecord.model_validate(rate)
            for rate in db.query(Rate).filter_by(room_type_id=candidate.room_type_id).all()
            if rate.rate_id != candidate.rate_id
        ]
        overlaps = [
            overlap for overlap in find_overlaps(others + [candidate])
            if candidate.rate_id in (overlap.winner_id, overlap.superseded_id)
        ]
        if not overlaps:
            return []
        
        if settings.reject_overlapping_rates:
            raise RateOverlapError(
                f"Rate overlaps {len(overlaps)} existing rate window(s)",
                {"overlaps": [overlap.to_dict() for overlap in overlaps]}
            )
        for overlap in overlaps:
            logger.warning(overlap.warning)
        return overlaps
    
    def room_type_overlaps(self, room_type_id: str, db: Session) -> List[RateOverlap]:
        rates = db.query(Rate).filter_by(room_type_id=room_type_id).all()
        return find_overlaps([RateRecord.model_validate(rate) for rate in rates])
    
    def _load_feed(self, path: str) -> List[Dict[str, Any]]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                feed = json.load(f)
        except FileNotFoundError as e:
            raise RateSyncError(f"External rate feed not found: {path}", {"path": path}) from e
        except json.JSONDecodeError as e:
            raise RateSyncError(
                f"External rate feed is not valid JSON: {e.msg}",
                {"path": path, "line": e.lineno}
            ) from e
        
        if not isinstance(feed, list):
            raise RateSyncError("External rate feed must be a JSON array", {"path": path})
        return feed
    
    def sync_external_rates(self, db: Session, path: Optional[str] = None) -> RateSyncResult:
        """
        Import the external rate feed.
        
        An entry matching an existing rate on room type, rate type and both
        dates updates its amount and currency; anything else is inserted.
        Invalid entries are reported per entry without aborting the sync.
        
        Args:
            db: Database session
            path: Feed location (defaults to settings.external_rates_path)
        
        Returns:
            RateSyncResult with counters and per-entry errors
        """
        path = path or settings.external_rates_path
        feed = self._load_feed(path)
        result = RateSyncResult()
        
        for index, entry in enumerate(feed):
            try:
                incoming = RateCreate.model_validate(entry)
            except ValidationError as e:
                result.errors.append({"index": index, "rate": entry, "error": [err["msg"] for err in e.errors()]})
                continue
            
            if db.query(RoomType).filter_by(room_type_id=incoming.room_type_id).first() is None:
                result.errors.append({"index": index, "rate": entry, "error": "room type not found"})
                continue
            
            existing = db.query(Rate).filter_by(
                room_type_id=incoming.room_type_id,
                rate_type=incoming.rate_type,
                effective_date=incoming.effective_date,
                end_date=incoming.end_date
            ).first()
            
            if existing is not None:
                if existing.amount == incoming.amount and existing.currency == incoming.currency:
                    result.skipped += 1
                    continue
                if self.locking_bookings(existing.rate_id, db):
                    result.skipped += 1
                    result.errors.append({"index": index, "rate": entry, "error": f"rate {existing.rate_id} is locked"})
                    continue
                before = rate_state(existing)
                existing.amount = incoming.amount
                existing.currency = incoming.currency
                self.audit_service.log_action(
                    "sync", "rate", existing.rate_id, before, rate_state(existing), {"source": path}, db=db
                )
                result.updated += 1
            else:
                rate = Rate(rate_id=new_id("rate"), **incoming.model_dump())
                try:
                    self.check_overlaps(RateRecord.model_validate(rate), db)
                except RateOverlapError as e:
                    result.skipped += 1
                    result.errors.append({"index": index, "rate": entry, "error": e.message})
                    continue
                db.add(rate)
                db.flush()
                self.audit_service.log_action(
                    "sync", "rate", rate.rate_id, None, rate_state(rate), {"source": path}, db=db
                )
                result.imported += 1
        
        db.commit()
        logger.info(
            "Rate sync from %s: %d imported, %d updated, %d skipped, %d error(s)",
            path, result.imported, result.updated, result.skipped, len(result.errors)
        )
        return result
