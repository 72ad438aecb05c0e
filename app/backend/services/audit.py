"""Audit logging service."""
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
import hashlib
import json
from app.backend.db.models import AuditLog
from app.backend.services.redaction import RedactionService


SYSTEM_USER = "system"


def snapshot_hash(state: Optional[Dict[str, Any]]) -> Optional[str]:
    """Short, stable hash of a JSON-serializable state."""
    if not state:
        return None
    return hashlib.sha256(
        json.dumps(state, sort_keys=True, default=str).encode()
    ).hexdigest()[:16]


class AuditService:
    """Service for audit logging of rate and booking mutations."""
    
    def __init__(self):
        self.redaction_service = RedactionService()
    
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[str],
        before_state: Optional[Dict[str, Any]] = None,
        after_state: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        user: Optional[str] = None,
        db: Session = None
    ) -> Optional[AuditLog]:
        """
        Log an action to audit log.
        
        The entry is added to the session; the caller's commit persists it
        together with the change it describes.
        
        Args:
            action: Action name (create, update, delete, sync, cancel)
            entity_type: Entity kind (rate, booking)
            entity_id: Entity ID (if applicable)
            before_state: State before action (optional)
            after_state: State after action (optional)
            metadata: Additional metadata (optional, PII-redacted)
            user: User identifier (defaults to system)
            db: Database session
        
        Returns:
            AuditLog entry or None if db not provided
        """
        if not db:
            return None
        
        audit_entry = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            user=user or SYSTEM_USER,
            action=action,
            before_hash=snapshot_hash(before_state),
            after_hash=snapshot_hash(after_state),
            metadata_json=self.redaction_service.redact_fields(metadata or {})
        )
        db.add(audit_entry)
        return audit_entry
