"""Tests for PII redaction in logs and audit metadata."""
import logging
from app.backend.core.logging import RedactionFilter
from app.backend.db.models import AuditLog
from app.backend.services.audit import AuditService, snapshot_hash
from app.backend.services.redaction import RedactionService


def test_redact_email():
    service = RedactionService()
    assert service.redact_text("booking for jane@example.com") == "booking for [EMAIL_REDACTED]"


def test_redact_honorific_names():
    service = RedactionService()
    assert service.redact_text("Contact Dr. Alice Smith today") == "Contact [NAME_REDACTED] today"


def test_identifiers_are_left_alone():
    """Rate and room type ids must stay readable in logs."""
    service = RedactionService()
    text = "Pricing rt_exec_office_dt with rate_exec_dt_daily_q1 for Executive Office"
    assert service.redact_text(text) == text


def test_redact_fields_masks_customer_fields():
    service = RedactionService()
    data = {
        "customer_name": "Acme Corporation",
        "customer_email": "booking@acme.com",
        "note": "requested by ops@acme.com",
        "nights": 5,
        "booking": {"customer_email": "jane@example.com"},
    }
    assert service.redact_fields(data) == {
        "customer_name": "[NAME_REDACTED]",
        "customer_email": "[EMAIL_REDACTED]",
        "note": "requested by [EMAIL_REDACTED]",
        "nights": 5,
        "booking": {"customer_email": "[EMAIL_REDACTED]"},
    }


def test_redaction_filter_rewrites_record_args():
    record = logging.LogRecord(
        "test", logging.INFO, __file__, 1, "Created booking for %s (%s)", ("ops@globex.com", 3), None
    )
    assert RedactionFilter().filter(record)
    assert record.getMessage() == "Created booking for [EMAIL_REDACTED] (3)"


def test_audit_entry_redacts_metadata(db_session):
    entry = AuditService().log_action(
        "update", "booking", "book_001",
        before_state={"status": "pending"},
        after_state={"status": "confirmed"},
        metadata={"customer_email": "booking@acme.com"},
        db=db_session
    )
    db_session.commit()
    
    stored = db_session.query(AuditLog).filter_by(id=entry.id).first()
    assert stored.user == "system"
    assert stored.metadata_json == {"customer_email": "[EMAIL_REDACTED]"}
    assert stored.before_hash == snapshot_hash({"status": "pending"})
    assert stored.before_hash != stored.after_hash


def test_audit_without_session_is_noop():
    assert AuditService().log_action("create", "rate", "rate_x") is None
