"""Logging configuration with customer PII redaction."""
import logging
import sys
from typing import Any, Optional
from app.backend.services.redaction import RedactionService


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers, held at WARNING or above
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")

PRICING_LOGGER = "app.backend.services.pricing"


class RedactionFilter(logging.Filter):
    """
    Scrub customer PII from log records before they are emitted.
    
    Arguments are redacted individually instead of the merged message, so
    %-style placeholders for numbers and dates keep formatting.
    """
    
    def __init__(self, redaction_service: Optional[RedactionService] = None):
        super().__init__()
        self.redaction_service = redaction_service or RedactionService()
    
    def _redact(self, value: Any) -> Any:
        return self.redaction_service.redact_text(value) if isinstance(value, str) else value
    
    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redaction_service.redact_text(record.msg)
        if isinstance(record.args, dict):
            record.args = {key: self._redact(value) for key, value in record.args.items()}
        elif record.args:
            record.args = tuple(self._redact(arg) for arg in record.args)
        return True


def setup_logging(log_level: str = "INFO", pricing_trace: bool = False) -> None:
    """
    Configure application logging.
    
    Args:
        log_level: Root level name (DEBUG, INFO, ...)
        pricing_trace: Log every pricing stage transition at DEBUG
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    
    redaction_filter = RedactionFilter()
    for handler in logging.root.handlers:
        if not any(isinstance(f, RedactionFilter) for f in handler.filters):
            handler.addFilter(redaction_filter)
    
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    
    if pricing_trace:
        logging.getLogger(PRICING_LOGGER).setLevel(logging.DEBUG)
