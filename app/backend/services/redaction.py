"""Customer PII redaction for logs and audit metadata."""
import re
from typing import Any, Dict


class RedactionService:
    """Masks customer contact details; rate, unit and room type ids pass through."""
    
    EMAIL_PATTERN = re.compile(
        r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'
    )
    
    # Only honorific-prefixed names; room type names like "Executive Office" must survive
    NAME_PATTERN = re.compile(r'\b(?:Mr|Mrs|Ms|Dr|Prof)\.?\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?\b')
    
    # Booking fields that always hold customer PII
    PII_FIELDS = {
        "customer_name": "[NAME_REDACTED]",
        "customer_email": "[EMAIL_REDACTED]",
    }
    
    def redact_email(self, text: str) -> str:
        return self.EMAIL_PATTERN.sub('[EMAIL_REDACTED]', text)
    
    def redact_names(self, text: str) -> str:
        return self.NAME_PATTERN.sub('[NAME_REDACTED]', text)
    
    def redact_text(self, text: str) -> str:
        """Redact emails and honorific names from free text."""
        if not isinstance(text, str):
            return text
        
        return self.redact_names(self.redact_email(text))
    
    def redact_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of ``data`` with PII fields masked and string values scrubbed, recursively."""
        redacted = {}
        for key, value in data.items():
            if key in self.PII_FIELDS and value is not None:
                redacted[key] = self.PII_FIELDS[key]
            elif isinstance(value, dict):
                redacted[key] = self.redact_fields(value)
            else:
                redacted[key] = self.redact_text(value)
        return redacted
