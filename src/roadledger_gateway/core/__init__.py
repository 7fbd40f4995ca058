"""Core processing modules."""

from roadledger_gateway.core.circuit_breaker import (
    CircuitBreakerConfig,
    HealthTracker,
    ProviderHealth,
)
from roadledger_gateway.core.sanitizer import (
    MAX_LENGTHS,
    contains_injection_attempt,
    sanitize_description,
    sanitize_for_ai,
    sanitize_ocr_text,
    sanitize_pdf_text,
    sanitize_vendor_name,
)
from roadledger_gateway.core.validator import to_typed_extraction, validate_extraction_output

__all__ = [
    "CircuitBreakerConfig",
    "HealthTracker",
    "ProviderHealth",
    "MAX_LENGTHS",
    "contains_injection_attempt",
    "sanitize_description",
    "sanitize_for_ai",
    "sanitize_ocr_text",
    "sanitize_pdf_text",
    "sanitize_vendor_name",
    "to_typed_extraction",
    "validate_extraction_output",
]
