"""Helpers that keep document content out of log output."""

import re
from typing import Any

# Order matters: card numbers before the shorter SSN shape.
_LOG_REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b"), "[CARD]"),
    (re.compile(r"\b\d{3}[-.]?\d{2}[-.]?\d{4}\b"), "[SSN]"),
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[EMAIL]"),
    (re.compile(r"Bearer\s+[A-Za-z0-9._-]+", re.IGNORECASE), "Bearer [REDACTED]"),
    (re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*"), "[JWT]"),
]


def safe_log_fields(**fields: Any) -> dict[str, Any]:
    """Describe values by shape instead of content.

    Strings become ``[STRING:<n>chars]``, mappings and sequences become
    ``[OBJECT]``, anything else ``[REDACTED]``. ``None`` stays ``None``.

    Returns:
        Mapping suitable for passing as structlog key/value pairs
    """
    redacted: dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            redacted[key] = None
        elif isinstance(value, str):
            redacted[key] = f"[STRING:{len(value)}chars]"
        elif isinstance(value, (bytes, bytearray)):
            redacted[key] = f"[BYTES:{len(value)}]"
        elif isinstance(value, (dict, list, tuple, set)):
            redacted[key] = "[OBJECT]"
        else:
            redacted[key] = "[REDACTED]"
    return redacted


def sanitize_for_log(value: str | None, max_length: int = 100) -> str:
    """Truncate a free-form string and mask sensitive patterns.

    Args:
        value: String to clean, typically an error message
        max_length: Characters kept before an ellipsis is appended

    Returns:
        Log-safe string
    """
    if not value:
        return ""

    sanitized = value[:max_length] + "..." if len(value) > max_length else value
    for pattern, replacement in _LOG_REDACTIONS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized
