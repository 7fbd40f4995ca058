"""Text sanitizer - neutralizes untrusted document text before prompting."""

import re
from dataclasses import dataclass

from roadledger_gateway.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SanitizationLimits:
    """Character ceilings per content class."""

    ocr_text: int = 120_000
    pdf_text: int = 120_000
    prompt_context: int = 50_000
    vendor_name: int = 500
    description: int = 2_000


MAX_LENGTHS = SanitizationLimits()

TRUNCATION_MARKER = "\n[TRUNCATED]"
FENCE_MARKER = "---"
EXCERPT_LENGTH = 20

# C0 controls except tab (0x09), newline (0x0A) and carriage return (0x0D)
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

# Applied in order. Compiled patterns hold no match state between calls.
INJECTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"system:\s*", re.IGNORECASE),
    re.compile(r"assistant:\s*", re.IGNORECASE),
    re.compile(r"user:\s*", re.IGNORECASE),
    re.compile(r"ignore\s+(previous|all|above)\s+(instructions?|prompts?)", re.IGNORECASE),
    re.compile(r"disregard\s+(previous|all|above)", re.IGNORECASE),
    re.compile(r"forget\s+(previous|all|above)", re.IGNORECASE),
    re.compile(r"new\s+instructions?:", re.IGNORECASE),
    re.compile(r"override\s+instructions?", re.IGNORECASE),
    re.compile(r"<\|.*?\|>"),
    re.compile(r"\[\[.*?\]\]"),
    re.compile(r"```system", re.IGNORECASE),
    re.compile(r"\beval\s*\(", re.IGNORECASE),
    re.compile(r"\bexec\s*\(", re.IGNORECASE),
)

_FENCE_PATTERN = re.compile(r"`{3,}")
_VENDOR_STRIP_PATTERN = re.compile(r"[<>{}\[\]]")
# Removed from marker excerpts so role prefixes and token delimiters
# do not reappear inside the marker itself.
_EXCERPT_STRIP_PATTERN = re.compile(r"[:<>|\[\]()`]")


def _filtered_marker(match: re.Match[str]) -> str:
    excerpt = _EXCERPT_STRIP_PATTERN.sub("", match.group(0)[:EXCERPT_LENGTH]).strip()
    return f"[FILTERED: {excerpt}]"


def strip_control_chars(text: str) -> str:
    """Remove C0 control characters, keeping newlines and tabs."""
    return CONTROL_CHAR_PATTERN.sub("", text)


def sanitize_for_ai(text: str | None, max_length: int = MAX_LENGTHS.prompt_context) -> str:
    """Sanitize text before it is embedded in a model prompt.

    Steps, in order:
    1. Strip control characters
    2. Replace injection patterns with ``[FILTERED: <excerpt>]``
    3. Collapse triple-backtick fences to ``---``
    4. Truncate to ``max_length`` and append a truncation marker

    Args:
        text: Untrusted text, may be None
        max_length: Ceiling for the content class

    Returns:
        Sanitized text, empty string for missing input
    """
    if not text:
        return ""

    sanitized = strip_control_chars(text)

    for pattern in INJECTION_PATTERNS:
        sanitized = pattern.sub(_filtered_marker, sanitized)

    sanitized = _FENCE_PATTERN.sub(FENCE_MARKER, sanitized)

    return truncate_text(sanitized, max_length)


def truncate_text(text: str, max_length: int) -> str:
    """Cap text at ``max_length``, appending the truncation marker when cut."""
    if len(text) <= max_length:
        return text
    logger.debug("sanitizer.truncated", length=len(text), max_length=max_length)
    return text[:max_length] + TRUNCATION_MARKER


def sanitize_ocr_text(text: str | None) -> str:
    """Sanitize OCR output."""
    return sanitize_for_ai(text, MAX_LENGTHS.ocr_text)


def sanitize_pdf_text(text: str | None) -> str:
    """Sanitize text extracted from a PDF."""
    return sanitize_for_ai(text, MAX_LENGTHS.pdf_text)


def contains_injection_attempt(text: str | None) -> bool:
    """Check whether text matches any injection pattern.

    Control characters are stripped before matching, so a role prefix
    split by a NUL byte is still caught. Used for flagging only; the
    caller's text is never altered.
    """
    if not text:
        return False
    stripped = strip_control_chars(text)
    return any(pattern.search(stripped) for pattern in INJECTION_PATTERNS)


def sanitize_vendor_name(name: str | None) -> str | None:
    """Clean a short name-like field.

    Returns:
        Cleaned value, or None if nothing remains
    """
    if not name:
        return None

    sanitized = _VENDOR_STRIP_PATTERN.sub("", strip_control_chars(name)).strip()
    sanitized = sanitized[: MAX_LENGTHS.vendor_name]
    return sanitized or None


def sanitize_description(text: str | None) -> str | None:
    """Clean a free-text description field."""
    if not text:
        return None

    sanitized = strip_control_chars(text).strip()
    sanitized = sanitized[: MAX_LENGTHS.description]
    return sanitized or None
