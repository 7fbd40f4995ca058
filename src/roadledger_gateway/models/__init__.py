"""Domain types and Pydantic models for API requests and responses."""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class ProviderId(str, Enum):
    """Configured backing providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


# Fixed preference order; the first entry is the primary provider.
PROVIDER_PREFERENCE: tuple[ProviderId, ...] = (ProviderId.OPENAI, ProviderId.ANTHROPIC)
PRIMARY_PROVIDER = PROVIDER_PREFERENCE[0]


class ExtractionKind(str, Enum):
    """Document types the gateway knows how to extract."""

    RECEIPT = "receipt"
    SETTLEMENT = "settlement"


@dataclass(frozen=True)
class ExtractionRequest:
    """One sanitized extraction call."""

    prompt_text: str
    image_bytes: bytes
    image_content_type: str


@dataclass(frozen=True)
class ExtractionOutcome:
    """Result of one provider call or of a whole gateway run."""

    success: bool
    provider_used: ProviderId
    elapsed_ms: int
    data: dict[str, Any] | None = None
    error_message: str | None = None


RECEIPT_CATEGORIES = frozenset(
    {"fuel", "maintenance", "tolls", "scales", "parking", "food", "other"}
)

# Allow-lists handed to the output validator
RECEIPT_FIELDS = frozenset(
    {
        "vendor",
        "date",
        "total",
        "currency",
        "category_guess",
        "fuel_gallons",
        "fuel_price_per_gallon",
        "state_hint",
        "confidence",
    }
)

SETTLEMENT_FIELDS = frozenset(
    {
        "carrier",
        "period_start",
        "period_end",
        "gross_pay",
        "net_pay",
        "deductions",
        "confidence",
    }
)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_STATE_PATTERN = re.compile(r"^[A-Za-z]{2}$")


def validate_date_string(value: Any) -> str | None:
    """Accept YYYY-MM-DD dates between 2000-01-01 and the end of next year."""
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        return None
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return None
    latest = date(date.today().year + 1, 12, 31)
    if parsed < date(2000, 1, 1) or parsed > latest:
        return None
    return value


class Deduction(BaseModel):
    """Single settlement deduction line."""

    description: str | None = None
    amount: float | None = None


class ReceiptExtraction(BaseModel):
    """Validated fields of a fuel/expense receipt."""

    kind: Literal["receipt"] = "receipt"
    vendor: str | None = None
    date: str | None = None
    total: float | None = None
    currency: str = "USD"
    category_guess: str | None = None
    fuel_gallons: float | None = None
    fuel_price_per_gallon: float | None = None
    state_hint: str | None = None
    confidence: dict[str, float] = Field(default_factory=dict)

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> str | None:
        return validate_date_string(value)

    @field_validator("state_hint", mode="before")
    @classmethod
    def _check_state(cls, value: Any) -> str | None:
        if isinstance(value, str) and _STATE_PATTERN.match(value):
            return value.upper()
        return None

    @field_validator("category_guess", mode="before")
    @classmethod
    def _check_category(cls, value: Any) -> str | None:
        if isinstance(value, str) and value.lower() in RECEIPT_CATEGORIES:
            return value.lower()
        return None

    @property
    def headline_amount(self) -> float | None:
        return self.total

    @property
    def headline_confidence(self) -> float:
        return self.confidence.get("total", 0.0)


class SettlementExtraction(BaseModel):
    """Validated fields of a carrier settlement statement."""

    kind: Literal["settlement"] = "settlement"
    carrier: str | None = None
    period_start: str | None = None
    period_end: str | None = None
    gross_pay: float | None = None
    net_pay: float | None = None
    deductions: list[Deduction] = Field(default_factory=list)
    confidence: dict[str, float] = Field(default_factory=dict)

    @field_validator("period_start", "period_end", mode="before")
    @classmethod
    def _check_period(cls, value: Any) -> str | None:
        return validate_date_string(value)

    @property
    def headline_amount(self) -> float | None:
        return self.net_pay

    @property
    def headline_confidence(self) -> float:
        return self.confidence.get("net_pay", 0.0)


TypedExtraction = ReceiptExtraction | SettlementExtraction

EXTRACTION_MODELS: dict[ExtractionKind, type[BaseModel]] = {
    ExtractionKind.RECEIPT: ReceiptExtraction,
    ExtractionKind.SETTLEMENT: SettlementExtraction,
}

ALLOWED_FIELDS: dict[ExtractionKind, frozenset[str]] = {
    ExtractionKind.RECEIPT: RECEIPT_FIELDS,
    ExtractionKind.SETTLEMENT: SETTLEMENT_FIELDS,
}


class ExtractRequest(BaseModel):
    """Body of POST /v1/extract."""

    kind: ExtractionKind
    image_base64: str = Field(..., min_length=1, description="Base64 encoded document")
    content_type: str = Field(default="image/jpeg", description="Document MIME type")
    document_text: str | None = Field(
        default=None,
        description="Optional OCR or PDF text extracted on the client",
    )


class ExtractResponse(BaseModel):
    """Response of POST /v1/extract."""

    success: bool
    kind: ExtractionKind
    provider: ProviderId
    elapsed_ms: int
    injection_flagged: bool = False
    auto_accept: bool = False
    extraction: ReceiptExtraction | SettlementExtraction | None = None
    error: str | None = None
