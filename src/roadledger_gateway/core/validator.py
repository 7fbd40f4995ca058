"""Output validator - allow-lists provider output before it reaches the app."""

import math
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from roadledger_gateway.core.sanitizer import sanitize_description, sanitize_vendor_name
from roadledger_gateway.models import EXTRACTION_MODELS, ExtractionKind
from roadledger_gateway.utils import get_logger

logger = get_logger(__name__)

MAX_AMOUNT = 1_000_000_000
MAX_LIST_ITEMS = 50


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_amount(value: Any) -> float | int | None:
    """Keep finite, non-negative numbers below the amount ceiling."""
    if not _is_number(value):
        return None
    # Range check also rejects NaN and infinities; no float conversion of huge ints
    if not 0 <= value < MAX_AMOUNT:
        return None
    return value


def validate_confidence_scores(scores: dict[Any, Any]) -> dict[str, float]:
    """Keep scores in [0, 1], rounded half-up to two decimals."""
    validated: dict[str, float] = {}
    for key, value in scores.items():
        if _is_number(value) and 0 <= value <= 1:
            validated[str(key)] = math.floor(value * 100 + 0.5) / 100
    return validated


def _validate_line_items(items: list[Any]) -> list[dict[str, Any]]:
    return [
        {
            "description": sanitize_description(
                item.get("description") if isinstance(item.get("description"), str) else None
            ),
            "amount": validate_amount(item.get("amount")),
        }
        for item in items[:MAX_LIST_ITEMS]
        if isinstance(item, dict)
    ]


def validate_extraction_output(
    output: dict[str, Any],
    allowed_fields: Iterable[str],
) -> dict[str, Any]:
    """Clean raw provider output against an allow-list.

    Fields outside ``allowed_fields`` are discarded. Per value type:

    - bool: passed through
    - str: cleaned like a vendor name
    - number: kept only if finite, non-negative and below 1e9
    - dict: treated as a confidence-score map
    - list: treated as line items, reshaped to ``{description, amount}``

    Args:
        output: Mapping parsed from the provider response
        allowed_fields: Field names accepted for this extraction kind

    Returns:
        Cleaned mapping
    """
    cleaned: dict[str, Any] = {}

    for name in allowed_fields:
        if name not in output:
            continue
        value = output[name]

        if isinstance(value, bool):
            cleaned[name] = value
        elif isinstance(value, str):
            cleaned[name] = sanitize_vendor_name(value)
        elif _is_number(value):
            amount = validate_amount(value)
            if amount is not None:
                cleaned[name] = amount
        elif isinstance(value, dict):
            cleaned[name] = validate_confidence_scores(value)
        elif isinstance(value, list):
            cleaned[name] = _validate_line_items(value)

    dropped = set(output) - set(cleaned)
    if dropped:
        logger.debug("validator.fields_dropped", count=len(dropped))

    return cleaned


def to_typed_extraction(kind: ExtractionKind, cleaned: dict[str, Any]) -> BaseModel:
    """Convert validated output into the typed model for ``kind``.

    Fields that still fail model validation are dropped rather than raised.
    """
    model = EXTRACTION_MODELS[kind]
    data = dict(cleaned)

    while True:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            invalid = {err["loc"][0] for err in e.errors() if err["loc"]} & data.keys()
            if not invalid:
                logger.warning("validator.typed_conversion_failed", kind=kind.value)
                return model()
            logger.debug("validator.invalid_fields", kind=kind.value, fields=sorted(invalid))
            for name in invalid:
                del data[name]
