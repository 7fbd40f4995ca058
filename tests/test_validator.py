"""Tests for provider output validation."""

import math

import pytest

from roadledger_gateway.core.validator import (
    MAX_LIST_ITEMS,
    to_typed_extraction,
    validate_amount,
    validate_confidence_scores,
    validate_extraction_output,
)
from roadledger_gateway.models import (
    RECEIPT_FIELDS,
    SETTLEMENT_FIELDS,
    ExtractionKind,
    ReceiptExtraction,
    SettlementExtraction,
)


class TestValidateExtractionOutput:
    """Allow-list cleaning of raw provider output."""

    def test_hostile_receipt(self) -> None:
        raw = {
            "vendor": "<script>x</script>",
            "total": -5,
            "confidence": {"total": 1.5, "vendor": 0.9},
        }

        cleaned = validate_extraction_output(raw, ["vendor", "total", "confidence"])

        assert "<" not in cleaned["vendor"] and ">" not in cleaned["vendor"]
        assert cleaned["vendor"] == "scriptx/script"
        assert "total" not in cleaned
        assert cleaned["confidence"] == {"vendor": 0.9}

    def test_unlisted_fields_discarded(self) -> None:
        raw = {"vendor": "Pilot", "sql": "DROP TABLE", "is_admin": True}

        assert validate_extraction_output(raw, RECEIPT_FIELDS) == {"vendor": "Pilot"}

    def test_booleans_pass_through(self) -> None:
        assert validate_extraction_output({"flag": False}, ["flag"]) == {"flag": False}

    @pytest.mark.parametrize(
        "value",
        [-0.01, 1_000_000_000, 2e12, math.inf, -math.inf, math.nan],
    )
    def test_bad_numbers_omitted(self, value: float) -> None:
        assert validate_extraction_output({"total": value}, ["total"]) == {}

    @pytest.mark.parametrize("value", [0, 12, 385.42, 999_999_999.99])
    def test_good_numbers_kept(self, value: float) -> None:
        assert validate_extraction_output({"total": value}, ["total"]) == {"total": value}

    def test_nulls_omitted(self) -> None:
        assert validate_extraction_output({"vendor": None}, ["vendor"]) == {}

    def test_deductions_reshaped(self) -> None:
        raw = {
            "deductions": [
                {"description": " Fuel advance\x00 ", "amount": 250.0, "note": "x"},
                "not an object",
                42,
                {"description": "Escrow", "amount": -10},
                {"amount": "12"},
                None,
            ]
        }

        cleaned = validate_extraction_output(raw, SETTLEMENT_FIELDS)

        assert cleaned["deductions"] == [
            {"description": "Fuel advance", "amount": 250.0},
            {"description": "Escrow", "amount": None},
            {"description": None, "amount": None},
        ]

    def test_deductions_capped(self) -> None:
        raw = {"deductions": [{"description": f"d{i}", "amount": i} for i in range(80)]}

        cleaned = validate_extraction_output(raw, ["deductions"])

        assert len(cleaned["deductions"]) == MAX_LIST_ITEMS
        assert cleaned["deductions"][-1] == {"description": "d49", "amount": 49}

    def test_huge_integers_omitted(self) -> None:
        raw = {
            "gross_pay": 10**400,
            "net_pay": 1800.5,
            "deductions": [{"description": "Fuel advance", "amount": 10**400}],
        }

        cleaned = validate_extraction_output(raw, SETTLEMENT_FIELDS)

        assert cleaned == {
            "net_pay": 1800.5,
            "deductions": [{"description": "Fuel advance", "amount": None}],
        }


class TestHelpers:
    """Amount and confidence helpers."""

    def test_confidence_rounding(self) -> None:
        scores = {"a": 0.456, "b": 0.125, "c": 1, "d": 0, "e": -0.1, "f": "0.9", "g": True}

        assert validate_confidence_scores(scores) == {"a": 0.46, "b": 0.13, "c": 1.0, "d": 0.0}

    def test_amount_rejects_bool(self) -> None:
        assert validate_amount(True) is None
        assert validate_amount(10) == 10

    @pytest.mark.parametrize("value", [10**400, -(10**400)])
    def test_amount_rejects_huge_integers(self, value: int) -> None:
        assert validate_amount(value) is None


class TestTypedConversion:
    """Conversion into per-kind models."""

    def test_receipt(self) -> None:
        cleaned = validate_extraction_output(
            {
                "vendor": "Pilot #123",
                "date": "2024-03-15",
                "total": 385.42,
                "category_guess": "Fuel",
                "fuel_gallons": 101.3,
                "state_hint": "tx",
                "confidence": {"total": 0.95},
            },
            RECEIPT_FIELDS,
        )

        receipt = to_typed_extraction(ExtractionKind.RECEIPT, cleaned)

        assert isinstance(receipt, ReceiptExtraction)
        assert receipt.kind == "receipt"
        assert receipt.vendor == "Pilot #123"
        assert receipt.date == "2024-03-15"
        assert receipt.total == 385.42
        assert receipt.category_guess == "fuel"
        assert receipt.state_hint == "TX"
        assert receipt.currency == "USD"
        assert receipt.headline_confidence == 0.95

    def test_invalid_values_dropped(self) -> None:
        cleaned = {
            "vendor": "Pilot",
            "date": "03/15/2024",
            "total": "abc",
            "currency": None,
            "category_guess": "casino",
            "state_hint": "Texas",
        }

        receipt = to_typed_extraction(ExtractionKind.RECEIPT, cleaned)

        assert receipt.vendor == "Pilot"
        assert receipt.date is None
        assert receipt.total is None
        assert receipt.currency == "USD"
        assert receipt.category_guess is None
        assert receipt.state_hint is None

    @pytest.mark.parametrize("value", ["1999-12-31", "2024-02-30", "2999-01-01"])
    def test_out_of_range_dates(self, value: str) -> None:
        receipt = to_typed_extraction(ExtractionKind.RECEIPT, {"date": value})
        assert receipt.date is None

    def test_settlement(self) -> None:
        cleaned = validate_extraction_output(
            {
                "carrier": "Acme Freight",
                "period_start": "2024-01-01",
                "period_end": "2024-01-07",
                "gross_pay": 5200,
                "net_pay": 4100.5,
                "deductions": [{"description": "Fuel advance", "amount": 900}],
                "confidence": {"net_pay": 0.7},
                "load_refs": ["L1", "L2"],
            },
            SETTLEMENT_FIELDS,
        )

        settlement = to_typed_extraction(ExtractionKind.SETTLEMENT, cleaned)

        assert isinstance(settlement, SettlementExtraction)
        assert settlement.carrier == "Acme Freight"
        assert settlement.net_pay == 4100.5
        assert settlement.deductions[0].description == "Fuel advance"
        assert settlement.deductions[0].amount == 900
        assert settlement.headline_amount == 4100.5
        assert settlement.headline_confidence == 0.7
