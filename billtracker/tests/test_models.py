"""Tests for bill models and validation helpers."""

import pytest
from pydantic import ValidationError

from billtracker.errors import InvalidUtilityType
from billtracker.models import (
    Bill,
    BillCreate,
    Month,
    UtilityType,
    compute_cost_per_unit,
    parse_utility_type,
)


class TestCostPerUnit:
    """Test the derived cost per unit."""

    def test_divides_amount_by_units(self):
        """Should be amount / units."""
        assert compute_cost_per_unit(125.00, 250.5) == pytest.approx(0.4990, abs=1e-4)

    def test_zero_units_gives_zero(self):
        """Should not divide by zero."""
        assert compute_cost_per_unit(80.0, 0) == 0.0

    def test_bill_exposes_derived_value(self):
        """Bill.cost_per_unit should follow amount and units."""
        bill = Bill(month="March", year=2024, utility_type="gas", units_consumed=40, amount=100)
        assert bill.cost_per_unit == 2.5

    def test_cannot_be_supplied_on_input(self):
        """A costPerUnit in the payload should be ignored."""
        bill = Bill.model_validate(
            {
                "month": "March",
                "year": 2024,
                "utilityType": "gas",
                "unitsConsumed": 40,
                "amount": 100,
                "costPerUnit": 99.0,
            }
        )
        assert bill.cost_per_unit == 2.5

    def test_follows_copied_fields(self):
        """A copy with a new amount should report the new cost per unit."""
        bill = Bill(month="March", year=2024, utility_type="gas", units_consumed=40, amount=100)
        changed = bill.model_copy(update={"amount": 200})
        assert changed.cost_per_unit == 5.0


class TestBillCreate:
    """Test bill input validation."""

    def test_lowercases_utility_type(self):
        """Utility type should be case-normalized."""
        fields = BillCreate(month="January", year=2024, utility_type="Electricity", units_consumed=1, amount=1)
        assert fields.utility_type == UtilityType.ELECTRICITY

    def test_accepts_camel_case_keys(self):
        """Should accept the JSON field names."""
        fields = BillCreate.model_validate(
            {"month": "July", "year": 2023, "utilityType": "WATER", "unitsConsumed": 12.5, "amount": 30}
        )
        assert fields.utility_type == UtilityType.WATER
        assert fields.units_consumed == 12.5

    def test_normalizes_month_case(self):
        """Month names should be matched regardless of case."""
        fields = BillCreate(month="JANUARY", year=2024, utility_type="gas", units_consumed=1, amount=1)
        assert fields.month == Month.JANUARY

    @pytest.mark.parametrize("year", [1999, 2101])
    def test_rejects_year_out_of_range(self, year):
        """Year must be within 2000-2100."""
        with pytest.raises(ValidationError):
            BillCreate(month="January", year=year, utility_type="gas", units_consumed=1, amount=1)

    def test_rejects_negative_amount(self):
        """Amount must not be negative."""
        with pytest.raises(ValidationError):
            BillCreate(month="January", year=2024, utility_type="gas", units_consumed=1, amount=-5)

    def test_rejects_unknown_utility(self):
        """Only electricity, water and gas are allowed."""
        with pytest.raises(ValidationError):
            BillCreate(month="January", year=2024, utility_type="internet", units_consumed=1, amount=1)

    def test_rejects_unknown_month(self):
        """Month must be a calendar month name."""
        with pytest.raises(ValidationError):
            BillCreate(month="Smarch", year=2024, utility_type="gas", units_consumed=1, amount=1)


class TestBillSerialization:
    """Test the JSON shape of a bill."""

    def test_dumps_camel_case_with_derived_fields(self):
        """Should include costPerUnit and period under camelCase keys."""
        bill = Bill(month="May", year=2025, utility_type="water", units_consumed=10, amount=5)
        data = bill.model_dump(by_alias=True)

        assert data["unitsConsumed"] == 10
        assert data["utilityType"] == UtilityType.WATER
        assert data["costPerUnit"] == 0.5
        assert data["period"] == "May 2025"
        assert data["isPaid"] is False
        assert data["paymentDate"] is None


class TestParseUtilityType:
    """Test utility filter parsing."""

    def test_none_means_no_filter(self):
        assert parse_utility_type(None) is None

    def test_blank_means_no_filter(self):
        assert parse_utility_type("  ") is None

    def test_parses_any_case(self):
        assert parse_utility_type("Gas") == UtilityType.GAS

    def test_rejects_unknown(self):
        """Should raise InvalidUtilityType, which is also a ValueError."""
        with pytest.raises(InvalidUtilityType, match="solar"):
            parse_utility_type("solar")
        with pytest.raises(ValueError):
            parse_utility_type("solar")


class TestMonth:
    """Test month ordering."""

    def test_index_is_calendar_position(self):
        assert Month.JANUARY.index == 1
        assert Month.SEPTEMBER.index == 9
        assert Month.DECEMBER.index == 12
