"""Tests for the analytics engine."""

from unittest.mock import patch

import pytest

from billtracker.models import AnalyticsResult, Bill
from billtracker.services.analytics import build_utility_breakdown, compute_analytics


def make_bill(units: float, amount: float = 100.0, utility: str = "electricity", month: str = "January") -> Bill:
    """Helper to create a test bill."""
    return Bill(month=month, year=2024, utility_type=utility, units_consumed=units, amount=amount)


class TestEmptyInput:
    """Test the zero state."""

    def test_returns_zero_state(self):
        """Empty input should not raise and should be all zeros."""
        result = compute_analytics([])

        assert result == AnalyticsResult()
        assert result.average_consumption == 0
        assert result.average_amount == 0
        assert result.total_bills == 0
        assert result.high_consumption_alerts == []
        assert result.utility_breakdown == {}

    def test_ignores_threshold(self):
        """An explicit threshold should not matter for empty input."""
        assert compute_analytics([], threshold=10).total_bills == 0


class TestDefaultThreshold:
    """Test the data-dependent default threshold."""

    def test_one_and_a_half_times_average(self):
        """Units [100, 200, 600] give average 300 and threshold 450."""
        bills = [make_bill(100), make_bill(200), make_bill(600)]

        result = compute_analytics(bills)

        assert result.average_consumption == 300
        assert result.threshold_used == 450
        assert len(result.high_consumption_alerts) == 1
        alert = result.high_consumption_alerts[0]
        assert alert.units_consumed == 600
        assert alert.threshold == 450
        assert alert.percentage_above_threshold == 33.3

    def test_uses_only_the_given_bills(self):
        """The default should come from the filtered set passed in."""
        water = [make_bill(10, utility="water"), make_bill(20, utility="water"), make_bill(60, utility="water")]

        result = compute_analytics(water)

        # Average 30, threshold 45
        assert result.threshold_used == 45
        assert [a.units_consumed for a in result.high_consumption_alerts] == [60]

    @patch("billtracker.services.analytics.settings")
    def test_multiplier_from_settings(self, mock_settings):
        """The multiplier should be configurable."""
        mock_settings.alert_multiplier = 2.0
        result = compute_analytics([make_bill(100), make_bill(300)])
        assert result.threshold_used == 400
        assert result.high_consumption_alerts == []

    def test_non_numeric_threshold_falls_back(self):
        """A threshold that is not a number should be ignored."""
        bills = [make_bill(100), make_bill(200), make_bill(600)]
        assert compute_analytics(bills, threshold="lots").threshold_used == 450
        assert compute_analytics(bills, threshold="").threshold_used == 450
        assert compute_analytics(bills, threshold="nan").threshold_used == 450


class TestExplicitThreshold:
    """Test caller-supplied thresholds."""

    def test_numeric_string(self):
        """Numeric strings should be parsed."""
        bills = [make_bill(100), make_bill(200), make_bill(600)]

        result = compute_analytics(bills, threshold="250")

        assert result.threshold_used == 250
        assert [a.units_consumed for a in result.high_consumption_alerts] == [600]
        assert result.high_consumption_alerts[0].percentage_above_threshold == 140.0

    def test_strictly_greater_than(self):
        """A bill exactly at the threshold is not an alert."""
        result = compute_analytics([make_bill(100), make_bill(200)], threshold=200)
        assert result.high_consumption_alerts == []

    def test_alerts_keep_input_order(self):
        """Alerts should follow the input order, not sorted by units."""
        bills = [make_bill(900, month="May"), make_bill(10), make_bill(500, month="March")]

        result = compute_analytics(bills, threshold=100)

        assert [a.units_consumed for a in result.high_consumption_alerts] == [900, 500]

    def test_zero_threshold_flags_every_positive_bill(self):
        """A zero threshold is accepted; percentage is undefined."""
        bills = [make_bill(0), make_bill(5), make_bill(50)]

        result = compute_analytics(bills, threshold=0)

        assert [a.units_consumed for a in result.high_consumption_alerts] == [5, 50]
        assert all(a.percentage_above_threshold is None for a in result.high_consumption_alerts)

    def test_negative_threshold_is_not_corrected(self):
        """A negative threshold is used as given."""
        bills = [make_bill(0), make_bill(100)]

        result = compute_analytics(bills, threshold=-10)

        assert len(result.high_consumption_alerts) == 2
        assert result.high_consumption_alerts[1].percentage_above_threshold == -1100.0

    def test_percentage_half_rounds_up(self):
        """6.25% above the threshold reports as 6.3, not 6.2."""
        result = compute_analytics([make_bill(17)], threshold=16)

        assert result.high_consumption_alerts[0].percentage_above_threshold == 6.3


class TestAverages:
    """Test average rounding."""

    def test_rounded_to_two_decimals(self):
        """Display averages are rounded; the threshold keeps full precision."""
        bills = [make_bill(1, amount=1), make_bill(2, amount=2), make_bill(2, amount=2)]

        result = compute_analytics(bills)

        assert result.average_consumption == 1.67
        assert result.average_amount == 1.67
        assert result.threshold_used == pytest.approx(2.5)
        assert result.total_bills == 3

    def test_halves_round_up(self):
        """An average of exactly 0.125 reports as 0.13."""
        bills = [make_bill(0.125, amount=0.125), make_bill(0.125, amount=0.125)]

        result = compute_analytics(bills)

        assert result.average_consumption == 0.13
        assert result.average_amount == 0.13


class TestUtilityBreakdown:
    """Test per-utility breakdown."""

    def test_groups_by_utility(self):
        """Should compute totals and averages per utility."""
        bills = [
            make_bill(100, amount=50, utility="electricity"),
            make_bill(300, amount=150, utility="electricity"),
            make_bill(20, amount=10, utility="water"),
        ]

        breakdown = compute_analytics(bills).utility_breakdown

        assert list(breakdown) == ["electricity", "water"]
        assert breakdown["electricity"].total_units == 400
        assert breakdown["electricity"].count == 2
        assert breakdown["electricity"].average_units == 200
        assert breakdown["electricity"].average_amount == 100
        assert breakdown["water"].total_amount == 10
        assert "gas" not in breakdown

    def test_partitions_total_amount(self):
        """Breakdown totals should add up to the input total."""
        bills = [
            make_bill(10, amount=12.34, utility="gas"),
            make_bill(20, amount=56.78, utility="water"),
            make_bill(30, amount=90.12, utility="electricity"),
            make_bill(40, amount=3.45, utility="gas"),
        ]

        breakdown = build_utility_breakdown(bills)

        assert sum(s.total_amount for s in breakdown.values()) == pytest.approx(sum(b.amount for b in bills))
