"""Consumption analytics: averages, high-consumption alerts and utility breakdown."""

import logging
import math
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from billtracker.config import settings
from billtracker.models import AnalyticsResult, Bill, HighConsumptionAlert, UtilityStats

logger = logging.getLogger(__name__)


def _parse_threshold(threshold: float | str | None) -> float | None:
    """Return the threshold as a float, or None if missing or not numeric."""
    if threshold is None or isinstance(threshold, bool):
        return None
    if isinstance(threshold, str) and not threshold.strip():
        return None
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        value = math.nan
    if not math.isfinite(value):
        logger.debug(f"Ignoring non-numeric threshold {threshold!r}")
        return None
    return value


def _round_half_up(value: float, places: int) -> float:
    """Round halves away from zero, so 0.125 gives 0.13 rather than 0.12."""
    return float(Decimal(repr(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _percentage_above(units: float, threshold: float) -> float | None:
    if threshold == 0:
        return None
    return _round_half_up((units - threshold) / threshold * 100, 1)


def build_utility_breakdown(bills: Sequence[Bill]) -> dict[str, UtilityStats]:
    """Totals and averages per utility type present in bills, in first-seen order."""
    breakdown: dict[str, UtilityStats] = {}
    for bill in bills:
        stats = breakdown.setdefault(bill.utility_type.value, UtilityStats())
        stats.total_units += bill.units_consumed
        stats.total_amount += bill.amount
        stats.count += 1

    for stats in breakdown.values():
        stats.average_units = stats.total_units / stats.count
        stats.average_amount = stats.total_amount / stats.count

    return breakdown


def compute_analytics(bills: Sequence[Bill], threshold: float | str | None = None) -> AnalyticsResult:
    """
    Compute analytics over an already-filtered bill set.

    Args:
        bills: Bills to analyze. Filtering by utility is the caller's job.
        threshold: Explicit alert threshold in units. When missing or not
            numeric, defaults to the average consumption of ``bills`` times
            ``settings.alert_multiplier``. Zero and negative values are used as-is.

    Returns:
        AnalyticsResult. An empty input gives the all-zero result.
    """
    if not bills:
        return AnalyticsResult()

    count = len(bills)
    average_consumption = sum(b.units_consumed for b in bills) / count
    average_amount = sum(b.amount for b in bills) / count

    effective_threshold = _parse_threshold(threshold)
    if effective_threshold is None:
        effective_threshold = average_consumption * settings.alert_multiplier
    logger.debug(f"Analytics over {count} bills, threshold {effective_threshold}")

    alerts = [
        HighConsumptionAlert(
            id=b.id,
            month=b.month,
            year=b.year,
            utility_type=b.utility_type,
            units_consumed=b.units_consumed,
            amount=b.amount,
            threshold=effective_threshold,
            percentage_above_threshold=_percentage_above(b.units_consumed, effective_threshold),
        )
        for b in bills
        if b.units_consumed > effective_threshold
    ]

    return AnalyticsResult(
        average_consumption=_round_half_up(average_consumption, 2),
        average_amount=_round_half_up(average_amount, 2),
        total_bills=count,
        high_consumption_alerts=alerts,
        utility_breakdown=build_utility_breakdown(bills),
        threshold_used=effective_threshold,
    )
