"""Per-utility cost summaries."""

from collections.abc import Iterable

from billtracker.models import Bill, Month, MonthlyTotal, UtilityStats, UtilityType


def _summarize(bills: list[Bill]) -> UtilityStats:
    count = len(bills)
    total_amount = sum(b.amount for b in bills)
    total_units = sum(b.units_consumed for b in bills)
    return UtilityStats(
        total_amount=total_amount,
        total_units=total_units,
        count=count,
        average_amount=total_amount / count if count > 0 else 0.0,
        average_units=total_units / count if count > 0 else 0.0,
    )


def compute_cost_summary(all_bills: Iterable[Bill]) -> dict[str, UtilityStats]:
    """
    Totals and averages for each of electricity, water and gas.

    Always returns all three keys; a utility with no bills has zero totals.
    """
    bills = list(all_bills)
    return {
        utility.value: _summarize([b for b in bills if b.utility_type == utility])
        for utility in UtilityType
    }


def compute_monthly_summary(bills: Iterable[Bill], month: Month, year: int) -> dict[str, UtilityStats]:
    """Per-utility totals for one period. Only utilities with bills that period appear."""
    by_utility: dict[str, list[Bill]] = {}
    for bill in bills:
        if bill.month == month and bill.year == year:
            by_utility.setdefault(bill.utility_type.value, []).append(bill)
    return {utility: _summarize(group) for utility, group in by_utility.items()}


def compute_yearly_summary(bills: Iterable[Bill], year: int) -> list[MonthlyTotal]:
    """Per-month totals for one year, in calendar order. Months with no bills are omitted."""
    by_month: dict[Month, list[Bill]] = {}
    for bill in bills:
        if bill.year == year:
            by_month.setdefault(bill.month, []).append(bill)

    return [
        MonthlyTotal(
            month=month,
            total_units=sum(b.units_consumed for b in group),
            total_amount=sum(b.amount for b in group),
            count=len(group),
        )
        for month, group in sorted(by_month.items(), key=lambda item: item[0].index)
    ]
