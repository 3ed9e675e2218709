"""Period trend aggregation over bills."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from billtracker.models import Bill, Month, TrendPoint, UtilityType, parse_utility_type


@dataclass
class _PeriodTotals:
    """Running totals for one (year, month) period."""

    month: Month
    year: int
    total_units: float = 0.0
    total_amount: float = 0.0
    count: int = 0
    utility_types: list[UtilityType] = field(default_factory=list)

    def add(self, bill: Bill) -> None:
        self.total_units += bill.units_consumed
        self.total_amount += bill.amount
        self.count += 1
        if bill.utility_type not in self.utility_types:
            self.utility_types.append(bill.utility_type)


def compute_trends(bills: Iterable[Bill], utility_filter: str | UtilityType | None = None) -> list[TrendPoint]:
    """
    Group bills into calendar periods.

    Args:
        bills: Bills to aggregate.
        utility_filter: Optional utility type; bills of other types are dropped.

    Returns:
        One TrendPoint per (year, month), oldest first.

    Raises:
        InvalidUtilityType: If utility_filter is not a known utility.
    """
    utility = parse_utility_type(utility_filter)

    periods: dict[tuple[int, Month], _PeriodTotals] = {}
    for bill in bills:
        if utility and bill.utility_type != utility:
            continue
        key = (bill.year, bill.month)
        if key not in periods:
            periods[key] = _PeriodTotals(month=bill.month, year=bill.year)
        periods[key].add(bill)

    ordered = sorted(periods.values(), key=lambda p: (p.year, p.month.index))

    return [
        TrendPoint(
            month=p.month,
            year=p.year,
            units_consumed=p.total_units,
            amount=p.total_amount,
            period=f"{p.month.value} {p.year}",
            utility_types=p.utility_types,
            count=p.count,
        )
        for p in ordered
    ]
