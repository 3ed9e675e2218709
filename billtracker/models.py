"""Data models for the bill tracker."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from billtracker.errors import InvalidUtilityType


class Month(str, Enum):
    """Calendar months, in calendar order."""

    JANUARY = "January"
    FEBRUARY = "February"
    MARCH = "March"
    APRIL = "April"
    MAY = "May"
    JUNE = "June"
    JULY = "July"
    AUGUST = "August"
    SEPTEMBER = "September"
    OCTOBER = "October"
    NOVEMBER = "November"
    DECEMBER = "December"

    @property
    def index(self) -> int:
        """1-based calendar position (January = 1)."""
        return list(Month).index(self) + 1


class UtilityType(str, Enum):
    """Supported utility types."""

    ELECTRICITY = "electricity"
    WATER = "water"
    GAS = "gas"


def parse_utility_type(value: str | UtilityType | None) -> UtilityType | None:
    """Validate an optional utility filter.

    Returns None for a missing/blank filter. Raises InvalidUtilityType for
    anything outside electricity, water and gas.
    """
    if value is None:
        return None
    if isinstance(value, UtilityType):
        return value
    if not value.strip():
        return None
    try:
        return UtilityType(value.strip().lower())
    except ValueError:
        raise InvalidUtilityType(value) from None


def compute_cost_per_unit(amount: float, units_consumed: float) -> float:
    """Cost of one unit; 0 when nothing was consumed."""
    return amount / units_consumed if units_consumed > 0 else 0.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BillCreate(CamelModel):
    """Bill data supplied by the user on create/update."""

    month: Month
    year: int = Field(..., ge=2000, le=2100)
    utility_type: UtilityType
    units_consumed: float = Field(..., ge=0)
    amount: float = Field(..., ge=0)
    bill_number: str = ""

    @field_validator("utility_type", mode="before")
    @classmethod
    def _lowercase_utility(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("month", mode="before")
    @classmethod
    def _titlecase_month(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


class Bill(BillCreate):
    """A recorded utility bill."""

    id: UUID = Field(default_factory=uuid4)
    is_paid: bool = False
    payment_date: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @computed_field(alias="costPerUnit")  # type: ignore[prop-decorator]
    @property
    def cost_per_unit(self) -> float:
        return compute_cost_per_unit(self.amount, self.units_consumed)

    @computed_field(alias="period")  # type: ignore[prop-decorator]
    @property
    def period(self) -> str:
        return f"{self.month.value} {self.year}"


class TrendPoint(CamelModel):
    """Aggregated consumption for one (year, month) period."""

    month: Month
    year: int
    units_consumed: float
    amount: float
    period: str
    utility_types: list[UtilityType]
    count: int


class UtilityStats(CamelModel):
    """Totals and averages for one utility type."""

    total_units: float = 0.0
    total_amount: float = 0.0
    count: int = 0
    average_units: float = 0.0
    average_amount: float = 0.0


class HighConsumptionAlert(CamelModel):
    """A bill whose consumption exceeds the alert threshold."""

    id: UUID
    month: Month
    year: int
    utility_type: UtilityType
    units_consumed: float
    amount: float
    threshold: float
    percentage_above_threshold: float | None  # None when the threshold is exactly 0


class AnalyticsResult(CamelModel):
    """Averages, alerts and per-utility breakdown for a bill set."""

    average_consumption: float = 0.0
    average_amount: float = 0.0
    total_bills: int = 0
    high_consumption_alerts: list[HighConsumptionAlert] = Field(default_factory=list)
    utility_breakdown: dict[str, UtilityStats] = Field(default_factory=dict)
    threshold_used: float | None = None


class MonthlyTotal(CamelModel):
    """Totals for one month of a yearly summary."""

    month: Month
    total_units: float
    total_amount: float
    count: int


class ChatRequest(BaseModel):
    """Advisor chat request."""

    message: str = ""


class ChatResponse(BaseModel):
    """Advisor chat reply."""

    reply: str


class MarkPaidRequest(CamelModel):
    """Optional payment date when marking a bill paid."""

    payment_date: datetime | None = None
