"""Plan catalog domain model."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .money import Money

INTERVALS = ("day", "week", "month", "year")


@dataclass(frozen=True, slots=True)
class BillingPeriod:
    """Length of one billing cycle, e.g. 1 month or 1 year."""

    interval: str
    count: int = 1

    def __post_init__(self) -> None:
        if self.interval not in INTERVALS:
            raise ValueError(f"Unsupported billing interval: {self.interval!r}")
        if self.count < 1:
            raise ValueError("Billing period count must be at least 1")

    def advance(self, moment: datetime) -> datetime:
        """Return ``moment`` moved forward by one period.

        Month and year steps keep the day of month when possible and clamp
        to the last day of the target month otherwise.
        """
        if self.interval == "day":
            return moment + timedelta(days=self.count)
        if self.interval == "week":
            return moment + timedelta(weeks=self.count)
        months = self.count if self.interval == "month" else self.count * 12
        return _add_months(moment, months)

    @classmethod
    def parse(cls, value: str) -> BillingPeriod:
        """Parse ``"month"``, ``"3 month"`` or ``"1 year"`` style values."""
        parts = value.strip().lower().split()
        if len(parts) == 1:
            return cls(interval=parts[0].rstrip("s"))
        if len(parts) == 2:
            try:
                count = int(parts[0])
            except ValueError as exc:
                raise ValueError(f"Invalid billing period: {value!r}") from exc
            return cls(interval=parts[1].rstrip("s"), count=count)
        raise ValueError(f"Invalid billing period: {value!r}")

    def __str__(self) -> str:
        return f"{self.count} {self.interval}"


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True, slots=True)
class Plan:
    """
    A priced subscription offering.

    Attributes:
        key: Unique plan identifier (e.g. ``basic_monthly``)
        price: Price of one billing cycle
        billing_period: Cycle length, ``None`` for non-expiring plans
        features: Feature name to value mapping, arbitrary nesting allowed
        is_active: False when the plan is discontinued
        name: Display name
    """

    key: str
    price: Money
    billing_period: Optional[BillingPeriod]
    features: Dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    name: Optional[str] = None
