from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...domain.models import Money, Plan


@dataclass(frozen=True, slots=True)
class Quote:
    charge_amount: Money
    starts_at: datetime
    ends_at: Optional[datetime]


class PricingCalculator:
    """Derives the first-cycle charge and period boundaries for a plan."""

    def quote(self, plan: Plan, now: datetime) -> Quote:
        ends_at = plan.billing_period.advance(now) if plan.billing_period else None
        return Quote(charge_amount=plan.price, starts_at=now, ends_at=ends_at)
