"""Pydantic schemas for the plan listing endpoint."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ....domain.models import Plan
from .subscription_schemas import MoneyResponse


class PlanResponse(BaseModel):
    """Response schema for an available plan."""

    model_config = ConfigDict(populate_by_name=True)

    key: str
    name: Optional[str]
    price: MoneyResponse
    billing_period: Optional[str] = Field(None, alias="billingPeriod")
    features: Dict[str, Any]

    @classmethod
    def from_plan(cls, plan: Plan) -> "PlanResponse":
        return cls(
            key=plan.key,
            name=plan.name,
            price=MoneyResponse.from_money(plan.price),
            billing_period=str(plan.billing_period) if plan.billing_period else None,
            features=plan.features,
        )
