"""Pydantic schemas for subscription API endpoints."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ....domain.models import Money, Subscription, SubscriptionRequest


class CreateSubscriptionRequest(BaseModel):
    """Request schema for purchasing a plan."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    user_id: int = Field(..., alias="userId", gt=0)
    plan_key: str = Field(..., alias="planKey", min_length=1, max_length=100)
    payment_method_id: str = Field(..., alias="paymentMethodId", min_length=1, max_length=255)
    options: Dict[str, Any] = Field(default_factory=dict, description="Passed through untouched")

    @field_validator("user_id", mode="before")
    @classmethod
    def _reject_non_integer(cls, value: Any) -> Any:
        # Lax int coercion would turn true into 1 and 5.0 into 5.
        if isinstance(value, (bool, float)):
            raise ValueError("userId must be an integer")
        return value

    def to_domain(self) -> SubscriptionRequest:
        return SubscriptionRequest(
            user_id=self.user_id,
            plan_key=self.plan_key,
            payment_method_id=self.payment_method_id,
            options=dict(self.options),
        )


class CreateSubscriptionResponse(BaseModel):
    """Response schema for a newly created subscription."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    status: str
    starts_at: datetime = Field(..., alias="startsAt")
    ends_at: Optional[datetime] = Field(None, alias="endsAt")

    @classmethod
    def from_subscription(cls, subscription: Subscription) -> "CreateSubscriptionResponse":
        return cls(
            id=subscription.id,
            status=subscription.status.value,
            starts_at=subscription.starts_at,
            ends_at=subscription.ends_at,
        )


class MoneyResponse(BaseModel):
    amount: int = Field(..., description="Amount in minor units")
    currency: str

    @classmethod
    def from_money(cls, money: Money) -> "MoneyResponse":
        return cls(amount=money.amount, currency=money.currency)


class SubscriptionResponse(BaseModel):
    """Response schema for a stored subscription."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: int = Field(..., alias="userId")
    plan_key: str = Field(..., alias="planKey")
    status: str
    starts_at: datetime = Field(..., alias="startsAt")
    ends_at: Optional[datetime] = Field(None, alias="endsAt")
    features_snapshot: Dict[str, Any] = Field(..., alias="featuresSnapshot")
    price: MoneyResponse
    transaction_id: Optional[str] = Field(None, alias="transactionId")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @classmethod
    def from_subscription(cls, subscription: Subscription) -> "SubscriptionResponse":
        return cls(
            id=subscription.id,
            user_id=subscription.user_id,
            plan_key=subscription.plan_key,
            status=subscription.status.value,
            starts_at=subscription.starts_at,
            ends_at=subscription.ends_at,
            features_snapshot=subscription.features_snapshot,
            price=MoneyResponse.from_money(subscription.price),
            transaction_id=subscription.transaction_id,
            created_at=subscription.created_at,
            updated_at=subscription.updated_at,
        )
