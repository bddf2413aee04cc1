"""Domain models for the Subify application."""

from .money import Money
from .plan import BillingPeriod, Plan
from .subscription import Subscription, SubscriptionRequest, SubscriptionStatus

__all__ = [
    "BillingPeriod",
    "Money",
    "Plan",
    "Subscription",
    "SubscriptionRequest",
    "SubscriptionStatus",
]
