"""Subscription domain model linking users to purchased plans."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .money import Money


class SubscriptionStatus(str, Enum):
    """Lifecycle states of a subscription during creation.

    ``PENDING`` and ``FAILED`` only exist in memory; the repository stores
    ``ACTIVE`` subscriptions exclusively.
    """

    PENDING = "pending"
    ACTIVE = "active"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SubscriptionRequest:
    """Validated input for the creation pipeline."""

    user_id: int
    plan_key: str
    payment_method_id: str
    options: Dict[str, Any] = field(default_factory=dict)


class Subscription:
    """
    Subscription entity representing a paid plan purchase.

    Attributes:
        id: Unique identifier, ``None`` until persisted
        user_id: Reference to the purchasing user
        plan_key: Key of the purchased plan
        status: Subscription status (pending, active, failed)
        starts_at: Start of the first billing period
        ends_at: End of the first billing period, ``None`` when non-expiring
        features_snapshot: Copy of the plan features at purchase time
        price: Amount charged for the first period
        transaction_id: Provider reference of the captured charge
        created_at: Subscription creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: Optional[int],
        user_id: int,
        plan_key: str,
        status: SubscriptionStatus,
        starts_at: datetime,
        ends_at: Optional[datetime],
        features_snapshot: Dict[str, Any],
        price: Money,
        transaction_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.user_id = user_id
        self.plan_key = plan_key
        self.status = status
        self.starts_at = starts_at
        self.ends_at = ends_at
        self._features_snapshot = copy.deepcopy(features_snapshot)
        self.price = price
        self.transaction_id = transaction_id
        now = datetime.now(tz=timezone.utc)
        self.created_at = created_at or now
        self.updated_at = updated_at or now

    @property
    def features_snapshot(self) -> Dict[str, Any]:
        """Return a copy so callers cannot alter the captured plan features."""
        return copy.deepcopy(self._features_snapshot)

    def activate(self, transaction_id: str) -> None:
        if self.status is not SubscriptionStatus.PENDING:
            raise ValueError(f"Cannot activate a subscription in state {self.status.value}")
        self.status = SubscriptionStatus.ACTIVE
        self.transaction_id = transaction_id

    def mark_failed(self) -> None:
        if self.status is not SubscriptionStatus.PENDING:
            raise ValueError(f"Cannot fail a subscription in state {self.status.value}")
        self.status = SubscriptionStatus.FAILED

    def __repr__(self) -> str:
        return f"<Subscription id={self.id} user_id={self.user_id} plan={self.plan_key} status={self.status.value}>"
