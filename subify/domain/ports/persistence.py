from __future__ import annotations

from typing import Any, List, Optional, Protocol

from ..models import Subscription


class SubscriptionRepository(Protocol):
    """Durable storage for subscriptions. The only writer of durable state."""

    def add(self, subscription: Subscription) -> Subscription:
        """Insert ``subscription`` in a single transaction and return it with its id."""
        ...

    def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        ...

    def list_by_user_id(self, user_id: int) -> List[Subscription]:
        ...

    def find_by_feature(self, feature_key: str, value: Any) -> List[Subscription]:
        """Subscriptions whose snapshot contains ``feature_key`` with ``value``.

        ``feature_key`` may be a dotted path into nested features. When the
        stored value is a list, a match on any element counts.
        """
        ...

    def count(self) -> int:
        ...


class PersistenceGateway(SubscriptionRepository, Protocol):
    """Composite gateway combining every persistence concern used by the app."""

    def close(self) -> None:
        ...
