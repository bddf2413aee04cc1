"""Test doubles for the payment and persistence ports."""

from __future__ import annotations

import time
from typing import Any, List, Optional, Tuple

from subify.domain.exceptions import RepositoryError
from subify.domain.models import Money, Subscription
from subify.domain.ports.payments import ChargeResult


class RecordingGateway:
    """Returns a fixed result and records every charge call."""

    name = "recording"

    def __init__(self, result: Optional[ChargeResult] = None, delay: float = 0.0) -> None:
        self.result = result or ChargeResult.succeeded("txn_123")
        self.delay = delay
        self.calls: List[Tuple[Money, str]] = []

    @property
    def charge_count(self) -> int:
        return len(self.calls)

    def charge(self, amount: Money, payment_token: str) -> ChargeResult:
        self.calls.append((amount, payment_token))
        if self.delay:
            time.sleep(self.delay)
        return self.result


class ExplodingGateway:
    name = "exploding"

    def __init__(self) -> None:
        self.charge_count = 0

    def charge(self, amount: Money, payment_token: str) -> ChargeResult:
        self.charge_count += 1
        raise ConnectionResetError("connection reset by peer")


class FailingRepository:
    """Repository whose writes always fail."""

    def __init__(self) -> None:
        self.attempts = 0

    def add(self, subscription: Subscription) -> Subscription:
        self.attempts += 1
        raise RepositoryError("database is locked")

    def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        return None

    def list_by_user_id(self, user_id: int) -> List[Subscription]:
        return []

    def find_by_feature(self, feature_key: str, value: Any) -> List[Subscription]:
        return []

    def count(self) -> int:
        return 0


class BrokenGateway:
    """Gateway with a programming error rather than a network failure."""

    name = "broken"

    def __init__(self) -> None:
        self.charge_count = 0

    def charge(self, amount: Money, payment_token: str) -> ChargeResult:
        self.charge_count += 1
        raise TypeError("charge() got an unexpected keyword argument 'currency'")
