from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from ..models import Money


class ChargeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    DECLINED = "declined"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class ChargeResult:
    """Outcome of a single charge attempt.

    ``transaction_id`` is set only for ``SUCCEEDED``; ``reason`` and
    ``error_code`` describe the two failure kinds.
    """

    status: ChargeStatus
    transaction_id: Optional[str] = None
    reason: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def succeeded(cls, transaction_id: str) -> ChargeResult:
        return cls(status=ChargeStatus.SUCCEEDED, transaction_id=transaction_id)

    @classmethod
    def declined(cls, reason: str, error_code: Optional[str] = None) -> ChargeResult:
        return cls(status=ChargeStatus.DECLINED, reason=reason, error_code=error_code)

    @classmethod
    def unavailable(cls, reason: str, error_code: Optional[str] = None) -> ChargeResult:
        return cls(status=ChargeStatus.UNAVAILABLE, reason=reason, error_code=error_code)


class PaymentGateway(Protocol):
    """Charge capability implemented once per payment provider."""

    name: str

    def charge(self, amount: Money, payment_token: str) -> ChargeResult:
        """Capture ``amount`` from ``payment_token``. Blocking; one attempt."""
        ...
