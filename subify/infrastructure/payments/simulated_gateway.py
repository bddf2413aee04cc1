"""Payment provider that settles charges locally, for development and demos."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Iterable, Optional

from ...domain.models import Money
from ...domain.ports.payments import ChargeResult, PaymentGateway

logger = logging.getLogger(__name__)


class SimulatedPaymentGateway(PaymentGateway):
    """Approves every token except the configured decline/outage tokens."""

    name = "simulated"

    def __init__(
        self,
        *,
        latency_seconds: float = 0.0,
        decline_tokens: Optional[Iterable[str]] = None,
        unavailable_tokens: Optional[Iterable[str]] = None,
    ) -> None:
        self._latency = max(latency_seconds, 0.0)
        self._decline_tokens = frozenset(decline_tokens or ())
        self._unavailable_tokens = frozenset(unavailable_tokens or ())

    def charge(self, amount: Money, payment_token: str) -> ChargeResult:
        if self._latency:
            time.sleep(self._latency)
        if payment_token in self._decline_tokens:
            logger.info("Simulated decline for token %s", payment_token)
            return ChargeResult.declined("card declined", "card_declined")
        if payment_token in self._unavailable_tokens:
            logger.info("Simulated outage for token %s", payment_token)
            return ChargeResult.unavailable("simulated provider outage", "provider_down")
        transaction_id = f"sim_{uuid.uuid4().hex}"
        logger.debug("Simulated charge of %s captured as %s", amount, transaction_id)
        return ChargeResult.succeeded(transaction_id)
