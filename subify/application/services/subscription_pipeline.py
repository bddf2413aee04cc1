from __future__ import annotations

import asyncio
import functools
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ...domain.exceptions import PaymentDeclined, PaymentProviderUnavailable, PersistenceFailure
from ...domain.models import Money, Subscription, SubscriptionRequest, SubscriptionStatus
from ...domain.ports.catalog import PlanCatalog
from ...domain.ports.payments import ChargeResult, ChargeStatus, PaymentGateway
from ...domain.ports.persistence import SubscriptionRepository
from .pricing import PricingCalculator

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class SubscriptionPipeline:
    """Creates a subscription as one unit: resolve plan, quote, charge, persist.

    Payment is attempted only once the plan is known to be purchasable and
    the record is written only once payment succeeded. A failure at any
    step stops the pipeline and is raised as a typed ``SubscriptionError``.
    """

    DEFAULT_CHARGE_TIMEOUT = 10.0

    def __init__(
        self,
        catalog: PlanCatalog,
        gateway: PaymentGateway,
        repository: SubscriptionRepository,
        pricing: Optional[PricingCalculator] = None,
        *,
        charge_timeout: float = DEFAULT_CHARGE_TIMEOUT,
        clock: Clock = utc_now,
    ) -> None:
        if charge_timeout <= 0:
            raise ValueError("charge_timeout must be positive")
        self._catalog = catalog
        self._gateway = gateway
        self._repository = repository
        self._pricing = pricing or PricingCalculator()
        self._charge_timeout = charge_timeout
        self._clock = clock

    async def create(self, request: SubscriptionRequest) -> Subscription:
        plan = self._catalog.resolve(request.plan_key)
        quote = self._pricing.quote(plan, self._clock())

        subscription = Subscription(
            id=None,
            user_id=request.user_id,
            plan_key=plan.key,
            status=SubscriptionStatus.PENDING,
            starts_at=quote.starts_at,
            ends_at=quote.ends_at,
            features_snapshot=plan.features,
            price=quote.charge_amount,
        )

        try:
            transaction_id = await self._charge(request, quote.charge_amount)
        except (PaymentDeclined, PaymentProviderUnavailable):
            subscription.mark_failed()
            raise

        # Nothing below awaits: once the charge returned, persist-or-report runs to completion.
        subscription.activate(transaction_id)
        stored = self._persist(subscription)
        logger.info(
            "Subscription %s created for user %s on plan %s (transaction %s)",
            stored.id,
            stored.user_id,
            stored.plan_key,
            transaction_id,
        )
        return stored

    async def _charge(self, request: SubscriptionRequest, amount: Money) -> str:
        task = asyncio.ensure_future(
            asyncio.to_thread(self._gateway.charge, amount, request.payment_method_id)
        )
        try:
            result = await asyncio.wait_for(asyncio.shield(task), timeout=self._charge_timeout)
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Payment provider %s gave no answer within %.1fs for %s",
                self._gateway.name,
                self._charge_timeout,
                amount,
            )
            task.add_done_callback(functools.partial(self._report_late_charge, request, amount))
            raise PaymentProviderUnavailable(
                f"no answer within {self._charge_timeout:g}s", "timeout"
            ) from exc
        except OSError as exc:
            logger.warning("Payment provider %s failed during charge: %s", self._gateway.name, exc)
            raise PaymentProviderUnavailable(str(exc) or type(exc).__name__) from exc

        if result.status is ChargeStatus.SUCCEEDED and result.transaction_id:
            return result.transaction_id
        if result.status is ChargeStatus.DECLINED:
            logger.warning("Charge of %s declined by %s: %s", amount, self._gateway.name, result.reason)
            raise PaymentDeclined(result.reason or "declined", result.error_code)

        logger.warning("Charge of %s not confirmed by %s: %s", amount, self._gateway.name, result.reason)
        raise PaymentProviderUnavailable(result.reason or "charge not confirmed", result.error_code)

    def _report_late_charge(
        self, request: SubscriptionRequest, amount: Money, task: "asyncio.Future[ChargeResult]"
    ) -> None:
        """Surface a charge that completed after the request was already reported as failed."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Timed-out charge for user %s later failed: %s", request.user_id, exc)
            return
        result = task.result()
        if result.status is ChargeStatus.SUCCEEDED:
            logger.critical(
                "User %s was charged %s (transaction %s) after the charge timed out; "
                "no subscription to %s was recorded",
                request.user_id,
                amount,
                result.transaction_id,
                request.plan_key,
            )
        else:
            logger.info(
                "Timed-out charge for user %s later ended as %s", request.user_id, result.status.value
            )

    def _persist(self, subscription: Subscription) -> Subscription:
        transaction_id = subscription.transaction_id or ""
        try:
            return self._repository.add(subscription)
        except Exception as exc:
            logger.critical(
                "User %s was charged %s (transaction %s) but the subscription to %s was not recorded: %s",
                subscription.user_id,
                subscription.price,
                transaction_id,
                subscription.plan_key,
                exc,
            )
            raise PersistenceFailure(transaction_id, str(exc)) from exc
