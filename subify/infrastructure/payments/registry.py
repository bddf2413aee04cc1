from __future__ import annotations

from typing import Callable, Dict

from ...core.config import Settings
from ...domain.ports.payments import PaymentGateway
from .simulated_gateway import SimulatedPaymentGateway
from .stripe_gateway import StripePaymentGateway


def _build_simulated(settings: Settings) -> PaymentGateway:
    return SimulatedPaymentGateway(
        latency_seconds=settings.simulated_payment_latency_ms / 1000,
        decline_tokens=settings.simulated_decline_tokens,
        unavailable_tokens=settings.simulated_unavailable_tokens,
    )


def _build_stripe(settings: Settings) -> PaymentGateway:
    if not settings.stripe_secret_key:
        raise RuntimeError("Missing required environment variable: STRIPE_SECRET_KEY")
    return StripePaymentGateway(
        settings.stripe_secret_key,
        statement_descriptor=settings.stripe_statement_descriptor,
    )


PROVIDERS: Dict[str, Callable[[Settings], PaymentGateway]] = {
    "simulated": _build_simulated,
    "stripe": _build_stripe,
}


def build_payment_gateway(settings: Settings) -> PaymentGateway:
    """Instantiate the payment provider selected by ``PAYMENT_PROVIDER``."""
    try:
        builder = PROVIDERS[settings.payment_provider]
    except KeyError as exc:
        available = ", ".join(sorted(PROVIDERS))
        raise RuntimeError(
            f"Unknown PAYMENT_PROVIDER '{settings.payment_provider}' (available: {available})"
        ) from exc
    return builder(settings)
