"""Stripe implementation of the payment gateway."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import stripe

from ...domain.models import Money
from ...domain.ports.payments import ChargeResult, PaymentGateway

logger = logging.getLogger(__name__)


class StripePaymentGateway(PaymentGateway):
    """Charges a payment method by confirming a Stripe PaymentIntent in one call.

    Only an intent that ends in ``succeeded`` counts as a capture. Intents
    that need customer action or are still processing are reported as
    unavailable because delayed confirmation is not supported.
    """

    name = "stripe"

    def __init__(self, secret_key: str, *, statement_descriptor: Optional[str] = None) -> None:
        if not secret_key:
            raise ValueError("Stripe secret key is required for the stripe payment provider.")
        self._secret_key = secret_key.strip()
        self._statement_descriptor = statement_descriptor

    def charge(self, amount: Money, payment_token: str) -> ChargeResult:
        params: Dict[str, Any] = {
            "amount": amount.amount,
            "currency": amount.currency.lower(),
            "payment_method": payment_token,
            "confirm": True,
            "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
        }
        if self._statement_descriptor:
            params["statement_descriptor_suffix"] = self._statement_descriptor

        try:
            intent = stripe.PaymentIntent.create(api_key=self._secret_key, **params)
        except stripe.CardError as exc:
            logger.warning("Stripe declined card: code=%s decline=%s", exc.code, getattr(exc, "decline_code", None))
            return ChargeResult.declined(exc.user_message or str(exc), exc.code)
        except stripe.InvalidRequestError as exc:
            logger.warning("Stripe rejected payment request: code=%s param=%s", exc.code, exc.param)
            return ChargeResult.declined(exc.user_message or str(exc), exc.code or "invalid_request")
        except (stripe.AuthenticationError, stripe.PermissionError) as exc:
            logger.error("Stripe credentials rejected: %s", exc)
            return ChargeResult.unavailable("payment provider misconfigured", "authentication_error")
        except stripe.RateLimitError as exc:
            logger.warning("Stripe rate limit hit: %s", exc)
            return ChargeResult.unavailable("payment provider rate limited", "rate_limited")
        except stripe.APIConnectionError as exc:
            logger.warning("Could not reach Stripe: %s", exc)
            return ChargeResult.unavailable("payment provider unreachable", "connection_error")
        except stripe.StripeError as exc:
            logger.warning("Stripe API error: %s", exc)
            return ChargeResult.unavailable(str(exc) or "payment provider error", exc.code or "api_error")

        status = intent["status"]
        if status == "succeeded":
            return ChargeResult.succeeded(intent["id"])
        if status == "requires_payment_method":
            return ChargeResult.declined("payment method was not accepted", status)
        logger.warning("Stripe PaymentIntent %s left in status %s", intent["id"], status)
        return ChargeResult.unavailable(f"charge not confirmed (status {status})", status)
