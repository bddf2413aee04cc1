"""
Subscription domain exceptions.

Each error carries a machine-readable code, the HTTP status the boundary
should answer with, and context describing the failing step.
"""

from typing import Any, Dict, Optional


class SubscriptionError(Exception):
    """
    Base error for subscription creation failures.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for API responses
        status_code: HTTP status code for this error type
        context: Additional context data about the error
    """

    error_code = "SUBSCRIPTION_ERROR"
    status_code = 400

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class PlanNotFound(SubscriptionError):
    error_code = "PLAN_NOT_FOUND"
    status_code = 404

    def __init__(self, plan_key: str) -> None:
        super().__init__(f"Plan '{plan_key}' does not exist", {"plan_key": plan_key})
        self.plan_key = plan_key


class PlanUnavailable(SubscriptionError):
    error_code = "PLAN_UNAVAILABLE"
    status_code = 409

    def __init__(self, plan_key: str) -> None:
        super().__init__(
            f"Plan '{plan_key}' is not available for new subscriptions",
            {"plan_key": plan_key},
        )
        self.plan_key = plan_key


class PaymentDeclined(SubscriptionError):
    """The provider rejected the charge (card declined, insufficient funds)."""

    error_code = "PAYMENT_DECLINED"
    status_code = 402

    def __init__(self, reason: str, provider_code: Optional[str] = None) -> None:
        context: Dict[str, Any] = {}
        if provider_code:
            context["provider_code"] = provider_code
        super().__init__(f"Payment declined: {reason}", context)
        self.reason = reason
        self.provider_code = provider_code


class PaymentProviderUnavailable(SubscriptionError):
    """The provider could not be reached or did not answer in time. Retryable."""

    error_code = "PAYMENT_PROVIDER_UNAVAILABLE"
    status_code = 503

    def __init__(self, reason: str, provider_code: Optional[str] = None) -> None:
        context: Dict[str, Any] = {"retryable": True}
        if provider_code:
            context["provider_code"] = provider_code
        super().__init__(f"Payment provider unavailable: {reason}", context)
        self.reason = reason
        self.provider_code = provider_code


class PersistenceFailure(SubscriptionError):
    """
    The charge succeeded but the subscription could not be stored.

    The customer has been billed without a matching record, so the
    transaction id is kept for manual reconciliation.
    """

    error_code = "PERSISTENCE_FAILURE"
    status_code = 500

    def __init__(self, transaction_id: str, reason: str) -> None:
        super().__init__(
            "Subscription could not be recorded after a successful charge",
            {"transaction_id": transaction_id, "reason": reason},
        )
        self.transaction_id = transaction_id
        self.reason = reason


class CurrencyMismatch(SubscriptionError):
    error_code = "CURRENCY_MISMATCH"
    status_code = 500

    def __init__(self, left: str, right: str) -> None:
        super().__init__(
            f"Cannot combine amounts in {left} and {right}",
            {"currencies": [left, right]},
        )
        self.left = left
        self.right = right


class RepositoryError(RuntimeError):
    """Raised by repository adapters when the storage engine fails."""
