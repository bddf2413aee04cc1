"""Money value object expressed in integer minor currency units."""

from __future__ import annotations

import re
from dataclasses import dataclass

from moneyed import get_currency
from moneyed.classes import CurrencyDoesNotExist

from ..exceptions import CurrencyMismatch

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True, slots=True)
class Money:
    """
    Immutable monetary amount.

    Attributes:
        amount: Non-negative amount in minor units (cents for USD)
        currency: ISO 4217 code, three uppercase letters
    """

    amount: int
    currency: str

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError("Money amount must be an integer number of minor units")
        if self.amount < 0:
            raise ValueError(f"Money amount cannot be negative: {self.amount}")
        if not isinstance(self.currency, str) or not _CURRENCY_PATTERN.match(self.currency):
            raise ValueError(f"Currency must be three uppercase letters: {self.currency!r}")
        try:
            get_currency(self.currency)
        except CurrencyDoesNotExist as exc:
            raise ValueError(f"Unknown currency code: {self.currency}") from exc

    def add(self, other: Money) -> Money:
        self._ensure_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        self._ensure_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def equals(self, other: object) -> bool:
        return self == other

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def _ensure_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatch(self.currency, other.currency)
