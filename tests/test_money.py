import pytest

from subify.domain.exceptions import CurrencyMismatch
from subify.domain.models import Money


class TestMoney:
    def test_add_same_currency(self):
        assert Money(1000, "USD") + Money(250, "USD") == Money(1250, "USD")

    def test_subtract_same_currency(self):
        assert Money(1000, "USD").subtract(Money(400, "USD")) == Money(600, "USD")

    def test_equality_is_by_value(self):
        assert Money(1000, "USD").equals(Money(1000, "USD"))
        assert not Money(1000, "USD").equals(Money(1000, "EUR"))
        assert not Money(1000, "USD").equals(Money(999, "USD"))

    def test_values_are_immutable(self):
        money = Money(1000, "USD")
        with pytest.raises(AttributeError):
            money.amount = 5  # type: ignore[misc]

    @pytest.mark.parametrize("operation", ["add", "subtract"])
    def test_mismatched_currencies_fail(self, operation):
        with pytest.raises(CurrencyMismatch):
            getattr(Money(1000, "USD"), operation)(Money(100, "EUR"))

    def test_operator_mismatch_fails(self):
        with pytest.raises(CurrencyMismatch):
            Money(1, "USD") + Money(1, "GBP")

    def test_addition_is_associative(self):
        a, b, c = Money(1, "USD"), Money(20, "USD"), Money(300, "USD")
        assert (a + b) + c == a + (b + c)

    def test_subtraction_below_zero_fails(self):
        with pytest.raises(ValueError):
            Money(100, "USD") - Money(101, "USD")

    @pytest.mark.parametrize(
        "amount, currency",
        [(-1, "USD"), (10, "usd"), (10, "US"), (10, "USDX"), (10, "QQQ"), (1.5, "USD"), (True, "USD")],
    )
    def test_invalid_values_rejected(self, amount, currency):
        with pytest.raises(ValueError):
            Money(amount, currency)

    def test_str(self):
        assert str(Money(1000, "USD")) == "1000 USD"
