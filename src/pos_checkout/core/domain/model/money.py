from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import CheckoutError, InvalidInput

CENT = Decimal("0.01")
ZERO = Decimal("0")

# tolerance used by every tender comparison
EPSILON = CENT

DEFAULT_CURRENCY = "ETB"

# amounts must stay below 10 ** MAX_INTEGER_DIGITS
MAX_INTEGER_DIGITS = 12


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def of(amount: Decimal | int | str, currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money(quantize(Decimal(str(amount))), currency)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(
    raw: Decimal | int | float | str, field: str
) -> Result[Decimal, CheckoutError]:
    """Parse operator input into a non-negative Decimal.

    Accepts Decimal, numbers, or text as typed into a form field.
    """
    try:
        value = Decimal(raw.strip()) if isinstance(raw, str) else Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return Failure(InvalidInput(message="not a number", field=field))
    if not value.is_finite():
        return Failure(InvalidInput(message="not a number", field=field))
    if value < 0:
        return Failure(InvalidInput(message="must be >= 0", field=field))
    if value and value.adjusted() >= MAX_INTEGER_DIGITS:
        return Failure(InvalidInput(message="too large", field=field))
    return Success(value)
