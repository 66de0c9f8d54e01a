from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import CheckoutError, InvalidInput
from pos_checkout.core.domain.model.money import ZERO, parse_amount, quantize


@dataclass
class DiscountResolver:
    """Flat discount typed by the operator, plus an advisory loyalty percentage.

    The flat amount is stored as entered; it is only clamped against the
    subtotal when the discount is read for reconciliation.
    """

    flat_amount: Decimal = ZERO
    suggested_percentage: Decimal = ZERO

    def set_flat_amount(
        self, raw: Decimal | int | float | str
    ) -> Result[Decimal, CheckoutError]:
        if isinstance(raw, str) and raw.strip() == "":
            raw = ZERO
        parsed = parse_amount(raw, field="discount")
        if isinstance(parsed, Success):
            self.flat_amount = parsed.unwrap()
        return parsed

    def offer(self, percentage: Decimal) -> Result[Decimal, CheckoutError]:
        parsed = parse_amount(percentage, field="suggested_percentage")
        if isinstance(parsed, Success):
            self.suggested_percentage = parsed.unwrap()
        return parsed

    def suggested_amount(self, subtotal: Decimal) -> Decimal:
        if self.suggested_percentage <= 0:
            return ZERO
        return quantize(subtotal * self.suggested_percentage / Decimal(100))

    def apply_suggested(
        self, subtotal: Decimal, percentage: Decimal
    ) -> Result[Decimal, CheckoutError]:
        if percentage <= 0:
            return Failure(
                InvalidInput(
                    message="no loyalty discount to apply", field="suggested_percentage"
                )
            )
        self.flat_amount = quantize(subtotal * percentage / Decimal(100))
        return Success(self.flat_amount)

    def effective_discount(self, subtotal: Decimal) -> Decimal:
        return max(ZERO, min(self.flat_amount, subtotal))

    def reset(self) -> None:
        self.flat_amount = ZERO
        self.suggested_percentage = ZERO
