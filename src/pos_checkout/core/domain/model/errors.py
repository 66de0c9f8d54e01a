from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CheckoutError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


# ---- local, recoverable ----------------------------------------------------


@dataclass(frozen=True)
class InvalidInput(CheckoutError):
    field: str

    def __str__(self) -> str:
        return f"invalid_input: {self.field} ({self.message})"


@dataclass(frozen=True)
class StockExceeded(CheckoutError):
    product_id: str
    ceiling: int

    def __str__(self) -> str:
        return f"stock_exceeded: product={self.product_id} max={self.ceiling} ({self.message})"


@dataclass(frozen=True)
class LineNotFound(CheckoutError):
    product_id: str

    def __str__(self) -> str:
        return f"line_not_found: {self.product_id} ({self.message})"


@dataclass(frozen=True)
class UnknownProduct(CheckoutError):
    product_id: str

    def __str__(self) -> str:
        return f"unknown_product: {self.product_id} ({self.message})"


# ---- submission gate -------------------------------------------------------


@dataclass(frozen=True)
class EmptyCart(CheckoutError):
    pass


@dataclass(frozen=True)
class UnresolvedPrice(CheckoutError):
    product_id: str

    def __str__(self) -> str:
        return f"unresolved_price: {self.product_id} ({self.message})"


@dataclass(frozen=True)
class PaymentIncomplete(CheckoutError):
    remaining: Decimal

    def __str__(self) -> str:
        return f"payment_incomplete: remaining={self.remaining} ({self.message})"


@dataclass(frozen=True)
class SubmissionInProgress(CheckoutError):
    pass


# ---- remote ----------------------------------------------------------------


@dataclass(frozen=True)
class PersistenceFailure(CheckoutError):
    pass


@dataclass(frozen=True)
class InsufficientStock(PersistenceFailure):
    product_name: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class PublishError(CheckoutError):
    pass
