from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Protocol, Sequence

from returns.maybe import Maybe
from returns.result import Result

from pos_checkout.core.domain.model.cart import CartLine
from pos_checkout.core.domain.model.catalog import CatalogItem
from pos_checkout.core.domain.model.customer import CustomerReference, LoyaltyTier
from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.sale import CheckoutPayload, SaleReceipt
from pos_checkout.core.domain.model.tender import TenderMethod, TenderMode
from pos_checkout.core.ports.outbound.catalog import CatalogPage, CatalogQuery


@dataclass(frozen=True)
class CartLineView:
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal | None  # None while the price field is cleared
    line_total: Decimal
    stock_ceiling: int


@dataclass(frozen=True)
class CheckoutView:
    lines: Sequence[CartLineView]
    subtotal: Decimal
    discount: Decimal
    total_due: Decimal
    total_tendered: Decimal
    remaining: Decimal
    is_complete: bool
    is_overpaid: bool
    can_submit: bool
    blocked_by: str | None
    mode: TenderMode
    primary_method: TenderMethod
    split_amounts: Mapping[TenderMethod, Decimal]
    suggested_discount: Decimal
    tier: LoyaltyTier | None
    customer: CustomerReference | None
    submitting: bool


class CheckoutUseCase(Protocol):
    def open_catalog(self, query: CatalogQuery) -> Result[CatalogPage, CheckoutError]: ...

    def list_categories(self, branch_id: str) -> Result[Sequence[str], CheckoutError]: ...

    def add_product(self, product_id: str) -> Result[CartLine, CheckoutError]: ...

    def add_item(self, item: CatalogItem) -> Result[CartLine, CheckoutError]: ...

    def change_quantity(
        self, product_id: str, delta: int
    ) -> Result[CartLine, CheckoutError]: ...

    def set_price(self, product_id: str, raw: str) -> Result[CartLine, CheckoutError]: ...

    def finalize_price(self, product_id: str) -> Result[CartLine, CheckoutError]: ...

    def remove(self, product_id: str) -> None: ...

    def clear_cart(self) -> None: ...

    def set_discount(self, raw: str) -> Result[Decimal, CheckoutError]: ...

    def apply_suggested_discount(self) -> Result[Decimal, CheckoutError]: ...

    def select_single(self, method: TenderMethod) -> None: ...

    def select_split(self) -> None: ...

    def set_split_amount(
        self, method: TenderMethod, raw: str
    ) -> Result[Decimal, CheckoutError]: ...

    def pay_remainder(self, method: TenderMethod) -> Decimal: ...

    def clear_payments(self) -> None: ...

    def attach_customer(
        self, ref: CustomerReference
    ) -> Result[Maybe[LoyaltyTier], CheckoutError]: ...

    def detach_customer(self) -> None: ...

    def check(self) -> Result[None, CheckoutError]: ...

    def can_submit(self) -> bool: ...

    def build_payload(self) -> Result[CheckoutPayload, CheckoutError]: ...

    def submit(self) -> Result[SaleReceipt, CheckoutError]: ...

    def view(self) -> CheckoutView: ...
