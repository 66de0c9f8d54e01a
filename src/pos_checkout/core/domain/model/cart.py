from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, Tuple

from returns.maybe import Maybe, Nothing, Some
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.catalog import CatalogItem
from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    LineNotFound,
    StockExceeded,
)
from pos_checkout.core.domain.model.money import ZERO, parse_amount


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    quantity: int
    # Nothing while the operator has cleared the price field
    unit_price: Maybe[Decimal]
    original_price: Decimal
    stock_ceiling: int

    @property
    def price_resolved(self) -> bool:
        return self.unit_price != Nothing

    def resolved_price(self) -> Decimal:
        return self.unit_price.value_or(ZERO)

    def line_total(self) -> Decimal:
        return self.resolved_price() * self.quantity


@dataclass
class Cart:
    _lines: Dict[str, CartLine] = field(default_factory=dict)

    # ---- queries -----------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines.values())

    def line(self, product_id: str) -> Maybe[CartLine]:
        return Maybe.from_optional(self._lines.get(product_id))

    def subtotal(self) -> Decimal:
        return sum((ln.line_total() for ln in self._lines.values()), ZERO)

    def unresolved_lines(self) -> Tuple[CartLine, ...]:
        return tuple(ln for ln in self._lines.values() if not ln.price_resolved)

    # ---- mutations ---------------------------------------------------------

    def add_product(self, item: CatalogItem) -> Result[CartLine, CheckoutError]:
        existing = self._lines.get(item.id)
        if existing is None:
            if item.available_stock < 1:
                return Failure(
                    StockExceeded(
                        message="Not enough stock available",
                        product_id=item.id,
                        ceiling=item.available_stock,
                    )
                )
            line = CartLine(
                product_id=item.id,
                name=item.name,
                quantity=1,
                unit_price=Some(item.unit_price),
                original_price=item.unit_price,
                stock_ceiling=item.available_stock,
            )
            self._lines[item.id] = line
            return Success(line)

        if existing.quantity >= existing.stock_ceiling:
            return Failure(
                StockExceeded(
                    message="Not enough stock available",
                    product_id=item.id,
                    ceiling=existing.stock_ceiling,
                )
            )
        return Success(self._put(replace(existing, quantity=existing.quantity + 1)))

    def change_quantity(
        self, product_id: str, delta: int
    ) -> Result[CartLine, CheckoutError]:
        existing = self._lines.get(product_id)
        if existing is None:
            return Failure(LineNotFound(message="not in cart", product_id=product_id))

        new_quantity = existing.quantity + delta
        if new_quantity <= 0:
            return Success(existing)
        if new_quantity > existing.stock_ceiling:
            return Failure(
                StockExceeded(
                    message="Not enough stock available",
                    product_id=product_id,
                    ceiling=existing.stock_ceiling,
                )
            )
        return Success(self._put(replace(existing, quantity=new_quantity)))

    def set_price(
        self, product_id: str, raw: Decimal | int | float | str
    ) -> Result[CartLine, CheckoutError]:
        existing = self._lines.get(product_id)
        if existing is None:
            return Failure(LineNotFound(message="not in cart", product_id=product_id))

        if isinstance(raw, str) and raw.strip() == "":
            return Success(self._put(replace(existing, unit_price=Nothing)))

        return parse_amount(raw, field=f"price[{product_id}]").map(
            lambda price: self._put(replace(existing, unit_price=Some(price)))
        )

    def finalize_price(self, product_id: str) -> Result[CartLine, CheckoutError]:
        existing = self._lines.get(product_id)
        if existing is None:
            return Failure(LineNotFound(message="not in cart", product_id=product_id))
        if existing.price_resolved:
            return Success(existing)
        return Success(self._put(replace(existing, unit_price=Some(ZERO))))

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def _put(self, line: CartLine) -> CartLine:
        self._lines[line.product_id] = line
        return line
