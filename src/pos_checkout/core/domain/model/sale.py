from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple
from uuid import UUID, uuid4

from pos_checkout.core.domain.model.customer import (
    CustomerId,
    CustomerReference,
    TierChange,
)
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.tender import TenderBreakdown


@dataclass(frozen=True)
class SaleId:
    value: UUID

    @staticmethod
    def new() -> "SaleId":
        return SaleId(uuid4())


@dataclass(frozen=True)
class PayloadLine:
    product_id: str
    name: str
    quantity: int
    unit_price: Money
    line_total: Money
    # catalog price before any operator override
    original_price: Money


@dataclass(frozen=True)
class CheckoutPayload:
    payload_id: SaleId
    branch_id: str
    operator_id: str | None
    lines: Tuple[PayloadLine, ...]
    subtotal: Money
    discount: Money
    final_total: Money
    tender: TenderBreakdown
    customer: CustomerReference | None
    created_at: datetime


@dataclass(frozen=True)
class SaleReceipt:
    sale_id: SaleId
    final_total: Money
    customer_id: CustomerId | None = None
    tier_change: TierChange | None = None
