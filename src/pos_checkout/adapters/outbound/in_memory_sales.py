from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List
from uuid import uuid4

from returns.result import Failure, Result, Success

from pos_checkout.adapters.outbound.in_memory_catalog import InMemoryCatalog
from pos_checkout.adapters.outbound.in_memory_loyalty import InMemoryLoyalty
from pos_checkout.core.domain.model.catalog import now_utc
from pos_checkout.core.domain.model.customer import (
    CustomerId,
    CustomerReference,
    ExistingCustomer,
    LoyaltyTier,
    TierChange,
)
from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    InsufficientStock,
    PersistenceFailure,
)
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import CheckoutPayload, SaleReceipt
from pos_checkout.core.ports.outbound.sales import SaleRecorder


@dataclass(frozen=True)
class AuditEntry:
    action: str
    branch_id: str
    operator_id: str | None
    details: str
    at: datetime


@dataclass
class InMemorySalesLedger(SaleRecorder):
    catalog: InMemoryCatalog
    loyalty: InMemoryLoyalty | None = None
    fail: bool = False
    customers_by_phone: Dict[str, CustomerId] = field(default_factory=dict)
    purchases_by_customer: Dict[str, Money] = field(default_factory=dict)
    # tier the customer moves to on their next recorded sale
    pending_tiers: Dict[str, LoyaltyTier] = field(default_factory=dict)
    sales: List[CheckoutPayload] = field(default_factory=list)
    audit_log: List[AuditEntry] = field(default_factory=list)

    def record(self, payload: CheckoutPayload) -> Result[SaleReceipt, CheckoutError]:
        if self.fail:
            return Failure(PersistenceFailure(message="Failed to complete sale"))

        stock = {
            it.id: it.available_stock
            for it in self.catalog.items_by_branch.get(payload.branch_id, [])
        }

        # validate every line first (no partial decrement)
        for ln in payload.lines:
            if stock.get(ln.product_id, 0) < ln.quantity:
                return Failure(
                    InsufficientStock(
                        message=f"Insufficient stock for {ln.name}",
                        product_name=ln.name,
                    )
                )

        for ln in payload.lines:
            self.catalog.restock(
                payload.branch_id, ln.product_id, stock[ln.product_id] - ln.quantity
            )

        customer_id = self._resolve_customer(payload.customer)
        self.sales.append(payload)
        self.audit_log.append(
            AuditEntry(
                action="sale",
                branch_id=payload.branch_id,
                operator_id=payload.operator_id,
                details=(
                    f"Sold {sum(ln.quantity for ln in payload.lines)} items for "
                    f"{payload.final_total.amount} {payload.final_total.currency} "
                    f"via {payload.tender.primary_method.value}"
                ),
                at=now_utc(),
            )
        )

        tier_change = None
        if customer_id is not None:
            key = customer_id.value
            previous = self.purchases_by_customer.get(key)
            self.purchases_by_customer[key] = (
                payload.final_total
                if previous is None
                else previous + payload.final_total
            )
            tier_change = self._promote(customer_id)

        return Success(
            SaleReceipt(
                sale_id=payload.payload_id,
                final_total=payload.final_total,
                customer_id=customer_id,
                tier_change=tier_change,
            )
        )

    def _resolve_customer(self, ref: CustomerReference | None) -> CustomerId | None:
        if ref is None:
            return None
        if isinstance(ref, ExistingCustomer):
            return ref.customer_id
        # phone is unique: reuse the existing record on a duplicate
        existing = self.customers_by_phone.get(ref.phone)
        if existing is not None:
            return existing
        created = CustomerId(str(uuid4()))
        self.customers_by_phone[ref.phone] = created
        return created

    def _promote(self, customer_id: CustomerId) -> TierChange | None:
        new_tier = self.pending_tiers.pop(customer_id.value, None)
        if new_tier is None or self.loyalty is None:
            return None
        old_tier = self.loyalty.assign(customer_id, new_tier)
        if old_tier is not None and old_tier.label == new_tier.label:
            return None
        return TierChange(
            customer_id=customer_id,
            old_tier=old_tier.label if old_tier else None,
            new_tier=new_tier.label,
            discount_percentage=new_tier.discount_percentage,
        )
