"""Shared pytest fixtures for the checkout engine tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List

import pytest
from returns.result import Failure, Result, Success

from pos_checkout.adapters.outbound.static_session import StaticSession
from pos_checkout.core.domain.model.catalog import CatalogItem, CatalogSnapshot
from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.sale import CheckoutPayload, SaleReceipt
from pos_checkout.core.domain.service.checkout_service import (
    CheckoutDeps,
    CheckoutService,
)

BRANCH = "branch-1"


@dataclass
class FakeSaleRecorder:
    """Records payloads; answers with `error` when set."""

    error: CheckoutError | None = None
    payloads: List[CheckoutPayload] = field(default_factory=list)
    on_record: Callable[[CheckoutPayload], None] | None = None

    def record(self, payload: CheckoutPayload) -> Result[SaleReceipt, CheckoutError]:
        self.payloads.append(payload)
        if self.on_record is not None:
            self.on_record(payload)
        if self.error is not None:
            return Failure(self.error)
        return Success(
            SaleReceipt(sale_id=payload.payload_id, final_total=payload.final_total)
        )


@pytest.fixture
def product_a() -> CatalogItem:
    return CatalogItem("A", "Product A", Decimal("100"), 5, "Grocery")


@pytest.fixture
def product_b() -> CatalogItem:
    return CatalogItem("B", "Product B", Decimal("50"), 2, "Grocery")


@pytest.fixture
def recorder() -> FakeSaleRecorder:
    return FakeSaleRecorder()


@pytest.fixture
def service(recorder, product_a, product_b) -> CheckoutService:
    svc = CheckoutService(
        CheckoutDeps(sales=recorder, session=StaticSession(BRANCH, "op-1"))
    )
    svc.use_snapshot(CatalogSnapshot.of([product_a, product_b]))
    return svc


@pytest.fixture
def scenario_one(service) -> CheckoutService:
    """A x3 and B x1: subtotal 350."""
    for _ in range(3):
        service.add_product("A")
    service.add_product("B")
    return service
