from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pos_checkout.adapters.outbound.in_memory_catalog import InMemoryCatalog
from pos_checkout.adapters.outbound.in_memory_loyalty import InMemoryLoyalty
from pos_checkout.adapters.outbound.in_memory_sales import InMemorySalesLedger
from pos_checkout.adapters.outbound.static_session import StaticSession
from pos_checkout.adapters.outbound.structlog_events import StructlogEventPublisher
from pos_checkout.config import Settings
from pos_checkout.core.domain.model.catalog import CatalogItem
from pos_checkout.core.domain.model.customer import LoyaltyTier
from pos_checkout.core.domain.service.checkout_service import (
    CheckoutDeps,
    CheckoutService,
)
from pos_checkout.log_config import configure_logging


@dataclass(frozen=True)
class Components:
    settings: Settings
    checkout: CheckoutService
    catalog: InMemoryCatalog
    sales: InMemorySalesLedger
    loyalty: InMemoryLoyalty


def build_components(settings: Settings | None = None) -> Components:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    catalog = InMemoryCatalog(
        items_by_branch={
            settings.branch_id: [
                CatalogItem("p-1", "Coffee 500g", Decimal("350.00"), 12, "Grocery"),
                CatalogItem("p-2", "Tea 250g", Decimal("120.00"), 30, "Grocery"),
                CatalogItem("p-3", "Ceramic Mug", Decimal("95.00"), 6, "Home"),
            ]
        }
    )
    loyalty = InMemoryLoyalty(
        tiers_by_customer={"c-1": LoyaltyTier("Gold", Decimal("5"))}
    )
    sales = InMemorySalesLedger(catalog=catalog, loyalty=loyalty)

    checkout = CheckoutService(
        CheckoutDeps(
            sales=sales,
            session=StaticSession(settings.branch_id, settings.operator_id),
            catalog=catalog,
            loyalty=loyalty,
            events=StructlogEventPublisher(),
            currency=settings.currency,
        )
    )
    return Components(
        settings=settings,
        checkout=checkout,
        catalog=catalog,
        sales=sales,
        loyalty=loyalty,
    )
