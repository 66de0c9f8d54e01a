from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from returns.maybe import Maybe
from returns.result import Result, Success

from pos_checkout.core.domain.model.customer import CustomerId, LoyaltyTier
from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.ports.outbound.loyalty import LoyaltyProvider


@dataclass
class InMemoryLoyalty(LoyaltyProvider):
    tiers_by_customer: Dict[str, LoyaltyTier] = field(default_factory=dict)

    def tier_for(
        self, customer_id: CustomerId
    ) -> Result[Maybe[LoyaltyTier], CheckoutError]:
        return Success(Maybe.from_optional(self.tiers_by_customer.get(customer_id.value)))

    def assign(self, customer_id: CustomerId, tier: LoyaltyTier) -> LoyaltyTier | None:
        previous = self.tiers_by_customer.get(customer_id.value)
        self.tiers_by_customer[customer_id.value] = tier
        return previous
