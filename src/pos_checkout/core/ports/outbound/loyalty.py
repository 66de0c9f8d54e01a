from __future__ import annotations

from typing import Protocol

from returns.maybe import Maybe
from returns.result import Result

from pos_checkout.core.domain.model.customer import CustomerId, LoyaltyTier
from pos_checkout.core.domain.model.errors import CheckoutError


class LoyaltyProvider(Protocol):
    def tier_for(
        self, customer_id: CustomerId
    ) -> Result[Maybe[LoyaltyTier], CheckoutError]: ...
