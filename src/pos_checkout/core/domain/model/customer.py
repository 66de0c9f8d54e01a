from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class CustomerId:
    value: str


@dataclass(frozen=True)
class ExistingCustomer:
    customer_id: CustomerId


@dataclass(frozen=True)
class NewCustomer:
    """Walk-in customer to be created (or matched by phone) when the sale is recorded."""

    name: str
    phone: str


CustomerReference = Union[ExistingCustomer, NewCustomer]


@dataclass(frozen=True)
class LoyaltyTier:
    label: str
    discount_percentage: Decimal


@dataclass(frozen=True)
class TierChange:
    customer_id: CustomerId
    old_tier: str | None
    new_tier: str
    discount_percentage: Decimal
