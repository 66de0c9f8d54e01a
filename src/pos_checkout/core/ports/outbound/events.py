from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import SaleId
from pos_checkout.core.domain.model.tender import TenderMethod


@dataclass(frozen=True)
class SaleCompleted:
    sale_id: SaleId
    branch_id: str
    final_total: Money
    primary_method: TenderMethod


class EventPublisher(Protocol):
    def publish(self, event: SaleCompleted) -> Result[None, CheckoutError]: ...
