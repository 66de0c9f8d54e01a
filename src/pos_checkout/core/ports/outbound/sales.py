from __future__ import annotations

from typing import Protocol

from returns.result import Result

from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.sale import CheckoutPayload, SaleReceipt


class SaleRecorder(Protocol):
    def record(self, payload: CheckoutPayload) -> Result[SaleReceipt, CheckoutError]:
        """
        Atomically decrement stock, store the sale with its items, resolve or
        create the customer and write the audit entry.

        Fails with InsufficientStock when live stock no longer covers a line,
        PersistenceFailure otherwise. Nothing is written on failure.
        """
        ...
