from __future__ import annotations

from dataclasses import dataclass

import structlog
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import CheckoutError, PublishError
from pos_checkout.core.ports.outbound.events import EventPublisher, SaleCompleted

log = structlog.get_logger(__name__)


@dataclass
class StructlogEventPublisher(EventPublisher):
    fail: bool = False

    def publish(self, event: SaleCompleted) -> Result[None, CheckoutError]:
        if self.fail:
            return Failure(PublishError(message="publisher is down"))
        log.info(
            "sale_completed",
            sale_id=str(event.sale_id.value),
            branch_id=event.branch_id,
            final_total=str(event.final_total.amount),
            currency=event.final_total.currency,
            method=event.primary_method.value,
        )
        return Success(None)
