from __future__ import annotations

import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence, Tuple

import structlog
from returns.maybe import Maybe, Nothing
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.cart import Cart, CartLine
from pos_checkout.core.domain.model.catalog import (
    CatalogItem,
    CatalogSnapshot,
    now_utc,
)
from pos_checkout.core.domain.model.customer import (
    CustomerReference,
    LoyaltyTier,
    NewCustomer,
)
from pos_checkout.core.domain.model.discount import DiscountResolver
from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    EmptyCart,
    InvalidInput,
    PaymentIncomplete,
    SubmissionInProgress,
    UnknownProduct,
    UnresolvedPrice,
)
from pos_checkout.core.domain.model.money import (
    DEFAULT_CURRENCY,
    ZERO,
    Money,
)
from pos_checkout.core.domain.model.sale import (
    CheckoutPayload,
    PayloadLine,
    SaleId,
    SaleReceipt,
)
from pos_checkout.core.domain.model.tender import TenderLedger, TenderMethod
from pos_checkout.core.ports.inbound.checkout import (
    CartLineView,
    CheckoutUseCase,
    CheckoutView,
)
from pos_checkout.core.ports.outbound.catalog import (
    CatalogPage,
    CatalogProvider,
    CatalogQuery,
)
from pos_checkout.core.ports.outbound.events import EventPublisher, SaleCompleted
from pos_checkout.core.ports.outbound.loyalty import LoyaltyProvider
from pos_checkout.core.ports.outbound.sales import SaleRecorder
from pos_checkout.core.ports.outbound.session import SessionContext

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutDeps:
    sales: SaleRecorder
    session: SessionContext
    catalog: CatalogProvider | None = None
    loyalty: LoyaltyProvider | None = None
    events: EventPublisher | None = None
    currency: str = DEFAULT_CURRENCY


@dataclass
class CheckoutService(CheckoutUseCase):
    """One operator's in-progress sale.

    Combines the cart, the discount and the tender ledger, decides whether the
    sale can be submitted and hands the assembled payload to the sale recorder.
    Lifecycle: empty -> building -> submitting -> empty (or back to building
    when the recorder rejects the sale).
    """

    deps: CheckoutDeps
    cart: Cart = field(default_factory=Cart)
    discount: DiscountResolver = field(default_factory=DiscountResolver)
    ledger: TenderLedger = field(default_factory=TenderLedger)
    snapshot: CatalogSnapshot = field(default_factory=CatalogSnapshot)
    customer: CustomerReference | None = None
    tier: LoyaltyTier | None = None
    _submit_lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    # ---- catalog -----------------------------------------------------------

    def open_catalog(self, query: CatalogQuery) -> Result[CatalogPage, CheckoutError]:
        if self.deps.catalog is None:
            return Success(
                CatalogPage(
                    items=self.snapshot.items,
                    page=0,
                    total_count=len(self.snapshot),
                    has_more=False,
                )
            )

        result = self.deps.catalog.list_products(query)
        if isinstance(result, Success):
            page = result.unwrap()
            self.snapshot = CatalogSnapshot.of(page.items)
            log.info(
                "catalog_opened",
                branch_id=query.branch_id,
                category=query.category,
                page=page.page,
                items=len(page.items),
            )
        return result

    def list_categories(self, branch_id: str) -> Result[Sequence[str], CheckoutError]:
        if self.deps.catalog is None:
            return Success(
                tuple(sorted({it.category for it in self.snapshot if it.category}))
            )
        return self.deps.catalog.list_categories(branch_id)

    def use_snapshot(self, snapshot: CatalogSnapshot) -> None:
        self.snapshot = snapshot

    # ---- cart --------------------------------------------------------------

    def add_product(self, product_id: str) -> Result[CartLine, CheckoutError]:
        found = self.snapshot.find(product_id)
        if found == Nothing:
            return Failure(
                UnknownProduct(message="not in current catalog", product_id=product_id)
            )
        return self.add_item(found.unwrap())

    def add_item(self, item: CatalogItem) -> Result[CartLine, CheckoutError]:
        return self._logged(
            self.cart.add_product(item), "cart_line_added", product_id=item.id
        )

    def change_quantity(
        self, product_id: str, delta: int
    ) -> Result[CartLine, CheckoutError]:
        return self._logged(
            self.cart.change_quantity(product_id, delta),
            "cart_quantity_changed",
            product_id=product_id,
            delta=delta,
        )

    def set_price(self, product_id: str, raw: str) -> Result[CartLine, CheckoutError]:
        return self._logged(
            self.cart.set_price(product_id, raw), "cart_price_set", product_id=product_id
        )

    def finalize_price(self, product_id: str) -> Result[CartLine, CheckoutError]:
        return self.cart.finalize_price(product_id)

    def remove(self, product_id: str) -> None:
        self.cart.remove(product_id)
        log.info("cart_line_removed", product_id=product_id)

    def clear_cart(self) -> None:
        self.cart.clear()

    # ---- discount ----------------------------------------------------------

    def set_discount(self, raw: str) -> Result[Decimal, CheckoutError]:
        return self._logged(self.discount.set_flat_amount(raw), "discount_set")

    def apply_suggested_discount(self) -> Result[Decimal, CheckoutError]:
        return self._logged(
            self.discount.apply_suggested(
                self.cart.subtotal(), self.discount.suggested_percentage
            ),
            "loyalty_discount_applied",
            tier=self.tier.label if self.tier else None,
        )

    # ---- tender ------------------------------------------------------------

    def select_single(self, method: TenderMethod) -> None:
        self.ledger.select_single(method)

    def select_split(self) -> None:
        self.ledger.select_split()

    def set_split_amount(
        self, method: TenderMethod, raw: str
    ) -> Result[Decimal, CheckoutError]:
        return self._logged(
            self.ledger.set_split_amount(method, raw),
            "split_amount_set",
            method=method.value,
        )

    def pay_remainder(self, method: TenderMethod) -> Decimal:
        return self.ledger.pay_remainder(method, self.total_due())

    def clear_payments(self) -> None:
        self.ledger.clear()

    # ---- customer ----------------------------------------------------------

    def attach_customer(
        self, ref: CustomerReference
    ) -> Result[Maybe[LoyaltyTier], CheckoutError]:
        if isinstance(ref, NewCustomer):
            name, phone = ref.name.strip(), ref.phone.strip()
            if not name or not phone:
                return Failure(
                    InvalidInput(
                        message="name and phone are both required", field="customer"
                    )
                )
            self._set_customer(NewCustomer(name=name, phone=phone), None)
            return Success(Nothing)

        if self.deps.loyalty is None:
            self._set_customer(ref, None)
            return Success(Nothing)

        looked_up = self.deps.loyalty.tier_for(ref.customer_id)
        if isinstance(looked_up, Failure):
            return looked_up
        tier = looked_up.unwrap()
        self._set_customer(ref, tier.value_or(None))
        return looked_up

    def detach_customer(self) -> None:
        self._set_customer(None, None)

    def _set_customer(
        self, ref: CustomerReference | None, tier: LoyaltyTier | None
    ) -> None:
        self.customer = ref
        self.tier = tier
        self.discount.offer(tier.discount_percentage if tier else ZERO)

    # ---- derived -----------------------------------------------------------

    def subtotal(self) -> Decimal:
        return self.cart.subtotal()

    def effective_discount(self) -> Decimal:
        return self.discount.effective_discount(self.subtotal())

    def total_due(self) -> Decimal:
        return max(ZERO, self.subtotal() - self.effective_discount())

    # ---- reconciliation ----------------------------------------------------

    def check(self) -> Result[None, CheckoutError]:
        if self.cart.is_empty:
            return Failure(EmptyCart(message="Cart is empty"))

        unresolved = self.cart.unresolved_lines()
        if unresolved:
            return Failure(
                UnresolvedPrice(
                    message="price must be entered", product_id=unresolved[0].product_id
                )
            )

        due = self.total_due()
        if not self.ledger.is_complete(due):
            return Failure(
                PaymentIncomplete(
                    message="Please complete payment allocation before finalizing sale",
                    remaining=self.ledger.remaining(due),
                )
            )
        return Success(None)

    def can_submit(self) -> bool:
        return isinstance(self.check(), Success)

    def build_payload(self) -> Result[CheckoutPayload, CheckoutError]:
        return self.check().map(lambda _: self._assemble())

    def _assemble(self) -> CheckoutPayload:
        currency = self.deps.currency
        subtotal = self.subtotal()
        discount = self.effective_discount()
        final_total = max(ZERO, subtotal - discount)

        lines: Tuple[PayloadLine, ...] = tuple(
            PayloadLine(
                product_id=ln.product_id,
                name=ln.name,
                quantity=ln.quantity,
                unit_price=Money.of(ln.resolved_price(), currency),
                line_total=Money.of(ln.line_total(), currency),
                original_price=Money.of(ln.original_price, currency),
            )
            for ln in self.cart.lines()
        )
        return CheckoutPayload(
            payload_id=SaleId.new(),
            branch_id=self.deps.session.branch_id(),
            operator_id=self.deps.session.operator_id(),
            lines=lines,
            subtotal=Money.of(subtotal, currency),
            discount=Money.of(discount, currency),
            final_total=Money.of(final_total, currency),
            tender=self.ledger.breakdown(final_total),
            customer=self.customer,
            created_at=now_utc(),
        )

    def submit(
        self, payload: CheckoutPayload | None = None
    ) -> Result[SaleReceipt, CheckoutError]:
        """Record the current sale and reset the session on success.

        The gate always runs against the live cart. An explicit `payload` is
        sent as given; the caller is responsible for it matching the cart,
        which is cleared once the recorder accepts it.
        """
        if not self._submit_lock.acquire(blocking=False):
            return Failure(
                SubmissionInProgress(message="a sale is already being submitted")
            )
        try:
            return self._submit_locked(payload)
        finally:
            self._submit_lock.release()

    def _submit_locked(
        self, payload: CheckoutPayload | None
    ) -> Result[SaleReceipt, CheckoutError]:
        if payload is None:
            built = self.build_payload()
        else:
            explicit = payload
            built = self.check().map(lambda _: explicit)
        if isinstance(built, Failure):
            log.info("checkout_blocked", reason=type(built.failure()).__name__)
            return built
        payload = built.unwrap()

        result = self.deps.sales.record(payload)
        if isinstance(result, Failure):
            err = result.failure()
            log.warning(
                "checkout_rejected",
                payload_id=str(payload.payload_id.value),
                error=type(err).__name__,
                message=str(err),
            )
            return result

        receipt = result.unwrap()
        log.info(
            "checkout_submitted",
            sale_id=str(receipt.sale_id.value),
            final_total=str(payload.final_total.amount),
            method=payload.tender.primary_method.value,
            split=payload.tender.is_split,
        )
        self._publish(payload, receipt)
        self._reset()
        return result

    def _publish(self, payload: CheckoutPayload, receipt: SaleReceipt) -> None:
        if self.deps.events is None:
            return
        published = self.deps.events.publish(
            SaleCompleted(
                sale_id=receipt.sale_id,
                branch_id=payload.branch_id,
                final_total=payload.final_total,
                primary_method=payload.tender.primary_method,
            )
        )
        if isinstance(published, Failure):
            # the sale is already recorded
            log.warning("sale_event_not_published", error=str(published.failure()))

    def _reset(self) -> None:
        self.cart.clear()
        self.discount.reset()
        self.ledger.reset()
        self.customer = None
        self.tier = None

    # ---- views -------------------------------------------------------------

    def view(self) -> CheckoutView:
        subtotal = self.subtotal()
        due = self.total_due()
        check = self.check()
        return CheckoutView(
            lines=tuple(
                CartLineView(
                    product_id=ln.product_id,
                    name=ln.name,
                    quantity=ln.quantity,
                    unit_price=ln.unit_price.value_or(None),
                    line_total=ln.line_total(),
                    stock_ceiling=ln.stock_ceiling,
                )
                for ln in self.cart.lines()
            ),
            subtotal=subtotal,
            discount=self.effective_discount(),
            total_due=due,
            total_tendered=self.ledger.total_tendered(due),
            remaining=self.ledger.remaining(due),
            is_complete=self.ledger.is_complete(due),
            is_overpaid=self.ledger.is_overpaid(due),
            can_submit=isinstance(check, Success),
            blocked_by=(
                None if isinstance(check, Success) else type(check.failure()).__name__
            ),
            mode=self.ledger.mode,
            primary_method=self.ledger.primary_method(),
            split_amounts=dict(self.ledger.split_amounts),
            suggested_discount=self.discount.suggested_amount(subtotal),
            tier=self.tier,
            customer=self.customer,
            submitting=self._submit_lock.locked(),
        )

    @staticmethod
    def _logged(result: Result, event: str, **fields: object) -> Result:
        if isinstance(result, Failure):
            err = result.failure()
            log.info(event + "_rejected", error=type(err).__name__, **fields)
        else:
            log.debug(event, **fields)
        return result
