from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Success

from pos_checkout.config import Settings
from pos_checkout.core.domain.model.cart import CartLine
from pos_checkout.core.domain.model.customer import (
    CustomerId,
    CustomerReference,
    ExistingCustomer,
    NewCustomer,
)
from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    EmptyCart,
    InsufficientStock,
    InvalidInput,
    LineNotFound,
    PaymentIncomplete,
    PersistenceFailure,
    StockExceeded,
    SubmissionInProgress,
    UnknownProduct,
    UnresolvedPrice,
)
from pos_checkout.core.domain.model.tender import TenderMethod, TenderMode
from pos_checkout.core.ports.inbound.checkout import CheckoutUseCase, CheckoutView
from pos_checkout.core.ports.outbound.catalog import ALL_CATEGORIES, CatalogQuery

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class AddItemRequest(BaseModel):
    product_id: str = Field(min_length=1, examples=["p-1"])


class QuantityRequest(BaseModel):
    delta: int = Field(examples=[1, -1])


class RawValueRequest(BaseModel):
    # text as typed by the operator; "" clears a price field
    value: str = Field(examples=["120.00", ""])


class TenderModeRequest(BaseModel):
    mode: TenderMode
    method: TenderMethod = TenderMethod.CASH


class CustomerRequest(BaseModel):
    customer_id: str | None = Field(None, min_length=1, examples=["c-1"])
    name: str | None = None
    phone: str | None = None


class CatalogItemOut(BaseModel):
    id: str
    name: str
    category: str
    unit_price: str
    available_stock: int


class CatalogPageOut(BaseModel):
    page: int
    total_count: int
    has_more: bool
    items: list[CatalogItemOut]


class CartLineOut(BaseModel):
    product_id: str
    name: str
    quantity: int
    unit_price: str | None
    line_total: str
    stock_ceiling: int


class TierOut(BaseModel):
    label: str
    discount_percentage: str


class CheckoutViewOut(BaseModel):
    lines: list[CartLineOut]
    subtotal: str
    discount: str
    total_due: str
    total_tendered: str
    remaining: str
    is_complete: bool
    is_overpaid: bool
    can_submit: bool
    blocked_by: str | None
    mode: TenderMode
    primary_method: TenderMethod
    split_amounts: dict[str, str]
    suggested_discount: str
    tier: TierOut | None
    submitting: bool


class TierChangeOut(BaseModel):
    old_tier: str | None
    new_tier: str
    discount_percentage: str


class SaleReceiptResponse(BaseModel):
    sale_id: str
    final_total: str
    currency: str
    customer_id: str | None
    tier_change: TierChangeOut | None


class ErrorResponse(BaseModel):
    type: str
    message: str
    details: list[dict[str, Any]] | None = None


def _map_error_to_http(err: CheckoutError) -> tuple[int, ErrorResponse]:
    if isinstance(err, InvalidInput):
        return 400, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, (LineNotFound, UnknownProduct)):
        return 404, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(
        err,
        (StockExceeded, InsufficientStock, EmptyCart, SubmissionInProgress),
    ):
        return 409, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, (PaymentIncomplete, UnresolvedPrice)):
        return 422, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, PersistenceFailure):
        return 500, ErrorResponse(type=type(err).__name__, message=str(err))

    return 500, ErrorResponse(type=type(err).__name__, message=str(err))


def _money(value: Decimal) -> str:
    return str(value)


def _line_out(line: CartLine) -> CartLineOut:
    price = line.unit_price.value_or(None)
    return CartLineOut(
        product_id=line.product_id,
        name=line.name,
        quantity=line.quantity,
        unit_price=None if price is None else _money(price),
        line_total=_money(line.line_total()),
        stock_ceiling=line.stock_ceiling,
    )


def _view_out(view: CheckoutView) -> CheckoutViewOut:
    return CheckoutViewOut(
        lines=[
            CartLineOut(
                product_id=ln.product_id,
                name=ln.name,
                quantity=ln.quantity,
                unit_price=None if ln.unit_price is None else _money(ln.unit_price),
                line_total=_money(ln.line_total),
                stock_ceiling=ln.stock_ceiling,
            )
            for ln in view.lines
        ],
        subtotal=_money(view.subtotal),
        discount=_money(view.discount),
        total_due=_money(view.total_due),
        total_tendered=_money(view.total_tendered),
        remaining=_money(view.remaining),
        is_complete=view.is_complete,
        is_overpaid=view.is_overpaid,
        can_submit=view.can_submit,
        blocked_by=view.blocked_by,
        mode=view.mode,
        primary_method=view.primary_method,
        split_amounts={m.value: _money(a) for m, a in view.split_amounts.items()},
        suggested_discount=_money(view.suggested_discount),
        tier=(
            TierOut(
                label=view.tier.label,
                discount_percentage=_money(view.tier.discount_percentage),
            )
            if view.tier
            else None
        ),
        submitting=view.submitting,
    )


def _to_reference(req: CustomerRequest) -> CustomerReference:
    if req.customer_id is not None:
        return ExistingCustomer(CustomerId(req.customer_id))
    return NewCustomer(name=req.name or "", phone=req.phone or "")


def create_app(checkout: CheckoutUseCase, settings: Settings) -> FastAPI:
    app = FastAPI(title="pos_checkout")

    # --- exception handlers -------------------------------------------------

    @app.exception_handler(CheckoutError)
    async def handle_domain_error(_: Request, exc: CheckoutError) -> JSONResponse:
        status, body = _map_error_to_http(exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message="invalid request",
            details=[
                {"loc": list(e.get("loc", ())), "msg": str(e.get("msg", ""))}
                for e in exc.errors()
            ],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    # --- routes --------------------------------------------------------------

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/catalog", response_model=CatalogPageOut)
    def open_catalog(
        category: str = Query(ALL_CATEGORIES),
        search: str = Query(""),
        page: int = Query(0, ge=0),
    ) -> Any:
        result = checkout.open_catalog(
            CatalogQuery(
                branch_id=settings.branch_id,
                category=category,
                search=search,
                page=page,
                page_size=settings.page_size,
            )
        )
        if isinstance(result, Success):
            p = result.unwrap()
            return CatalogPageOut(
                page=p.page,
                total_count=p.total_count,
                has_more=p.has_more,
                items=[
                    CatalogItemOut(
                        id=it.id,
                        name=it.name,
                        category=it.category,
                        unit_price=_money(it.unit_price),
                        available_stock=it.available_stock,
                    )
                    for it in p.items
                ],
            )
        raise result.failure()

    @app.get("/catalog/categories")
    def categories() -> Any:
        result = checkout.list_categories(settings.branch_id)
        if isinstance(result, Success):
            return {"categories": [ALL_CATEGORIES, *result.unwrap()]}
        raise result.failure()

    @app.get("/checkout", response_model=CheckoutViewOut)
    def view() -> Any:
        return _view_out(checkout.view())

    @app.post("/cart/items", response_model=CartLineOut, status_code=201)
    def add_item(req: AddItemRequest) -> Any:
        result = checkout.add_product(req.product_id)
        if isinstance(result, Success):
            return _line_out(result.unwrap())
        raise result.failure()

    @app.post("/cart/items/{product_id}/quantity", response_model=CartLineOut)
    def change_quantity(product_id: str, req: QuantityRequest) -> Any:
        result = checkout.change_quantity(product_id, req.delta)
        if isinstance(result, Success):
            return _line_out(result.unwrap())
        raise result.failure()

    @app.put("/cart/items/{product_id}/price", response_model=CartLineOut)
    def set_price(product_id: str, req: RawValueRequest) -> Any:
        result = checkout.set_price(product_id, req.value)
        if isinstance(result, Success):
            return _line_out(result.unwrap())
        raise result.failure()

    @app.post("/cart/items/{product_id}/price/finalize", response_model=CartLineOut)
    def finalize_price(product_id: str) -> Any:
        result = checkout.finalize_price(product_id)
        if isinstance(result, Success):
            return _line_out(result.unwrap())
        raise result.failure()

    @app.delete("/cart/items/{product_id}", status_code=204)
    def remove_item(product_id: str) -> None:
        checkout.remove(product_id)

    @app.delete("/cart", status_code=204)
    def clear_cart() -> None:
        checkout.clear_cart()

    @app.put("/discount", response_model=CheckoutViewOut)
    def set_discount(req: RawValueRequest) -> Any:
        result = checkout.set_discount(req.value)
        if isinstance(result, Success):
            return _view_out(checkout.view())
        raise result.failure()

    @app.post("/discount/suggested", response_model=CheckoutViewOut)
    def apply_suggested() -> Any:
        result = checkout.apply_suggested_discount()
        if isinstance(result, Success):
            return _view_out(checkout.view())
        raise result.failure()

    @app.put("/tender", response_model=CheckoutViewOut)
    def select_mode(req: TenderModeRequest) -> Any:
        if req.mode is TenderMode.SPLIT:
            checkout.select_split()
        else:
            checkout.select_single(req.method)
        return _view_out(checkout.view())

    @app.put("/tender/split/{method}", response_model=CheckoutViewOut)
    def set_split_amount(method: TenderMethod, req: RawValueRequest) -> Any:
        result = checkout.set_split_amount(method, req.value)
        if isinstance(result, Success):
            return _view_out(checkout.view())
        raise result.failure()

    @app.post("/tender/split/{method}/remainder", response_model=CheckoutViewOut)
    def pay_remainder(method: TenderMethod) -> Any:
        checkout.pay_remainder(method)
        return _view_out(checkout.view())

    @app.delete("/tender/split", response_model=CheckoutViewOut)
    def clear_payments() -> Any:
        checkout.clear_payments()
        return _view_out(checkout.view())

    @app.put("/customer", response_model=CheckoutViewOut)
    def attach_customer(req: CustomerRequest) -> Any:
        result = checkout.attach_customer(_to_reference(req))
        if isinstance(result, Success):
            return _view_out(checkout.view())
        raise result.failure()

    @app.delete("/customer", response_model=CheckoutViewOut)
    def detach_customer() -> Any:
        checkout.detach_customer()
        return _view_out(checkout.view())

    @app.post(
        "/checkout",
        response_model=SaleReceiptResponse,
        status_code=201,
        responses={
            409: {"model": ErrorResponse},
            422: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    def submit() -> Any:
        result = checkout.submit()
        if isinstance(result, Success):
            receipt = result.unwrap()
            change = receipt.tier_change
            return SaleReceiptResponse(
                sale_id=str(receipt.sale_id.value),
                final_total=_money(receipt.final_total.amount),
                currency=receipt.final_total.currency,
                customer_id=receipt.customer_id.value if receipt.customer_id else None,
                tier_change=(
                    TierChangeOut(
                        old_tier=change.old_tier,
                        new_tier=change.new_tier,
                        discount_percentage=_money(change.discount_percentage),
                    )
                    if change
                    else None
                ),
            )
        raise result.failure()

    return app
