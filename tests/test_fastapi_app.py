"""HTTP shell tests using FastAPI's TestClient."""

from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from pos_checkout.adapters.inbound.web.fastapi_app import create_app
from pos_checkout.adapters.outbound.structlog_events import StructlogEventPublisher
from pos_checkout.bootstrap import build_components
from pos_checkout.config import Settings


@pytest.fixture
def components():
    return build_components(Settings(branch_id="main", log_level="WARNING"))


@pytest.fixture
def client(components) -> TestClient:
    return TestClient(create_app(components.checkout, components.settings))


def _open_and_add(client: TestClient, product_id: str, times: int = 1) -> None:
    assert client.get("/catalog").status_code == 200
    for _ in range(times):
        assert client.post("/cart/items", json={"product_id": product_id}).status_code == 201


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_catalog_and_categories(client):
    body = client.get("/catalog", params={"category": "Grocery"}).json()

    assert [it["id"] for it in body["items"]] == ["p-1", "p-2"]
    assert client.get("/catalog/categories").json() == {
        "categories": ["all", "Grocery", "Home"]
    }


def test_cash_sale_end_to_end(client, components):
    _open_and_add(client, "p-2", times=2)

    view = client.get("/checkout").json()
    assert view["subtotal"] == "240.00"
    assert view["can_submit"] is True

    res = client.post("/checkout")

    assert res.status_code == 201
    assert res.json()["final_total"] == "240.00"
    assert res.json()["currency"] == "ETB"
    assert client.get("/checkout").json()["lines"] == []
    assert len(components.sales.sales) == 1


def test_split_payment_flow(client):
    _open_and_add(client, "p-1")
    client.put("/tender", json={"mode": "split"})
    client.put("/tender/split/cash", json={"value": "100"})

    blocked = client.post("/checkout")
    assert blocked.status_code == 422
    assert blocked.json()["type"] == "PaymentIncomplete"

    view = client.post("/tender/split/mobile/remainder").json()
    assert view["split_amounts"]["mobile"] == "250.00"
    assert view["primary_method"] == "mobile"
    assert view["is_complete"] is True

    assert client.post("/checkout").status_code == 201


def test_stock_exceeded_maps_to_conflict(client):
    _open_and_add(client, "p-3", times=6)

    res = client.post("/cart/items", json={"product_id": "p-3"})

    assert res.status_code == 409
    assert res.json()["type"] == "StockExceeded"


def test_price_editing(client):
    _open_and_add(client, "p-2")

    cleared = client.put("/cart/items/p-2/price", json={"value": ""}).json()
    assert cleared["unit_price"] is None
    assert client.get("/checkout").json()["blocked_by"] == "UnresolvedPrice"

    bad = client.put("/cart/items/p-2/price", json={"value": "-1"})
    assert bad.status_code == 400

    resolved = client.post("/cart/items/p-2/price/finalize").json()
    assert resolved["unit_price"] == "0"


def test_unknown_line_is_404(client):
    res = client.post("/cart/items/nope/quantity", json={"delta": 1})

    assert res.status_code == 404


def test_loyalty_discount(client):
    _open_and_add(client, "p-1")

    view = client.put("/customer", json={"customer_id": "c-1"}).json()
    assert view["tier"]["label"] == "Gold"
    assert view["suggested_discount"] == "17.50"

    applied = client.post("/discount/suggested").json()
    assert applied["discount"] == "17.50"
    assert applied["total_due"] == "332.50"


def test_empty_cart_cannot_checkout(client):
    res = client.post("/checkout")

    assert res.status_code == 409
    assert res.json()["type"] == "EmptyCart"


def test_request_validation_is_400(client):
    res = client.post("/cart/items", json={})

    assert res.status_code == 400
    assert res.json()["type"] == "RequestValidationError"


def test_unpublished_sale_event_still_completes_checkout(client, components):
    components.checkout.deps = replace(
        components.checkout.deps, events=StructlogEventPublisher(fail=True)
    )
    _open_and_add(client, "p-3")

    res = client.post("/checkout")

    assert res.status_code == 201
    assert len(components.sales.sales) == 1


def test_oversized_price_is_400_and_view_still_renders(client):
    _open_and_add(client, "p-2")

    res = client.put("/cart/items/p-2/price", json={"value": "9e999999"})

    assert res.status_code == 400
    assert client.get("/checkout").json()["subtotal"] == "120.00"
