from __future__ import annotations

from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient
from services.api.app.services.commerce_mock import mock_platform


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setenv("ORDERDESK_COMMERCE_ADAPTER", "mock")
    monkeypatch.setenv("ORDERDESK_CARRIER_ADAPTER", "mock")
    monkeypatch.delenv("ORDERDESK_ORDERS_REDIRECT", raising=False)
    mock_platform.reset()
    mock_platform.reject.clear()

    from services.api.app.main import app

    with TestClient(app) as c:
        yield c

    mock_platform.reject.clear()


def _form(**overrides) -> list[tuple[str, str]]:
    fields = {
        "first": "Olena",
        "last": "K",
        "phone": "0501234567",
        "cityRef": "ref-1",
        "cityName": "Kyiv",
        "warehouseRef": "ref-9",
        "warehouseName": "Branch 5",
        "postalCode": "",
        "cod": "",
    }
    fields.update(overrides)
    pairs = [(k, v) for k, v in fields.items() if v is not None]
    return pairs + [("variantId", "v1"), ("qty", "2")]


def _post(client: TestClient, data: list[tuple[str, str]]):
    return client.post(
        "/app/orders/create",
        content=urlencode(data),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        follow_redirects=False,
    )


def test_standard_order_redirects_to_orders(client: TestClient) -> None:
    resp = _post(client, _form())

    assert resp.status_code == 303
    assert resp.headers["location"] == "/app/orders"
    assert mock_platform.call_names() == [
        "find_customer_by_phone",
        "create_customer",
        "create_draft_order",
        "complete_draft_order",
    ]

    draft = mock_platform.calls[2][1]["draft_input"]
    assert draft["lineItems"] == [{"variantId": "v1", "quantity": 2}]
    assert "Branch 5" in draft["shippingAddress"]["address1"]
    assert draft["shippingAddress"]["zip"] == "01001"
    assert mock_platform.calls[3][1]["payment_pending"] is False


def test_cod_order_is_pending_tagged_and_annotated(client: TestClient) -> None:
    resp = _post(client, _form(cod="1"))

    assert resp.status_code == 303
    draft = mock_platform.calls[2][1]["draft_input"]
    assert draft["tags"] == ["COD"]
    assert mock_platform.calls[3][1]["payment_pending"] is True
    assert mock_platform.call_names()[-1] == "set_metafields"
    assert mock_platform.metafields[0]["value"] == "300.00 UAH"


def test_missing_fields_return_400_with_every_name(client: TestClient) -> None:
    resp = client.post(
        "/app/orders/create",
        data={"first": "", "last": "", "phone": "0501234567"},
        follow_redirects=False,
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing fields: first, last, cityRef, warehouseRef, variantId"
    assert resp.json()["step"] == "validate"
    assert mock_platform.calls == []


def test_finalize_failure_returns_error_without_redirect(client: TestClient) -> None:
    mock_platform.reject["complete_draft_order"] = ["Variant is out of stock"]

    resp = _post(client, _form(cod="1"))

    assert resp.status_code == 502
    assert "location" not in resp.headers
    assert resp.json()["step"] == "finalize"
    assert "Variant is out of stock" in resp.json()["error"]
    assert "set_metafields" not in mock_platform.call_names()


def test_repeated_variant_pairs_keep_order(client: TestClient) -> None:
    data = _form()[:-2] + [("variantId", "v1"), ("qty", "1"), ("variantId", "v2"), ("qty", "3")]

    resp = _post(client, data)

    assert resp.status_code == 303
    draft = mock_platform.calls[2][1]["draft_input"]
    assert draft["lineItems"] == [
        {"variantId": "v1", "quantity": 1},
        {"variantId": "v2", "quantity": 3},
    ]


def test_unknown_commerce_adapter_is_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORDERDESK_COMMERCE_ADAPTER", "nope")

    resp = _post(client, _form())

    assert resp.status_code == 500
    assert "ORDERDESK_COMMERCE_ADAPTER" in resp.json()["error"]
    assert resp.json()["step"] is None


def test_unconfigured_shopify_is_503(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORDERDESK_COMMERCE_ADAPTER", "shopify")
    monkeypatch.delenv("SHOPIFY_SHOP_DOMAIN", raising=False)

    resp = _post(client, _form())

    assert resp.status_code == 503
    assert "SHOPIFY_SHOP_DOMAIN" in resp.json()["error"]


def test_invalid_deposit_setting_is_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORDERDESK_COD_DEPOSIT", "three hundred")

    resp = _post(client, _form())

    assert resp.status_code == 500
    assert resp.json() == {"error": "Invalid ORDERDESK_COD_DEPOSIT='three hundred'", "step": None}
    assert mock_platform.calls == []
