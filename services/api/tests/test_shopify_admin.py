from __future__ import annotations

import json

import httpx
import pytest
from services.api.app.services.commerce_base import (
    CommerceAPIError,
    CommerceConfigError,
    CommerceUserError,
)
from services.api.app.services.shopify_admin import ShopifyAdminPlatform


class _Recorder:
    def __init__(self, *payloads: dict, status_code: int = 200) -> None:
        self.payloads = list(payloads)
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payloads.pop(0))

    def variables(self, i: int) -> dict:
        return json.loads(self.requests[i].content)["variables"]


def _platform(recorder: _Recorder) -> ShopifyAdminPlatform:
    return ShopifyAdminPlatform(
        shop_domain="https://demo.myshopify.com/",
        access_token="shpat_test",
        transport=httpx.MockTransport(recorder),
    )


def test_requests_target_admin_graphql_with_token() -> None:
    recorder = _Recorder({"data": {"customers": {"edges": []}}})

    assert _platform(recorder).find_customer_by_phone("+380501234567") is None

    request = recorder.requests[0]
    assert str(request.url) == "https://demo.myshopify.com/admin/api/2025-01/graphql.json"
    assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
    assert recorder.variables(0) == {"q": "phone:+380501234567"}


def test_find_customer_returns_first_match() -> None:
    recorder = _Recorder(
        {"data": {"customers": {"edges": [{"node": {"id": "gid://shopify/Customer/7"}}]}}}
    )

    assert _platform(recorder).find_customer_by_phone("+380501234567") == "gid://shopify/Customer/7"


def test_draft_create_concatenates_errors_and_user_errors() -> None:
    recorder = _Recorder(
        {
            "errors": [{"message": "Throttled"}],
            "data": {
                "draftOrderCreate": {
                    "draftOrder": None,
                    "userErrors": [{"field": ["lineItems"], "message": "Variant is invalid"}],
                }
            },
        }
    )

    with pytest.raises(CommerceUserError) as excinfo:
        _platform(recorder).create_draft_order({"lineItems": []})

    assert excinfo.value.messages == ["Throttled", "Variant is invalid"]
    assert str(excinfo.value) == "Throttled; Variant is invalid"


def test_complete_draft_passes_payment_pending_and_returns_order() -> None:
    recorder = _Recorder(
        {
            "data": {
                "draftOrderComplete": {
                    "draftOrder": {
                        "id": "gid://shopify/DraftOrder/1",
                        "order": {"id": "gid://shopify/Order/2"},
                    },
                    "userErrors": [],
                }
            }
        }
    )

    completed = _platform(recorder).complete_draft_order(
        "gid://shopify/DraftOrder/1", payment_pending=True
    )

    assert recorder.variables(0) == {"id": "gid://shopify/DraftOrder/1", "pending": True}
    assert completed.order_id == "gid://shopify/Order/2"


def test_metafields_user_errors_raise() -> None:
    recorder = _Recorder(
        {"data": {"metafieldsSet": {"userErrors": [{"field": ["ownerId"], "message": "Owner not found"}]}}}
    )

    with pytest.raises(CommerceUserError, match="Owner not found"):
        _platform(recorder).set_metafields([{"ownerId": "x"}])


def test_http_error_is_api_error() -> None:
    recorder = _Recorder({"errors": "Invalid API key"}, status_code=401)

    with pytest.raises(CommerceAPIError, match="HTTP 401"):
        _platform(recorder).find_customer_by_phone("+380501234567")


def test_search_products_flattens_edges() -> None:
    recorder = _Recorder(
        {
            "data": {
                "products": {
                    "edges": [
                        {
                            "node": {
                                "id": "gid://shopify/Product/1",
                                "title": "Термос",
                                "featuredImage": {"url": "https://cdn.test/p.png"},
                                "variants": {
                                    "edges": [
                                        {
                                            "node": {
                                                "id": "gid://shopify/ProductVariant/11",
                                                "title": "Default Title",
                                                "image": None,
                                                "selectedOptions": [
                                                    {"name": "Title", "value": "Default Title"}
                                                ],
                                            }
                                        }
                                    ]
                                },
                            }
                        }
                    ]
                }
            }
        }
    )

    [product] = _platform(recorder).search_products("терм")

    assert product.title == "Термос"
    assert product.featured_image_url == "https://cdn.test/p.png"
    assert [v.id for v in product.variants] == ["gid://shopify/ProductVariant/11"]
    assert product.variants[0].image_url is None


def test_from_env_requires_shop_and_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SHOPIFY_SHOP_DOMAIN", raising=False)
    monkeypatch.delenv("SHOPIFY_ADMIN_TOKEN", raising=False)

    with pytest.raises(CommerceConfigError, match="SHOPIFY_SHOP_DOMAIN"):
        ShopifyAdminPlatform.from_env()

    monkeypatch.setenv("SHOPIFY_SHOP_DOMAIN", "demo.myshopify.com")
    with pytest.raises(CommerceConfigError, match="SHOPIFY_ADMIN_TOKEN"):
        ShopifyAdminPlatform.from_env()


@pytest.mark.parametrize("body", [None, [], "ok"])
def test_non_object_body_is_api_error(body: object) -> None:
    recorder = _Recorder(body)

    with pytest.raises(CommerceAPIError, match="expected an object"):
        _platform(recorder).set_metafields([{"ownerId": "gid://shopify/Order/1"}])
