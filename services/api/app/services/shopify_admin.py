from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx
from services.api.app.config import env_float
from services.api.app.services.commerce_base import (
    CommerceAPIError,
    CommerceConfigError,
    CommercePlatform,
    CommerceUserError,
    CompletedDraft,
    ProductRecord,
    ProductVariantRecord,
    collect_error_messages,
)

logger = logging.getLogger("orderdesk")

DEFAULT_API_VERSION = "2025-01"

FIND_CUSTOMER = """
query ($q: String!) {
  customers(first: 1, query: $q) { edges { node { id } } }
}
"""

CREATE_CUSTOMER = """
mutation ($input: CustomerInput!) {
  customerCreate(input: $input) {
    customer { id }
    userErrors { field message }
  }
}
"""

CREATE_DRAFT_ORDER = """
mutation ($draft: DraftOrderInput!) {
  draftOrderCreate(input: $draft) {
    draftOrder { id }
    userErrors { field message }
  }
}
"""

COMPLETE_DRAFT_ORDER = """
mutation completeDraft($id: ID!, $pending: Boolean) {
  draftOrderComplete(id: $id, paymentPending: $pending) {
    draftOrder { id order { id } }
    userErrors { field message }
  }
}
"""

SET_METAFIELDS = """
mutation setMeta($mfs: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $mfs) {
    userErrors { field message }
  }
}
"""

SEARCH_PRODUCTS = """
query ($q: String!) {
  products(first: 20, query: $q) {
    edges {
      node {
        id
        title
        featuredImage { url }
        variants(first: 50) {
          edges {
            node {
              id
              title
              image { url }
              selectedOptions { name value }
            }
          }
        }
      }
    }
  }
}
"""


@dataclass(frozen=True, slots=True)
class ShopifyConfig:
    shop_domain: str
    access_token: str
    api_version: str
    timeout_s: float

    @classmethod
    def from_env(cls) -> "ShopifyConfig":
        shop_domain = (os.getenv("SHOPIFY_SHOP_DOMAIN") or "").strip()
        if not shop_domain:
            raise CommerceConfigError("SHOPIFY_SHOP_DOMAIN")

        access_token = (os.getenv("SHOPIFY_ADMIN_TOKEN") or "").strip()
        if not access_token:
            raise CommerceConfigError("SHOPIFY_ADMIN_TOKEN")

        return cls(
            shop_domain=shop_domain,
            access_token=access_token,
            api_version=(os.getenv("SHOPIFY_API_VERSION") or DEFAULT_API_VERSION).strip(),
            timeout_s=env_float("SHOPIFY_TIMEOUT_S", 30.0),
        )


class ShopifyAdminPlatform(CommercePlatform):
    """Shopify Admin GraphQL API.

    The platform owns its own consistency; this client only shapes requests and turns
    ``errors``/``userErrors`` into :class:`CommerceUserError`.
    """

    vendor = "SHOPIFY"

    def __init__(
        self,
        *,
        shop_domain: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        host = shop_domain.removeprefix("https://").removeprefix("http://").rstrip("/")
        self._url = f"https://{host}/admin/api/{api_version}/graphql.json"
        self._client = httpx.Client(
            timeout=timeout_s,
            transport=transport,
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_env(cls) -> "ShopifyAdminPlatform":
        return cls.from_config(ShopifyConfig.from_env())

    @classmethod
    def from_config(cls, cfg: ShopifyConfig) -> "ShopifyAdminPlatform":
        return cls(
            shop_domain=cfg.shop_domain,
            access_token=cfg.access_token,
            api_version=cfg.api_version,
            timeout_s=cfg.timeout_s,
        )

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            resp = self._client.post(self._url, json={"query": query, "variables": variables or {}})
        except httpx.HTTPError as e:
            raise CommerceAPIError(f"Shopify request failed: {e}") from e

        if resp.status_code >= 400:
            raise CommerceAPIError(f"Shopify HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise CommerceAPIError("Shopify returned a non-JSON response") from e

        if not isinstance(payload, dict):
            raise CommerceAPIError(f"Shopify returned {type(payload).__name__}, expected an object")
        return payload

    def find_customer_by_phone(self, phone: str) -> str | None:
        payload = self.graphql(FIND_CUSTOMER, {"q": f"phone:{phone}"})
        _raise_for_errors(payload)

        edges = (((payload.get("data") or {}).get("customers") or {}).get("edges")) or []
        if not edges:
            return None
        return (edges[0].get("node") or {}).get("id")

    def create_customer(self, *, first_name: str, last_name: str, phone: str) -> str:
        payload = self.graphql(
            CREATE_CUSTOMER,
            {"input": {"firstName": first_name, "lastName": last_name, "phone": phone}},
        )
        _raise_for_errors(payload, "customerCreate")
        return _require_id(payload, "customerCreate", "customer")

    def create_draft_order(self, draft_input: dict[str, Any]) -> str:
        payload = self.graphql(CREATE_DRAFT_ORDER, {"draft": draft_input})
        _raise_for_errors(payload, "draftOrderCreate")
        return _require_id(payload, "draftOrderCreate", "draftOrder")

    def complete_draft_order(self, draft_id: str, *, payment_pending: bool) -> CompletedDraft:
        payload = self.graphql(COMPLETE_DRAFT_ORDER, {"id": draft_id, "pending": payment_pending})
        _raise_for_errors(payload, "draftOrderComplete")

        draft = ((payload.get("data") or {}).get("draftOrderComplete") or {}).get("draftOrder") or {}
        order = draft.get("order") or {}
        return CompletedDraft(draft_id=draft.get("id") or draft_id, order_id=order.get("id"))

    def set_metafields(self, metafields: list[dict[str, Any]]) -> None:
        payload = self.graphql(SET_METAFIELDS, {"mfs": metafields})
        _raise_for_errors(payload, "metafieldsSet")

    def search_products(self, query: str) -> list[ProductRecord]:
        payload = self.graphql(SEARCH_PRODUCTS, {"q": query})
        _raise_for_errors(payload)

        edges = (((payload.get("data") or {}).get("products") or {}).get("edges")) or []
        products: list[ProductRecord] = []
        for edge in edges:
            node = edge.get("node") or {}

            variants: list[ProductVariantRecord] = []
            for variant_edge in (node.get("variants") or {}).get("edges") or []:
                v = variant_edge.get("node") or {}
                if not v.get("id"):
                    continue
                variants.append(
                    ProductVariantRecord(
                        id=v["id"],
                        title=v.get("title") or "",
                        image_url=(v.get("image") or {}).get("url"),
                        selected_options=list(v.get("selectedOptions") or []),
                    )
                )

            products.append(
                ProductRecord(
                    id=node.get("id") or "",
                    title=node.get("title") or "",
                    featured_image_url=(node.get("featuredImage") or {}).get("url"),
                    variants=variants,
                )
            )
        return products

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()


def _raise_for_errors(payload: dict[str, Any], mutation: str | None = None) -> None:
    messages = collect_error_messages(payload, mutation)
    if messages:
        logger.debug("shopify %s rejected: %s", mutation or "query", messages)
        raise CommerceUserError(messages)


def _require_id(payload: dict[str, Any], mutation: str, entity: str) -> str:
    result = ((payload.get("data") or {}).get(mutation) or {}).get(entity) or {}
    entity_id = result.get("id")
    if not entity_id:
        raise CommerceAPIError(f"Shopify {mutation} returned no {entity} id")
    return str(entity_id)
