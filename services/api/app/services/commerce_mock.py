from __future__ import annotations

import threading
from itertools import count
from typing import Any

from services.api.app.services.commerce_base import (
    CommercePlatform,
    CommerceUserError,
    CompletedDraft,
    ProductRecord,
    ProductVariantRecord,
)


class MockCommercePlatform(CommercePlatform):
    """In-memory stand-in for the commerce platform.

    Keeps customers, drafts, orders and metafields for the life of the process and
    records every call so tests can assert on the exact sequence. ``reject`` maps a
    method name to the user errors that method should report.
    """

    vendor = "COMMERCE_MOCK"

    def __init__(self, *, reject: dict[str, list[str]] | None = None) -> None:
        self.reject: dict[str, list[str]] = dict(reject or {})
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        self._ids = count(1)
        self.customers: dict[str, dict[str, str]] = {}
        self.drafts: dict[str, dict[str, Any]] = {}
        self.orders: dict[str, dict[str, Any]] = {}
        self.metafields: list[dict[str, Any]] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._catalog = [
            ProductRecord(
                id="gid://shopify/Product/1",
                title="Термос сталевий",
                featured_image_url="https://cdn.example.test/thermos.png",
                variants=[
                    ProductVariantRecord(
                        id="gid://shopify/ProductVariant/11",
                        title="0.5 л / Чорний",
                        image_url=None,
                        selected_options=[
                            {"name": "Обʼєм", "value": "0.5 л"},
                            {"name": "Колір", "value": "Чорний"},
                        ],
                    ),
                    ProductVariantRecord(
                        id="gid://shopify/ProductVariant/12",
                        title="1 л / Сірий",
                        image_url="https://cdn.example.test/thermos-grey.png",
                        selected_options=[
                            {"name": "Обʼєм", "value": "1 л"},
                            {"name": "Колір", "value": "Сірий"},
                        ],
                    ),
                ],
            ),
            ProductRecord(
                id="gid://shopify/Product/2",
                title="Чашка керамічна",
                featured_image_url=None,
                variants=[
                    ProductVariantRecord(
                        id="gid://shopify/ProductVariant/21",
                        title="Default Title",
                        image_url=None,
                        selected_options=[{"name": "Title", "value": "Default Title"}],
                    ),
                ],
            ),
        ]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def find_customer_by_phone(self, phone: str) -> str | None:
        self._record("find_customer_by_phone", phone=phone)
        customer = self.customers.get(phone)
        return customer["id"] if customer else None

    def create_customer(self, *, first_name: str, last_name: str, phone: str) -> str:
        self._record("create_customer", first_name=first_name, last_name=last_name, phone=phone)
        with self._lock:
            if phone in self.customers:
                raise CommerceUserError(["Phone has already been taken"])
            customer_id = f"gid://shopify/Customer/{next(self._ids)}"
            self.customers[phone] = {
                "id": customer_id,
                "firstName": first_name,
                "lastName": last_name,
                "phone": phone,
            }
        return customer_id

    def create_draft_order(self, draft_input: dict[str, Any]) -> str:
        self._record("create_draft_order", draft_input=draft_input)
        with self._lock:
            draft_id = f"gid://shopify/DraftOrder/{next(self._ids)}"
            self.drafts[draft_id] = {"input": draft_input, "order_id": None}
        return draft_id

    def complete_draft_order(self, draft_id: str, *, payment_pending: bool) -> CompletedDraft:
        self._record("complete_draft_order", draft_id=draft_id, payment_pending=payment_pending)
        with self._lock:
            draft = self.drafts.get(draft_id)
            if draft is None:
                raise CommerceUserError([f"Draft order {draft_id} does not exist"])
            if draft["order_id"] is not None:
                raise CommerceUserError(["Draft order has already been completed"])

            order_id = f"gid://shopify/Order/{next(self._ids)}"
            draft["order_id"] = order_id
            self.orders[order_id] = {
                "draft_id": draft_id,
                "payment_pending": payment_pending,
                "financial_status": "PARTIALLY_PAID" if payment_pending else "PAID",
                "tags": list(draft["input"].get("tags") or []),
            }
        return CompletedDraft(draft_id=draft_id, order_id=order_id)

    def set_metafields(self, metafields: list[dict[str, Any]]) -> None:
        self._record("set_metafields", metafields=metafields)
        with self._lock:
            self.metafields.extend(metafields)

    def search_products(self, query: str) -> list[ProductRecord]:
        self._record("search_products", query=query)
        needle = query.strip().lower()
        return [p for p in self._catalog if needle in p.title.lower()]

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        messages = self.reject.get(name)
        if messages:
            raise CommerceUserError(list(messages))


mock_platform = MockCommercePlatform()
