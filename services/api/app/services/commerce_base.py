from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


class CommerceAdapterError(Exception):
    """Base class for commerce platform errors."""


class CommerceConfigError(CommerceAdapterError):
    def __init__(self, missing_env: str) -> None:
        super().__init__(f"Commerce platform is not configured. Set {missing_env}.")
        self.missing_env = missing_env


class CommerceAPIError(CommerceAdapterError):
    """Transport failure or a non-success HTTP status from the platform."""


class CommerceUserError(CommerceAdapterError):
    """The platform rejected a request; carries every reported message."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages) or "Commerce platform rejected the request")
        self.messages = messages


@dataclass(frozen=True, slots=True)
class CompletedDraft:
    draft_id: str
    order_id: str | None


@dataclass(frozen=True, slots=True)
class ProductVariantRecord:
    id: str
    title: str
    image_url: str | None
    selected_options: list[dict[str, str]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ProductRecord:
    id: str
    title: str
    featured_image_url: str | None
    variants: list[ProductVariantRecord]


class CommercePlatform(Protocol):
    vendor: str

    def find_customer_by_phone(self, phone: str) -> str | None: ...

    def create_customer(self, *, first_name: str, last_name: str, phone: str) -> str: ...

    def create_draft_order(self, draft_input: dict[str, Any]) -> str: ...

    def complete_draft_order(self, draft_id: str, *, payment_pending: bool) -> CompletedDraft: ...

    def set_metafields(self, metafields: list[dict[str, Any]]) -> None: ...

    def search_products(self, query: str) -> list[ProductRecord]: ...


def collect_error_messages(payload: dict[str, Any], mutation: str | None = None) -> list[str]:
    """Top-level GraphQL ``errors`` followed by the mutation's ``userErrors``."""

    raw = payload.get("errors") or []
    errors: list[Any] = [raw] if isinstance(raw, (str, dict)) else list(raw)
    if mutation:
        data = payload.get("data") or {}
        result = data.get(mutation) or {}
        errors.extend(result.get("userErrors") or [])

    messages: list[str] = []
    for err in errors:
        if isinstance(err, dict):
            messages.append(str(err.get("message") or err))
        else:
            messages.append(str(err))
    return messages
