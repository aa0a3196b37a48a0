from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from packages.shared.schemas.location import LocationOption
from services.api.app.config import env_float
from services.api.app.services.carrier_base import (
    CarrierAPIError,
    CarrierConfigError,
    CarrierDirectory,
    is_searchable,
)

logger = logging.getLogger("orderdesk")

DEFAULT_API_URL = "https://api.novaposhta.ua/v2.0/json/"
RESULT_LIMIT = 10

# Candidate field names per logical attribute, tried in order. searchSettlements and
# getWarehouses name the same things differently.
LABEL_FIELDS = ("Present", "present", "Description", "DescriptionRu")
CITY_REF_FIELDS = ("DeliveryCity", "Ref", "ref")
WAREHOUSE_REF_FIELDS = ("Ref", "ref")
POSTAL_CODE_FIELDS = ("PostalCodeUA", "Index1", "postalCode")


@dataclass(frozen=True, slots=True)
class NovaPoshtaConfig:
    api_key: str
    api_url: str
    timeout_s: float

    @classmethod
    def from_env(cls) -> "NovaPoshtaConfig":
        api_key = (os.getenv("NOVA_POSHTA_API_KEY") or "").strip()
        if not api_key:
            raise CarrierConfigError("NOVA_POSHTA_API_KEY")

        return cls(
            api_key=api_key,
            api_url=(os.getenv("NOVA_POSHTA_API_URL") or DEFAULT_API_URL).strip(),
            timeout_s=env_float("NOVA_POSHTA_TIMEOUT_S", 10.0),
        )


class NovaPoshtaDirectory(CarrierDirectory):
    """Nova Poshta JSON API (single RPC endpoint).

    Every call is one POST of ``{apiKey, modelName, calledMethod, methodProperties}``.
    No caching and no retries; callers debounce.
    """

    vendor = "NOVA_POSHTA"

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._client = httpx.Client(timeout=timeout_s, transport=transport)

    @classmethod
    def from_env(cls) -> "NovaPoshtaDirectory":
        return cls.from_config(NovaPoshtaConfig.from_env())

    @classmethod
    def from_config(cls, cfg: NovaPoshtaConfig) -> "NovaPoshtaDirectory":
        return cls(api_key=cfg.api_key, api_url=cfg.api_url, timeout_s=cfg.timeout_s)

    def search_cities(self, term: str) -> list[LocationOption]:
        if not is_searchable(term):
            return []

        data = self.call(
            "Address",
            "searchSettlements",
            {"CityName": term.strip(), "Limit": RESULT_LIMIT},
        )
        if not data or not isinstance(data[0], Mapping):
            return []

        return _to_options(data[0].get("Addresses") or [], ref_fields=CITY_REF_FIELDS)

    def search_warehouses(self, term: str, city_ref: str | None) -> list[LocationOption]:
        if not city_ref or not is_searchable(term):
            return []

        data = self.call(
            "Address",
            "getWarehouses",
            {
                "CityRef": city_ref,
                "FindByString": term.strip(),
                "Limit": RESULT_LIMIT,
                "Language": "UA",
            },
        )
        return _to_options(data or [], ref_fields=WAREHOUSE_REF_FIELDS)

    def call(self, model: str, method: str, props: dict[str, Any]) -> list[Any]:
        body = {
            "apiKey": self._api_key,
            "modelName": model,
            "calledMethod": method,
            "methodProperties": props,
        }

        try:
            resp = self._client.post(self._api_url, json=body)
        except httpx.HTTPError as e:
            raise CarrierAPIError(f"Nova Poshta request failed: {e}") from e

        if resp.status_code >= 400:
            raise CarrierAPIError(f"Nova Poshta HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise CarrierAPIError("Nova Poshta returned a non-JSON response") from e

        if not isinstance(payload, Mapping):
            raise CarrierAPIError(f"Nova Poshta returned {type(payload).__name__}, expected an object")

        if not payload.get("success"):
            errors = [str(err) for err in payload.get("errors") or [] if err]
            raise CarrierAPIError(", ".join(errors) or "Nova Poshta API error")

        logger.debug("nova poshta %s.%s -> %d rows", model, method, len(payload.get("data") or []))
        return list(payload.get("data") or [])

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()


def _to_options(rows: list[Any], *, ref_fields: tuple[str, ...]) -> list[LocationOption]:
    options: list[LocationOption] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue

        label = _first_field(row, LABEL_FIELDS)
        ref = _first_field(row, ref_fields)
        if not label or not ref:
            continue

        options.append(
            LocationOption(
                label=label,
                value=ref,
                postal_code=_first_field(row, POSTAL_CODE_FIELDS),
            )
        )
    return options


def _first_field(row: Mapping[str, Any], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = row.get(name)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None
