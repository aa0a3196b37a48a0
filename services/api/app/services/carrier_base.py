from __future__ import annotations

from typing import Protocol

from packages.shared.schemas.location import LocationOption

MIN_TERM_LENGTH = 2


class CarrierAdapterError(Exception):
    """Base class for carrier directory errors."""


class CarrierConfigError(CarrierAdapterError):
    def __init__(self, missing_env: str) -> None:
        super().__init__(f"Carrier directory is not configured. Set {missing_env}.")
        self.missing_env = missing_env


class CarrierAPIError(CarrierAdapterError):
    """The carrier answered with ``success: false`` or could not be reached."""


class CarrierDirectory(Protocol):
    vendor: str

    def search_cities(self, term: str) -> list[LocationOption]: ...

    def search_warehouses(self, term: str, city_ref: str | None) -> list[LocationOption]: ...


def is_searchable(term: str | None) -> bool:
    return len((term or "").strip()) >= MIN_TERM_LENGTH
