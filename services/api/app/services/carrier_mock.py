from __future__ import annotations

from packages.shared.schemas.location import LocationOption
from services.api.app.services.carrier_base import CarrierDirectory, is_searchable


class MockCarrierDirectory(CarrierDirectory):
    vendor = "CARRIER_MOCK"

    def __init__(self) -> None:
        self._cities = [
            LocationOption(label="м. Київ, Київська обл.", value="city-kyiv", postal_code="01001"),
            LocationOption(label="м. Львів, Львівська обл.", value="city-lviv", postal_code="79000"),
            LocationOption(label="м. Одеса, Одеська обл.", value="city-odesa", postal_code="65000"),
            LocationOption(label="м. Харків, Харківська обл.", value="city-kharkiv"),
        ]
        self._warehouses: dict[str, list[LocationOption]] = {
            "city-kyiv": [
                LocationOption(label="Відділення №1: вул. Пирогівський шлях, 135", value="wh-kyiv-1"),
                LocationOption(label="Відділення №5: вул. Федорова, 32", value="wh-kyiv-5", postal_code="03150"),
            ],
            "city-lviv": [
                LocationOption(label="Відділення №1: вул. Городоцька, 355/6", value="wh-lviv-1"),
            ],
            "city-odesa": [
                LocationOption(label="Відділення №2: вул. Базова, 16", value="wh-odesa-2"),
            ],
        }
        self.calls: list[tuple[str, str, str | None]] = []

    def search_cities(self, term: str) -> list[LocationOption]:
        if not is_searchable(term):
            return []

        self.calls.append(("cities", term, None))
        needle = term.strip().lower()
        return [c for c in self._cities if needle in c.label.lower()]

    def search_warehouses(self, term: str, city_ref: str | None) -> list[LocationOption]:
        if not city_ref or not is_searchable(term):
            return []

        self.calls.append(("warehouses", term, city_ref))
        needle = term.strip().lower()
        return [w for w in self._warehouses.get(city_ref, []) if needle in w.label.lower()]
