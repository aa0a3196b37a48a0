from __future__ import annotations

import json

import httpx
import pytest
from services.api.app.services.carrier_base import CarrierAPIError, CarrierConfigError
from services.api.app.services.nova_poshta import NovaPoshtaDirectory


class _Recorder:
    def __init__(self, payload: dict, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(json.loads(request.content))
        return httpx.Response(self.status_code, json=self.payload)


def _directory(recorder: _Recorder) -> NovaPoshtaDirectory:
    return NovaPoshtaDirectory(api_key="np-key", transport=httpx.MockTransport(recorder))


def test_search_cities_posts_rpc_body_and_maps_delivery_city() -> None:
    recorder = _Recorder(
        {
            "success": True,
            "data": [
                {
                    "TotalCount": 2,
                    "Addresses": [
                        {"Present": "м. Київ, Київська обл.", "DeliveryCity": "city-1", "Ref": "settlement-1"},
                        {"Present": "с. Київець", "DeliveryCity": "city-2"},
                    ],
                }
            ],
            "errors": [],
        }
    )

    options = _directory(recorder).search_cities("Ки")

    assert recorder.bodies == [
        {
            "apiKey": "np-key",
            "modelName": "Address",
            "calledMethod": "searchSettlements",
            "methodProperties": {"CityName": "Ки", "Limit": 10},
        }
    ]
    assert [(o.label, o.value) for o in options] == [
        ("м. Київ, Київська обл.", "city-1"),
        ("с. Київець", "city-2"),
    ]


def test_search_warehouses_coalesces_label_and_reference_fields() -> None:
    recorder = _Recorder(
        {
            "success": True,
            "data": [
                {"Description": "Відділення №5", "Ref": "wh-5", "PostalCodeUA": "03150"},
                {"present": "Поштомат 777", "ref": "wh-777"},
                {"Description": "", "DescriptionRu": "Отделение №9", "Ref": "wh-9"},
                {"Description": "No reference at all"},
            ],
            "errors": [],
        }
    )

    options = _directory(recorder).search_warehouses("Від", "city-1")

    assert recorder.bodies[0]["calledMethod"] == "getWarehouses"
    assert recorder.bodies[0]["methodProperties"] == {
        "CityRef": "city-1",
        "FindByString": "Від",
        "Limit": 10,
        "Language": "UA",
    }
    assert [(o.label, o.value, o.postal_code) for o in options] == [
        ("Відділення №5", "wh-5", "03150"),
        ("Поштомат 777", "wh-777", None),
        ("Отделение №9", "wh-9", None),
    ]


@pytest.mark.parametrize("term", ["", "K", " K ", "   "])
def test_short_terms_make_no_request(term: str) -> None:
    recorder = _Recorder({"success": True, "data": []})
    directory = _directory(recorder)

    assert directory.search_cities(term) == []
    assert directory.search_warehouses(term, "city-1") == []
    assert recorder.bodies == []


@pytest.mark.parametrize("city_ref", [None, ""])
def test_warehouse_search_without_city_makes_no_request(city_ref: str | None) -> None:
    recorder = _Recorder({"success": True, "data": []})

    assert _directory(recorder).search_warehouses("Відділення", city_ref) == []
    assert recorder.bodies == []


def test_unsuccessful_response_joins_errors() -> None:
    recorder = _Recorder(
        {"success": False, "data": [], "errors": ["API key expired", "Access denied"]}
    )

    with pytest.raises(CarrierAPIError, match="API key expired, Access denied"):
        _directory(recorder).search_cities("Київ")


def test_unsuccessful_response_without_errors_has_generic_message() -> None:
    recorder = _Recorder({"success": False, "data": []})

    with pytest.raises(CarrierAPIError, match="Nova Poshta API error"):
        _directory(recorder).search_cities("Київ")


def test_http_error_status_is_a_carrier_error() -> None:
    recorder = _Recorder({"success": True, "data": []}, status_code=503)

    with pytest.raises(CarrierAPIError, match="HTTP 503"):
        _directory(recorder).search_cities("Київ")


def test_empty_city_data_is_not_an_error() -> None:
    recorder = _Recorder({"success": True, "data": [], "errors": []})

    assert _directory(recorder).search_cities("Qwerty") == []


def test_from_env_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOVA_POSHTA_API_KEY", raising=False)

    with pytest.raises(CarrierConfigError, match="NOVA_POSHTA_API_KEY"):
        NovaPoshtaDirectory.from_env()


def test_non_object_body_is_a_carrier_error() -> None:
    with pytest.raises(CarrierAPIError, match="expected an object"):
        _directory(_Recorder(None)).search_cities("Київ")
