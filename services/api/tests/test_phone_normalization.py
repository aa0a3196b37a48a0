import pytest
from services.api.app.services.customers import normalize_phone


@pytest.mark.parametrize(
    "raw",
    [
        "0501234567",
        "050 123 45 67",
        "050-123-45-67",
        "(050) 123-45-67",
        "+38 050 123 45 67",
        "+380501234567",
        "380501234567",
        " +380 (50) 123-45-67 ",
    ],
)
def test_normalize_phone_yields_single_country_prefix(raw: str) -> None:
    assert normalize_phone(raw) == "+380501234567"


@pytest.mark.parametrize("raw", ["0501234567", "+380 50 123 4567", "501234567"])
def test_normalize_phone_is_idempotent(raw: str) -> None:
    once = normalize_phone(raw)
    assert once is not None
    assert normalize_phone(once) == once
    assert once.count("+") == 1
    assert once.startswith("+380")
    assert not once[4:].startswith("380")


def test_normalize_phone_without_digits_is_none() -> None:
    assert normalize_phone("") is None
    assert normalize_phone(None) is None
    assert normalize_phone("call me") is None


@pytest.mark.parametrize("raw", ["0", "1", "+38", "050 123 45", "+380 50 123 45 678"])
def test_normalize_phone_rejects_wrong_subscriber_length(raw: str) -> None:
    assert normalize_phone(raw) is None


def test_normalize_phone_honours_country_code() -> None:
    assert normalize_phone("0601234567", country_code="48") == "+48601234567"
    assert normalize_phone("48601234567", country_code="48") == "+48601234567"


def test_normalize_phone_caps_unknown_country_codes_at_e164_length() -> None:
    assert normalize_phone("0123456", country_code="1") == "+1123456"
    assert normalize_phone("1" * 16, country_code="1") is None
