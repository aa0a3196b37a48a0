from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


@dataclass(frozen=True, slots=True)
class OrderSettings:
    """Order-shaping knobs that are fixed per deployment.

    Env vars:
    - ORDERDESK_COD_DEPOSIT (default: 300.00)
    - ORDERDESK_CURRENCY (default: UAH)
    - ORDERDESK_PHONE_COUNTRY_CODE (default: 380)
    - ORDERDESK_FALLBACK_POSTAL_CODE (default: 01001, Kyiv central post office)
    - ORDERDESK_CARRIER_DISPLAY_NAME (default: Нова Пошта)
    - ORDERDESK_ORDERS_REDIRECT (default: /app/orders)
    """

    cod_deposit: Decimal = Decimal("300.00")
    currency: str = "UAH"
    phone_country_code: str = "380"
    fallback_postal_code: str = "01001"
    carrier_display_name: str = "Нова Пошта"
    orders_redirect: str = "/app/orders"

    @classmethod
    def from_env(cls) -> "OrderSettings":
        defaults = cls()

        raw_deposit = os.getenv("ORDERDESK_COD_DEPOSIT", "").strip()
        cod_deposit = defaults.cod_deposit
        if raw_deposit:
            try:
                cod_deposit = Decimal(raw_deposit)
            except InvalidOperation as e:
                raise ValueError(f"Invalid ORDERDESK_COD_DEPOSIT={raw_deposit!r}") from e

        country_code = "".join(
            ch for ch in os.getenv("ORDERDESK_PHONE_COUNTRY_CODE", "") if ch.isdigit()
        )

        return cls(
            cod_deposit=cod_deposit.quantize(Decimal("0.01")),
            currency=_env_str("ORDERDESK_CURRENCY", defaults.currency),
            phone_country_code=country_code or defaults.phone_country_code,
            fallback_postal_code=_env_str(
                "ORDERDESK_FALLBACK_POSTAL_CODE", defaults.fallback_postal_code
            ),
            carrier_display_name=_env_str(
                "ORDERDESK_CARRIER_DISPLAY_NAME", defaults.carrier_display_name
            ),
            orders_redirect=_env_str("ORDERDESK_ORDERS_REDIRECT", defaults.orders_redirect),
        )

    @property
    def deposit_display(self) -> str:
        """Whole amounts render without decimals, e.g. ``300``."""

        if self.cod_deposit == self.cod_deposit.to_integral_value():
            return str(self.cod_deposit.to_integral_value())
        return str(self.cod_deposit)

    @property
    def deposit_metafield_value(self) -> str:
        return f"{self.cod_deposit:.2f} {self.currency}"


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"Invalid {name}={raw!r}; expected a number of seconds") from e
