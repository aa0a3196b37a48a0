"""Customer resolution: one customer record per normalized phone number."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from services.api.app.services.commerce_base import CommerceAdapterError, CommercePlatform
from services.api.app.services.submission_errors import CustomerError

logger = logging.getLogger("orderdesk")

DEFAULT_COUNTRY_CODE = "380"
TRUNK_PREFIX = "0"
# Subscriber number length after the country code. Other codes only get the E.164 cap.
SUBSCRIBER_DIGITS = {"380": 9, "48": 9}
MAX_E164_DIGITS = 15

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True, slots=True)
class CustomerKey:
    first_name: str
    last_name: str
    phone_normalized: str


def normalize_phone(raw: str | None, *, country_code: str = DEFAULT_COUNTRY_CODE) -> str | None:
    """Return ``+<country code><subscriber>``, or ``None`` when the number is malformed.

    ``050 123-45-67``, ``+38 (050) 123 45 67`` and ``380501234567`` all become
    ``+380501234567``. Normalizing a normalized number is a no-op.
    A number with the wrong subscriber length for a known country code (``0``, ``+38``)
    is malformed.
    """

    digits = _NON_DIGITS.sub("", raw or "")
    if not digits:
        return None

    if not digits.startswith(country_code):
        digits = country_code + digits.removeprefix(TRUNK_PREFIX)

    subscriber = digits[len(country_code):]
    expected = SUBSCRIBER_DIGITS.get(country_code)
    if expected is not None and len(subscriber) != expected:
        return None
    if not subscriber or len(digits) > MAX_E164_DIGITS:
        return None
    return f"+{digits}"


def resolve_customer(
    platform: CommercePlatform,
    first_name: str,
    last_name: str,
    raw_phone: str,
    *,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> str:
    phone = normalize_phone(raw_phone, country_code=country_code)
    if phone is None:
        raise CustomerError(f"{raw_phone!r} is not a valid phone number")

    key = CustomerKey(first_name=first_name, last_name=last_name, phone_normalized=phone)

    try:
        found = platform.find_customer_by_phone(key.phone_normalized)
    except CommerceAdapterError as e:
        raise CustomerError(f"Customer lookup failed: {e}") from e

    if found:
        logger.info("customer %s matched by phone %s", found, key.phone_normalized)
        return found

    try:
        created = platform.create_customer(
            first_name=key.first_name,
            last_name=key.last_name,
            phone=key.phone_normalized,
        )
    except CommerceAdapterError as create_error:
        # Lookup-then-create is not atomic. A concurrent submission may have created the
        # same phone in between; the platform's uniqueness check rejects ours.
        try:
            found = platform.find_customer_by_phone(key.phone_normalized)
        except CommerceAdapterError:
            found = None
        if found:
            logger.info(
                "customer create for %s rejected (%s); using %s",
                key.phone_normalized,
                create_error,
                found,
            )
            return found
        raise CustomerError(str(create_error)) from create_error

    logger.info("customer %s created for phone %s", created, key.phone_normalized)
    return created
