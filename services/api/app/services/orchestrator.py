"""Order submission: validated form -> customer -> draft order -> order -> COD deposit.

The platform calls run as one linear chain with no retries and no compensation. A failed
finalize leaves the draft in the platform; it is logged with its id and left for the
operator.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from packages.shared.schemas.location import LocationOption
from packages.shared.schemas.submission import SubmissionResult, SubmissionStep
from services.api.app.config import OrderSettings
from services.api.app.models.order import OrderDraftRequest
from services.api.app.services.commerce_base import CommerceAdapterError, CommercePlatform
from services.api.app.services.customers import normalize_phone, resolve_customer
from services.api.app.services.submission_errors import (
    AnnotationError,
    DraftError,
    FinalizeError,
    SubmissionError,
    SubmissionValidationError,
)

logger = logging.getLogger("orderdesk")

COD_TAG = "COD"
CITY_REF_ATTRIBUTE = "NP-cityRef"
WAREHOUSE_REF_ATTRIBUTE = "NP-warehouseRef"
COD_ATTRIBUTE = "COD"
PAID_IN_FULL_NOTE = "Оплачено повністю"
DEPOSIT_NAMESPACE = "cod"
DEPOSIT_KEY = "deposit_amount"


def validate_request(request: OrderDraftRequest, *, country_code: str) -> None:
    """Raise one :class:`SubmissionValidationError` naming every missing field."""

    missing: list[str] = []
    if not request.first_name.strip():
        missing.append("first")
    if not request.last_name.strip():
        missing.append("last")
    if normalize_phone(request.phone, country_code=country_code) is None:
        missing.append("phone")
    if request.city is None or not request.city.value.strip():
        missing.append("cityRef")
    if request.warehouse is None or not request.warehouse.value.strip():
        missing.append("warehouseRef")
    if not request.lines:
        missing.append("variantId")
    elif any(line.quantity < 1 for line in request.lines):
        missing.append("qty")

    if missing:
        raise SubmissionValidationError(missing)


def safe_postal_code(*candidates: str | None, fallback: str) -> str:
    """First five-digit code among ``candidates``; the platform always gets one."""

    for raw in candidates:
        code = (raw or "").strip()
        if len(code) == 5 and code.isdigit():
            return code
    return fallback


def cod_note(settings: OrderSettings) -> str:
    return f"Накладений платіж / Cash-on-Delivery ({settings.deposit_display} ₴ передплата)"


def build_draft_input(
    request: OrderDraftRequest,
    customer_id: str,
    settings: OrderSettings,
) -> dict[str, Any]:
    city: LocationOption = request.city  # type: ignore[assignment]
    warehouse: LocationOption = request.warehouse  # type: ignore[assignment]
    phone = normalize_phone(request.phone, country_code=settings.phone_country_code)

    tags: list[str] = [COD_TAG] if request.is_cod else []
    for tag in request.tags:
        if tag and tag not in tags:
            tags.append(tag)

    note = request.note or (cod_note(settings) if request.is_cod else PAID_IN_FULL_NOTE)

    return {
        "lineItems": [line.to_draft_line() for line in request.lines],
        "purchasingEntity": {"customerId": customer_id},
        "phone": phone,
        "shippingAddress": {
            "firstName": request.first_name.strip(),
            "lastName": request.last_name.strip(),
            "phone": phone,
            "city": city.label,
            "address1": f"{settings.carrier_display_name} – {warehouse.label}",
            "zip": safe_postal_code(
                warehouse.postal_code,
                city.postal_code,
                fallback=settings.fallback_postal_code,
            ),
        },
        "tags": tags,
        "note": note,
        # Carrier refs and the COD flag stay queryable on the order.
        "customAttributes": [
            {"key": CITY_REF_ATTRIBUTE, "value": city.value},
            {"key": WAREHOUSE_REF_ATTRIBUTE, "value": warehouse.value},
            {"key": COD_ATTRIBUTE, "value": "true" if request.is_cod else "false"},
        ],
    }


class OrderSubmissionOrchestrator:
    def __init__(self, platform: CommercePlatform, settings: OrderSettings | None = None) -> None:
        self._platform = platform
        self._settings = settings or OrderSettings.from_env()

    @property
    def settings(self) -> OrderSettings:
        return self._settings

    def submit(self, request: OrderDraftRequest) -> SubmissionResult:
        submission_id = uuid4().hex[:12]

        try:
            validate_request(request, country_code=self._settings.phone_country_code)
        except SubmissionValidationError as e:
            logger.info("submission %s rejected: %s", submission_id, e)
            return SubmissionResult.failure(e.step, str(e), missing_fields=e.missing_fields)

        step = SubmissionStep.CUSTOMER
        customer_id: str | None = None
        draft_id: str | None = None
        try:
            customer_id = resolve_customer(
                self._platform,
                request.first_name.strip(),
                request.last_name.strip(),
                request.phone,
                country_code=self._settings.phone_country_code,
            )
            step = SubmissionStep.DRAFT
            draft_id = self._create_draft(request, customer_id)
            step = SubmissionStep.FINALIZE
            order_id = self._finalize(draft_id, payment_pending=request.is_cod)
        except SubmissionError as e:
            logger.error("submission %s failed at %s: %s", submission_id, e.step.value, e)
            return SubmissionResult.failure(
                e.step,
                str(e),
                draft_id=draft_id,
                customer_id=customer_id,
            )
        except Exception as e:
            logger.exception("submission %s crashed at %s", submission_id, step.value)
            return SubmissionResult.failure(
                step,
                f"Unexpected error: {e}",
                draft_id=draft_id,
                customer_id=customer_id,
            )

        warnings: list[str] = []
        if request.is_cod:
            try:
                self._annotate_deposit(order_id)
            except AnnotationError as e:
                logger.warning(
                    "submission %s: deposit annotation on %s failed: %s",
                    submission_id,
                    order_id,
                    e,
                )
                warnings.append(str(e))
            except Exception as e:
                # The order exists by now, so the submission still succeeds.
                logger.warning(
                    "submission %s: deposit annotation on %s crashed",
                    submission_id,
                    order_id,
                    exc_info=True,
                )
                warnings.append(f"Deposit annotation failed: {e}")

        logger.info(
            "submission %s created order %s (draft %s, customer %s, cod=%s)",
            submission_id,
            order_id,
            draft_id,
            customer_id,
            request.is_cod,
        )
        return SubmissionResult.success(
            order_id=order_id,
            draft_id=draft_id,
            customer_id=customer_id,
            warnings=warnings,
        )

    def _create_draft(self, request: OrderDraftRequest, customer_id: str) -> str:
        draft_input = build_draft_input(request, customer_id, self._settings)
        try:
            return self._platform.create_draft_order(draft_input)
        except CommerceAdapterError as e:
            raise DraftError(f"Draft order rejected: {e}") from e

    def _finalize(self, draft_id: str, *, payment_pending: bool) -> str:
        try:
            completed = self._platform.complete_draft_order(draft_id, payment_pending=payment_pending)
        except CommerceAdapterError as e:
            logger.warning("draft %s left uncompleted", draft_id)
            raise FinalizeError(f"Draft order completion failed: {e}", draft_id=draft_id) from e

        if not completed.order_id:
            logger.warning("draft %s completed without an order id", draft_id)
            raise FinalizeError(
                "Draft order completion returned no order", draft_id=draft_id
            )
        return completed.order_id

    def _annotate_deposit(self, order_id: str) -> None:
        metafield = {
            "ownerId": order_id,
            "namespace": DEPOSIT_NAMESPACE,
            "key": DEPOSIT_KEY,
            "type": "single_line_text_field",
            "value": self._settings.deposit_metafield_value,
        }
        try:
            self._platform.set_metafields([metafield])
        except CommerceAdapterError as e:
            raise AnnotationError(f"Deposit annotation failed: {e}") from e

