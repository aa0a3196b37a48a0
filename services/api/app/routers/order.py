from __future__ import annotations

from fastapi import APIRouter, Form, HTTPException
from fastapi.responses import JSONResponse, RedirectResponse, Response
from packages.shared.schemas.location import LocationOption
from packages.shared.schemas.submission import PaymentMode, SubmissionResult, SubmissionStep
from services.api.app.config import OrderSettings
from services.api.app.models.order import OrderDraftRequest
from services.api.app.services.commerce_base import CommerceConfigError
from services.api.app.services.commerce_factory import get_commerce_platform
from services.api.app.services.orchestrator import OrderSubmissionOrchestrator
from services.api.app.services.order_lines import lines_from_form_pairs

router = APIRouter()


def submission_status(result: SubmissionResult) -> int:
    if result.ok:
        return 200
    if result.failed_step is SubmissionStep.VALIDATE:
        return 400
    return 502


def build_orchestrator() -> OrderSubmissionOrchestrator:
    return OrderSubmissionOrchestrator(get_commerce_platform(), OrderSettings.from_env())


def config_error_status(error: Exception) -> int:
    return 503 if isinstance(error, CommerceConfigError) else 500


def get_orchestrator() -> OrderSubmissionOrchestrator:
    try:
        return build_orchestrator()
    except (CommerceConfigError, ValueError) as e:
        raise HTTPException(status_code=config_error_status(e), detail=str(e)) from e


def _location(ref: str, label: str, postal_code: str | None = None) -> LocationOption | None:
    ref = ref.strip()
    if not ref:
        return None
    return LocationOption(label=label.strip() or ref, value=ref, postal_code=postal_code or None)


@router.post("/app/orders/create")
def create_order(
    first: str = Form(""),
    last: str = Form(""),
    phone: str = Form(""),
    city_ref: str = Form("", alias="cityRef"),
    city_name: str = Form("", alias="cityName"),
    warehouse_ref: str = Form("", alias="warehouseRef"),
    warehouse_name: str = Form("", alias="warehouseName"),
    postal_code: str = Form("", alias="postalCode"),
    cod: str = Form(""),
    variant_ids: list[str] = Form([], alias="variantId"),
    quantities: list[str] = Form([], alias="qty"),
) -> Response:
    request = OrderDraftRequest(
        first_name=first,
        last_name=last,
        phone=phone,
        city=_location(city_ref, city_name, postal_code),
        warehouse=_location(warehouse_ref, warehouse_name),
        lines=lines_from_form_pairs(variant_ids, quantities),
        payment_mode=PaymentMode.CASH_ON_DELIVERY if cod == "1" else PaymentMode.PAID_IN_FULL,
    )

    try:
        orchestrator = build_orchestrator()
    except (CommerceConfigError, ValueError) as e:
        return JSONResponse({"error": str(e), "step": None}, status_code=config_error_status(e))

    result = orchestrator.submit(request)

    if result.ok:
        return RedirectResponse(orchestrator.settings.orders_redirect, status_code=303)

    return JSONResponse(
        {"error": result.error, "step": result.failed_step.value if result.failed_step else None},
        status_code=submission_status(result),
    )
