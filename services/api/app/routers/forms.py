from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from packages.shared.schemas.submission import SubmissionResult
from services.api.app.models.form import (
    CustomerUpdateRequest,
    FormView,
    LocationSearchRequest,
    LocationSelectRequest,
    LocationSlotView,
    ProductAddRequest,
    ProductListRequest,
    ProductSelectionView,
    ProductUpdateRequest,
    VariantInput,
)
from services.api.app.routers.locations import directory_or_http_error
from services.api.app.routers.order import get_orchestrator, submission_status
from services.api.app.services.location_resolver import (
    Slot,
    SlotUnavailableError,
    UnknownOptionError,
)
from services.api.app.services.order_lines import VariantOption
from services.api.app.services.store import FormSession, store

router = APIRouter()


@router.post("/v1/forms", response_model=FormView)
def create_form() -> FormView:
    directory = directory_or_http_error()
    return _form_view(store.create(directory))


@router.get("/v1/forms/{form_id}", response_model=FormView)
def get_form(form_id: str) -> FormView:
    return _form_view(_session(form_id))


@router.delete("/v1/forms/{form_id}", status_code=204)
def discard_form(form_id: str) -> None:
    if not store.discard(form_id):
        raise HTTPException(status_code=404, detail="Form not found")


@router.put("/v1/forms/{form_id}/customer", response_model=FormView)
def update_customer(form_id: str, payload: CustomerUpdateRequest) -> FormView:
    session = _session(form_id)
    if payload.first_name is not None:
        session.first_name = payload.first_name
    if payload.last_name is not None:
        session.last_name = payload.last_name
    if payload.phone is not None:
        session.phone = payload.phone
    if payload.payment_mode is not None:
        session.payment_mode = payload.payment_mode
    return _form_view(session)


@router.post("/v1/forms/{form_id}/locations/{slot}/search", response_model=LocationSlotView)
def search_location(form_id: str, slot: Slot, payload: LocationSearchRequest) -> LocationSlotView:
    session = _session(form_id)
    try:
        session.locations.search(slot, payload.term)
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return _slot_view(session, slot)


@router.post("/v1/forms/{form_id}/locations/{slot}/select", response_model=FormView)
def select_location(form_id: str, slot: Slot, payload: LocationSelectRequest) -> FormView:
    session = _session(form_id)
    try:
        session.locations.select(slot, payload.value)
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except UnknownOptionError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _form_view(session)


@router.delete("/v1/forms/{form_id}/locations/{slot}", response_model=FormView)
def clear_location(form_id: str, slot: Slot) -> FormView:
    session = _session(form_id)
    session.locations.clear(slot)
    return _form_view(session)


@router.post("/v1/forms/{form_id}/products", response_model=FormView)
def add_product(form_id: str, payload: ProductAddRequest) -> FormView:
    session = _session(form_id)
    session.lines.add(payload.product_id, payload.title, _variant_options(payload.variants))
    return _form_view(session)


@router.put("/v1/forms/{form_id}/products", response_model=FormView)
def replace_products(form_id: str, payload: ProductListRequest) -> FormView:
    """The picker sends its whole selection; products missing from it are dropped."""

    session = _session(form_id)
    session.lines.replace_all(
        (p.product_id, p.title, _variant_options(p.variants)) for p in payload.products
    )
    return _form_view(session)


@router.patch("/v1/forms/{form_id}/products/{product_id:path}", response_model=FormView)
def update_product(form_id: str, product_id: str, payload: ProductUpdateRequest) -> FormView:
    session = _session(form_id)
    try:
        if payload.variant_id is not None:
            session.lines.choose_variant(product_id, payload.variant_id)
        if payload.quantity is not None:
            session.lines.set_quantity(product_id, payload.quantity)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0])) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _form_view(session)


@router.delete("/v1/forms/{form_id}/products/{product_id:path}", response_model=FormView)
def remove_product(form_id: str, product_id: str) -> FormView:
    session = _session(form_id)
    try:
        session.lines.remove(product_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0])) from e
    return _form_view(session)


@router.post("/v1/forms/{form_id}/submit", response_model=SubmissionResult)
def submit_form(form_id: str) -> JSONResponse:
    session = _session(form_id)
    result = get_orchestrator().submit(session.to_request())
    if result.ok:
        store.discard(form_id)
    return JSONResponse(result.model_dump(mode="json"), status_code=submission_status(result))


def _variant_options(variants: list[VariantInput]) -> list[VariantOption]:
    return [VariantOption(variant_id=v.id, title=v.title, image=v.image) for v in variants]


def _session(form_id: str) -> FormSession:
    session = store.get(form_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return session


def _slot_view(session: FormSession, slot: Slot) -> LocationSlotView:
    view = session.locations.view(slot)
    enabled = slot is Slot.CITY or session.locations.warehouse_enabled()
    return LocationSlotView(
        slot=slot.value,
        state=view.state.value,
        term=view.term,
        enabled=enabled,
        options=view.options,
        selected=view.selected,
    )


def _form_view(session: FormSession) -> FormView:
    return FormView(
        form_id=session.form_id,
        first_name=session.first_name,
        last_name=session.last_name,
        phone=session.phone,
        payment_mode=session.payment_mode,
        city=_slot_view(session, Slot.CITY),
        warehouse=_slot_view(session, Slot.WAREHOUSE),
        products=[
            ProductSelectionView(
                product_id=s.product_id,
                title=s.title,
                variants=[
                    VariantInput(id=v.variant_id, title=v.title, image=v.image)
                    for v in s.variants
                ],
                chosen_variant_id=s.chosen_variant_id,
                quantity=s.quantity,
            )
            for s in session.lines.selections()
        ],
    )
