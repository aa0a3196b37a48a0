from __future__ import annotations

from pydantic import BaseModel, Field
from packages.shared.schemas.location import LocationOption
from packages.shared.schemas.submission import PaymentMode


class LocationSearchRequest(BaseModel):
    term: str = ""


class LocationSelectRequest(BaseModel):
    value: str = Field(..., min_length=1)


class LocationSlotView(BaseModel):
    slot: str
    state: str
    term: str
    enabled: bool
    options: list[LocationOption]
    selected: LocationOption | None = None


class VariantInput(BaseModel):
    id: str
    title: str
    image: str | None = None


class ProductAddRequest(BaseModel):
    product_id: str
    title: str
    variants: list[VariantInput] = Field(..., min_length=1)


class ProductListRequest(BaseModel):
    products: list[ProductAddRequest]


class ProductUpdateRequest(BaseModel):
    variant_id: str | None = None
    quantity: int | None = Field(default=None, ge=1)


class ProductSelectionView(BaseModel):
    product_id: str
    title: str
    variants: list[VariantInput]
    chosen_variant_id: str
    quantity: int


class CustomerUpdateRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    payment_mode: PaymentMode | None = None


class FormView(BaseModel):
    form_id: str
    first_name: str
    last_name: str
    phone: str
    payment_mode: PaymentMode
    city: LocationSlotView
    warehouse: LocationSlotView
    products: list[ProductSelectionView]
