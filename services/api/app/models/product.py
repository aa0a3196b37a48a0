from __future__ import annotations

from pydantic import BaseModel, Field


class VariantSummary(BaseModel):
    id: str
    title: str
    image: str
    options: list[dict[str, str]] = Field(default_factory=list)


class ProductSummary(BaseModel):
    id: str
    title: str
    variants: list[VariantSummary]


class ProductSearchResponse(BaseModel):
    products: list[ProductSummary]
