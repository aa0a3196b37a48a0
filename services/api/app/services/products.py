from __future__ import annotations

import logging

from services.api.app.models.product import ProductSearchResponse, ProductSummary, VariantSummary
from services.api.app.services.commerce_base import (
    CommerceAdapterError,
    CommercePlatform,
    ProductRecord,
    ProductVariantRecord,
)

logger = logging.getLogger("orderdesk")

DEFAULT_VARIANT_TITLE = "Default Title"
PLACEHOLDER_IMAGE = (
    "https://cdn.shopify.com/s/files/1/0533/2089/files/placeholder-images-image_large.png"
)


def search_products(platform: CommercePlatform, query: str) -> ProductSearchResponse:
    query = query.strip()
    if not query:
        return ProductSearchResponse(products=[])

    try:
        records = platform.search_products(query)
    except CommerceAdapterError as e:
        logger.warning("product search for %r failed: %s", query, e)
        return ProductSearchResponse(products=[])

    return ProductSearchResponse(products=[_summarize(record) for record in records])


def variant_display_title(variant: ProductVariantRecord) -> str:
    """``Default Title`` says nothing to an operator; show the option values instead."""

    if variant.title != DEFAULT_VARIANT_TITLE:
        return variant.title

    from_options = " / ".join(
        str(o.get("value"))
        for o in variant.selected_options
        if o.get("name") != "Title" and o.get("value")
    )
    return from_options or variant.title


def _summarize(record: ProductRecord) -> ProductSummary:
    return ProductSummary(
        id=record.id,
        title=record.title,
        variants=[
            VariantSummary(
                id=v.id,
                title=variant_display_title(v),
                image=v.image_url or record.featured_image_url or PLACEHOLDER_IMAGE,
                options=list(v.selected_options),
            )
            for v in record.variants
        ],
    )
