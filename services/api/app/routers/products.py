from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response
from services.api.app.models.product import ProductSearchResponse
from services.api.app.services.commerce_base import CommerceConfigError
from services.api.app.services.commerce_factory import get_commerce_platform
from services.api.app.services.products import search_products

router = APIRouter()


@router.get("/app/products/search", response_model=ProductSearchResponse)
def product_search(response: Response, q: str = "") -> ProductSearchResponse:
    response.headers["Cache-Control"] = "no-store"

    try:
        platform = get_commerce_platform()
    except CommerceConfigError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return search_products(platform, q)
