from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from packages.shared.schemas.location import LocationOption
from services.api.app.services.carrier_base import (
    CarrierAdapterError,
    CarrierConfigError,
    CarrierDirectory,
)
from services.api.app.services.carrier_factory import get_carrier_directory

logger = logging.getLogger("orderdesk")

router = APIRouter()


def directory_or_http_error() -> CarrierDirectory:
    try:
        return get_carrier_directory()
    except CarrierConfigError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/api/novaposhta/cities", response_model=list[LocationOption])
def search_cities(q: str = "") -> list[LocationOption]:
    directory = directory_or_http_error()
    try:
        return directory.search_cities(q)
    except CarrierAdapterError as e:
        # An unreachable carrier reads as "no matches" in the picker.
        logger.warning("city search for %r failed: %s", q, e)
        return []


@router.get("/api/novaposhta/warehouses", response_model=list[LocationOption])
def search_warehouses(q: str = "", city: str = "") -> list[LocationOption]:
    if not city:
        return []

    directory = directory_or_http_error()
    try:
        return directory.search_warehouses(q, city)
    except CarrierAdapterError as e:
        logger.warning("warehouse search for %r in %s failed: %s", q, city, e)
        return []
