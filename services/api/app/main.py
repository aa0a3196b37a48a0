"""OrderDesk API service entrypoint."""

import logging

from fastapi import FastAPI
from services.api.app.routers.forms import router as forms_router
from services.api.app.routers.locations import router as locations_router
from services.api.app.routers.order import router as order_router
from services.api.app.routers.products import router as products_router
from services.api.app.services.carrier_factory import close_carrier_directories
from services.api.app.services.commerce_factory import close_commerce_platforms

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="OrderDesk API")

app.include_router(locations_router)
app.include_router(products_router)
app.include_router(order_router)
app.include_router(forms_router)


@app.on_event("shutdown")
def _shutdown() -> None:
    close_carrier_directories()
    close_commerce_platforms()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
