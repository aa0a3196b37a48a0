from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING

from services.api.app.services.commerce_base import CommercePlatform
from services.api.app.services.commerce_mock import mock_platform

if TYPE_CHECKING:
    from services.api.app.services.shopify_admin import ShopifyAdminPlatform, ShopifyConfig

logger = logging.getLogger("orderdesk")

# One HTTP-backed platform per distinct config, shared across requests until shutdown.
_lock = threading.Lock()
_platforms: dict[ShopifyConfig, ShopifyAdminPlatform] = {}


def get_commerce_platform() -> CommercePlatform:
    """Select the commerce platform based on env vars.

    Defaults to the process-wide in-memory mock so local dev and tests never create real
    orders unless explicitly configured otherwise.
    """

    mode = os.getenv("ORDERDESK_COMMERCE_ADAPTER", "mock").strip().lower()

    if mode == "mock":
        return mock_platform

    if mode == "shopify":
        from services.api.app.services.shopify_admin import ShopifyAdminPlatform, ShopifyConfig

        cfg = ShopifyConfig.from_env()
        with _lock:
            platform = _platforms.get(cfg)
            if platform is None:
                platform = ShopifyAdminPlatform.from_config(cfg)
                _platforms[cfg] = platform
            return platform

    raise ValueError(
        f"Unknown ORDERDESK_COMMERCE_ADAPTER={mode!r}. Expected mock or shopify."
    )


def close_commerce_platforms() -> None:
    with _lock:
        platforms = list(_platforms.values())
        _platforms.clear()

    for platform in platforms:
        logger.info("closing %s platform", platform.vendor)
        platform.close()
