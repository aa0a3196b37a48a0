from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING

from services.api.app.services.carrier_base import CarrierDirectory
from services.api.app.services.carrier_mock import MockCarrierDirectory

if TYPE_CHECKING:
    from services.api.app.services.nova_poshta import NovaPoshtaConfig, NovaPoshtaDirectory

logger = logging.getLogger("orderdesk")

# One HTTP-backed directory per distinct config, shared across requests until shutdown.
_lock = threading.Lock()
_directories: dict[NovaPoshtaConfig, NovaPoshtaDirectory] = {}


def get_carrier_directory() -> CarrierDirectory:
    """Select a carrier directory based on env vars.

    Defaults to the mock directory so tests and local dev do not hit Nova Poshta unless
    explicitly configured otherwise. The real client keeps a connection pool, so it is
    built once per configuration and reused.
    """

    mode = os.getenv("ORDERDESK_CARRIER_ADAPTER", "mock").strip().lower()

    if mode == "mock":
        return MockCarrierDirectory()

    if mode == "novaposhta":
        from services.api.app.services.nova_poshta import NovaPoshtaConfig, NovaPoshtaDirectory

        cfg = NovaPoshtaConfig.from_env()
        with _lock:
            directory = _directories.get(cfg)
            if directory is None:
                directory = NovaPoshtaDirectory.from_config(cfg)
                _directories[cfg] = directory
            return directory

    raise ValueError(
        f"Unknown ORDERDESK_CARRIER_ADAPTER={mode!r}. Expected mock or novaposhta."
    )


def close_carrier_directories() -> None:
    with _lock:
        directories = list(_directories.values())
        _directories.clear()

    for directory in directories:
        logger.info("closing %s directory", directory.vendor)
        directory.close()
