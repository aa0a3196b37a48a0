from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from packages.shared.schemas.submission import PaymentMode
from services.api.app.config import env_float
from services.api.app.models.order import OrderDraftRequest
from services.api.app.services.carrier_base import CarrierDirectory
from services.api.app.services.location_resolver import CascadingLocationResolver
from services.api.app.services.order_lines import OrderLineAggregator

logger = logging.getLogger("orderdesk")

DEFAULT_IDLE_TTL_S = 4 * 60 * 60.0


@dataclass
class FormSession:
    """One operator's in-progress order form.

    Each field slot is owned independently; :meth:`to_request` reads them once, at
    submit time.
    """

    form_id: str
    locations: CascadingLocationResolver
    lines: OrderLineAggregator = field(default_factory=OrderLineAggregator)
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    payment_mode: PaymentMode = PaymentMode.PAID_IN_FULL

    def to_request(self) -> OrderDraftRequest:
        city, warehouse = self.locations.selection()
        return OrderDraftRequest(
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            city=city,
            warehouse=warehouse,
            lines=self.lines.lines(),
            payment_mode=self.payment_mode,
        )


class InMemoryFormStore:
    """Form sessions keyed by id.

    A session untouched for ``idle_ttl_s`` seconds is dropped the next time the store is
    used, so abandoned forms do not pile up.
    """

    def __init__(
        self,
        *,
        idle_ttl_s: float = DEFAULT_IDLE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.Lock()
        self._forms: dict[str, FormSession] = {}
        self._last_seen: dict[str, float] = {}
        self._idle_ttl_s = idle_ttl_s
        self._clock = clock

    def create(self, directory: CarrierDirectory) -> FormSession:
        session = FormSession(form_id=uuid4().hex, locations=CascadingLocationResolver(directory))
        with self._lock:
            now = self._clock()
            self._expire_idle(now)
            self._forms[session.form_id] = session
            self._last_seen[session.form_id] = now
        return session

    def get(self, form_id: str) -> FormSession | None:
        with self._lock:
            now = self._clock()
            self._expire_idle(now)
            session = self._forms.get(form_id)
            if session is not None:
                self._last_seen[form_id] = now
            return session

    def discard(self, form_id: str) -> bool:
        with self._lock:
            self._last_seen.pop(form_id, None)
            return self._forms.pop(form_id, None) is not None

    def _expire_idle(self, now: float) -> None:
        expired = [fid for fid, seen in self._last_seen.items() if now - seen > self._idle_ttl_s]
        for form_id in expired:
            del self._last_seen[form_id]
            del self._forms[form_id]
        if expired:
            logger.info("expired %d idle form session(s)", len(expired))


store = InMemoryFormStore(idle_ttl_s=env_float("ORDERDESK_FORM_IDLE_TTL_S", DEFAULT_IDLE_TTL_S))
