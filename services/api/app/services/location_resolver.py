"""Cascading city -> warehouse resolver behind the delivery pickers.

Each slot is ``unselected``, ``searching`` (candidates shown, nothing chosen yet) or
``selected``. A warehouse reference is only meaningful inside the city it was returned
for, so any change to the city slot resets the warehouse slot.

Searches are sequenced per slot: :meth:`CascadingLocationResolver.begin_search` hands
out a ticket and :meth:`CascadingLocationResolver.complete_search` drops results whose
ticket is no longer the newest for that slot.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum

from packages.shared.schemas.location import LocationOption
from services.api.app.services.carrier_base import (
    CarrierAdapterError,
    CarrierDirectory,
    is_searchable,
)

logger = logging.getLogger("orderdesk")


class Slot(str, Enum):
    CITY = "city"
    WAREHOUSE = "warehouse"


class SlotState(str, Enum):
    UNSELECTED = "unselected"
    SEARCHING = "searching"
    SELECTED = "selected"


class SlotUnavailableError(Exception):
    """The warehouse slot was used before a city was selected."""


class UnknownOptionError(Exception):
    def __init__(self, slot: Slot, value: str) -> None:
        super().__init__(f"{value!r} is not among the current {slot.value} candidates")
        self.slot = slot
        self.value = value


@dataclass(frozen=True, slots=True)
class SearchTicket:
    slot: Slot
    seq: int
    term: str
    city_ref: str | None = None


@dataclass(slots=True)
class _SlotData:
    state: SlotState = SlotState.UNSELECTED
    term: str = ""
    options: list[LocationOption] = field(default_factory=list)
    selected: LocationOption | None = None
    issued_seq: int = 0

    def reset(self) -> None:
        self.state = SlotState.UNSELECTED
        self.term = ""
        self.options = []
        self.selected = None
        # Bumping the counter orphans any search still in flight for this slot.
        self.issued_seq += 1


@dataclass(frozen=True, slots=True)
class SlotView:
    state: SlotState
    term: str
    options: list[LocationOption]
    selected: LocationOption | None


class CascadingLocationResolver:
    def __init__(self, directory: CarrierDirectory) -> None:
        self._directory = directory
        self._lock = threading.Lock()
        self._slots = {Slot.CITY: _SlotData(), Slot.WAREHOUSE: _SlotData()}

    def view(self, slot: Slot) -> SlotView:
        with self._lock:
            data = self._slots[slot]
            return SlotView(
                state=data.state,
                term=data.term,
                options=list(data.options),
                selected=data.selected,
            )

    def warehouse_enabled(self) -> bool:
        with self._lock:
            return self._city_ref() is not None

    def selection(self) -> tuple[LocationOption | None, LocationOption | None]:
        with self._lock:
            return self._slots[Slot.CITY].selected, self._slots[Slot.WAREHOUSE].selected

    def begin_search(self, slot: Slot, term: str) -> SearchTicket | None:
        """Record an input change; return a ticket when the directory should be queried.

        ``None`` means there is nothing to ask the carrier for: the input was cleared or
        is shorter than the minimum search length.
        """

        with self._lock:
            city_ref: str | None = None
            if slot is Slot.WAREHOUSE:
                city_ref = self._city_ref()
                if city_ref is None:
                    raise SlotUnavailableError("Select a city before searching warehouses")
            else:
                self._slots[Slot.WAREHOUSE].reset()

            data = self._slots[slot]
            data.issued_seq += 1
            data.term = term
            data.selected = None
            data.options = []

            if not is_searchable(term):
                data.state = SlotState.UNSELECTED
                return None

            data.state = SlotState.SEARCHING
            return SearchTicket(slot=slot, seq=data.issued_seq, term=term, city_ref=city_ref)

    def complete_search(self, ticket: SearchTicket, options: list[LocationOption]) -> bool:
        """Apply results for ``ticket``; return False when a newer search superseded it."""

        with self._lock:
            data = self._slots[ticket.slot]
            if ticket.seq != data.issued_seq:
                logger.debug(
                    "discarding stale %s results seq=%d latest=%d",
                    ticket.slot.value,
                    ticket.seq,
                    data.issued_seq,
                )
                return False

            data.options = list(options)
            return True

    def search(self, slot: Slot, term: str) -> SlotView:
        ticket = self.begin_search(slot, term)
        if ticket is not None:
            self.complete_search(ticket, self._fetch(ticket))
        return self.view(slot)

    def select(self, slot: Slot, value: str) -> LocationOption:
        with self._lock:
            if slot is Slot.WAREHOUSE and self._city_ref() is None:
                raise SlotUnavailableError("Select a city before choosing a warehouse")

            data = self._slots[slot]
            option = next((o for o in data.options if o.value == value), None)
            if option is None:
                raise UnknownOptionError(slot, value)

            data.state = SlotState.SELECTED
            data.selected = option
            data.term = option.label

            if slot is Slot.CITY:
                self._slots[Slot.WAREHOUSE].reset()
            return option

    def clear(self, slot: Slot) -> None:
        with self._lock:
            self._slots[slot].reset()
            if slot is Slot.CITY:
                self._slots[Slot.WAREHOUSE].reset()

    def _fetch(self, ticket: SearchTicket) -> list[LocationOption]:
        try:
            if ticket.slot is Slot.CITY:
                return self._directory.search_cities(ticket.term)
            return self._directory.search_warehouses(ticket.term, ticket.city_ref)
        except CarrierAdapterError as e:
            logger.warning("%s search for %r failed: %s", ticket.slot.value, ticket.term, e)
            return []

    def _city_ref(self) -> str | None:
        city = self._slots[Slot.CITY]
        if city.state is SlotState.SELECTED and city.selected is not None:
            return city.selected.value
        return None
