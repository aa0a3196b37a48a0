from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from packages.shared.schemas.location import LocationOption
from packages.shared.schemas.submission import PaymentMode


class OrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant_id: str
    # Not constrained here: the orchestrator reports bad quantities with the other fields.
    quantity: int

    def to_draft_line(self) -> dict[str, object]:
        return {"variantId": self.variant_id, "quantity": self.quantity}


class OrderDraftRequest(BaseModel):
    """Everything one submission needs, assembled once at submit time."""

    model_config = ConfigDict(frozen=True)

    first_name: str = ""
    last_name: str = ""
    phone: str = ""

    city: LocationOption | None = None
    warehouse: LocationOption | None = None

    lines: tuple[OrderLine, ...] = ()
    payment_mode: PaymentMode = PaymentMode.PAID_IN_FULL

    tags: tuple[str, ...] = ()
    note: str | None = None

    @property
    def is_cod(self) -> bool:
        return self.payment_mode is PaymentMode.CASH_ON_DELIVERY
