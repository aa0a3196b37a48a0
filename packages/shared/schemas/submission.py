"""Shared submission result schema (v1).

The create-order form and the form-session API both report outcomes with this payload.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SubmissionStep(str, Enum):
    VALIDATE = "validate"
    CUSTOMER = "customer"
    DRAFT = "draft"
    FINALIZE = "finalize"
    ANNOTATE = "annotate"


class PaymentMode(str, Enum):
    PAID_IN_FULL = "paid-in-full"
    CASH_ON_DELIVERY = "cash-on-delivery"


class SubmissionResult(BaseModel):
    ok: bool

    order_id: str | None = None
    draft_id: str | None = None
    customer_id: str | None = None

    failed_step: SubmissionStep | None = None
    error: str | None = None
    missing_fields: list[str] = Field(default_factory=list)

    # Non-fatal problems, e.g. a deposit annotation that could not be written.
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def success(
        cls,
        *,
        order_id: str,
        draft_id: str,
        customer_id: str,
        warnings: list[str] | None = None,
    ) -> "SubmissionResult":
        return cls(
            ok=True,
            order_id=order_id,
            draft_id=draft_id,
            customer_id=customer_id,
            warnings=warnings or [],
        )

    @classmethod
    def failure(
        cls,
        step: SubmissionStep,
        error: str,
        *,
        missing_fields: list[str] | None = None,
        draft_id: str | None = None,
        customer_id: str | None = None,
    ) -> "SubmissionResult":
        return cls(
            ok=False,
            failed_step=step,
            error=error,
            missing_fields=missing_fields or [],
            draft_id=draft_id,
            customer_id=customer_id,
        )
