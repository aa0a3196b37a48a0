"""Shared location schema (v1).

A location option is what the cascading city/warehouse pickers render and what the
order submission carries downstream. ``value`` is an opaque carrier reference.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LocationOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str
    postal_code: str | None = None
