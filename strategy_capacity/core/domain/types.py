"""Core shared data models and schemas.

This module defines the canonical Pydantic models consumed by the capacity
layer: executions (FillEvent) and the market bars used to size liquidity.
These types are treated as schema definitions (see ``core/schemas``) and
intentionally prioritize structural clarity over minimal class size.

All monetary values are ``Decimal``.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from strategy_capacity.core.domain.order_status import OrderStatus, is_fill_status

Side = Literal["buy", "sell"]
Resolution = Literal["tick", "second", "minute", "hour", "daily"]


def as_utc(value: datetime) -> datetime:
    """Interpret naive timestamps as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Common models
# ---------------------------------------------------------------------------


class Price(BaseModel):
    currency: str = Field(..., min_length=1)
    value: Decimal = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


class Quantity(BaseModel):
    value: Decimal
    unit: str = Field(..., min_length=1)  # e.g. "shares", "contracts", "BTC"

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------


class Bar(BaseModel):
    """Aggregated trade bar for one instrument."""

    utc_time: datetime = Field(..., description="Bar end time (UTC).")

    open: Decimal = Field(..., ge=0)
    high: Decimal = Field(..., ge=0)
    low: Decimal = Field(..., ge=0)
    close: Decimal = Field(..., ge=0)
    volume: Decimal = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("utc_time")
    @classmethod
    def normalize_utc_time(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def dollar_volume(self) -> Decimal:
        """Traded value of the bar in quote currency."""
        return self.close * self.volume


# ---------------------------------------------------------------------------
# FillEvent model (delta event)
# ---------------------------------------------------------------------------


class FillEvent(BaseModel):
    """
    A single execution report.

    Notes:
    - fill_qty is the quantity filled by this event (not cumulative); its sign
      is ignored by the capacity layer.
    - Events whose status is not an execution are accepted by the model but
      ignored by the aggregator.
    """

    utc_time: datetime = Field(
        ...,
        description="Execution time. Naive values are interpreted as UTC.",
    )
    instrument: str = Field(
        ...,
        min_length=1,
        description="Instrument identifier (e.g., symbol, asset code).",
    )
    client_order_id: str = Field(..., min_length=1)

    status: OrderStatus
    side: Side

    fill_price: Price
    fill_qty: Quantity

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("utc_time")
    @classmethod
    def normalize_utc_time(cls, value: datetime) -> datetime:
        return as_utc(value)

    def is_fill(self) -> bool:
        return is_fill_status(self.status)

    @property
    def absolute_fill_quantity(self) -> Decimal:
        return abs(self.fill_qty.value)

    @property
    def fill_value(self) -> Decimal:
        """Unsigned traded value in quote currency, before contract multipliers."""
        return self.fill_price.value * self.absolute_fill_quantity
