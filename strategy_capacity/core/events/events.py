"""
Domain event models.

These events represent immutable facts observed while measuring capacity.
They are consumed by loggers, recorders, and monitoring pipelines.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class CapacitySnapshotEvent:
    utc_time: datetime
    bottleneck: str

    sale_volume_share: Decimal
    buying_power_share: Decimal
    scaling_factor: Decimal

    daily_capacity: Decimal
    new_capacity: Decimal

    capacity: Decimal
    minimum_capacity: Decimal

    next_snapshot_date: datetime


@dataclass(frozen=True, slots=True)
class SettlementSkippedEvent:
    utc_time: datetime
    reason: str
    tracked_instruments: int


@dataclass(frozen=True, slots=True)
class InstrumentDelistedEvent:
    utc_time: datetime
    instrument: str
