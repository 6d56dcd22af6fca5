"""Runtime capacity state per instrument."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from strategy_capacity.core.domain.types import FillEvent
    from strategy_capacity.core.ports.liquidity_tracker import LiquidityTracker
    from strategy_capacity.core.ports.portfolio import SecurityView


# eq=False keeps identity hashing so states can live in a MonitoredSet.
@dataclass(slots=True, eq=False)
class InstrumentCapacityState:
    """One liquidity tracker plus the instrument's live security view.

    Owned exclusively by the CapacityAggregator.
    """

    instrument: str
    tracker: LiquidityTracker
    security: SecurityView

    def on_fill_event(self, event: FillEvent) -> None:
        self.tracker.on_fill_event(event)

    @property
    def is_delisted(self) -> bool:
        return self.security.is_delisted

    @property
    def invested(self) -> bool:
        return self.security.invested

    @property
    def last_fill_time(self) -> datetime | None:
        return self.tracker.last_fill_time
