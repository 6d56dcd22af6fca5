"""Liquidity tracker protocol.

A liquidity tracker turns the fills of one instrument into an estimate of
the market dollar volume the strategy could have consumed. How the estimate
is modelled may vary by asset class; the aggregator only depends on the
narrow capability surface below.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from strategy_capacity.core.domain.types import FillEvent
    from strategy_capacity.core.ports.portfolio import SecurityView


class LiquidityTracker(Protocol):
    """Per-instrument liquidity accumulator."""

    @property
    def market_dollar_volume_estimate(self) -> Decimal:
        """Accumulated market dollar volume for the current window."""

    @property
    def trade_count(self) -> int:
        """Number of independent trade occurrences in the current window."""

    @property
    def sale_volume(self) -> Decimal:
        """Traded value of the strategy's own fills in the current window."""

    @property
    def last_fill_time(self) -> datetime | None:
        """Time of the most recent fill. Survives reset()."""

    def on_fill_event(self, event: FillEvent) -> None:
        """Accumulate a fill."""

    def try_close_window(self) -> bool:
        """Advance the measurement; return True once it needs no more per-step checks."""

    def reset(self) -> None:
        """Start a new window with zero estimate, trade count and sale volume."""


LiquidityTrackerFactory = Callable[[str, "SecurityView"], LiquidityTracker]
