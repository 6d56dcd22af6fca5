"""In-memory host for replaying a run through the capacity layer.

Implements the clock, portfolio, security and market-data ports from
replayed step snapshots.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from strategy_capacity.backtest.replay.models import ReplayStep, SecurityStateModel
    from strategy_capacity.core.domain.types import Bar, Resolution


class ReplaySecurity:
    """Mutable SecurityView backed by the latest SecurityStateModel."""

    __slots__ = (
        "instrument",
        "is_delisted",
        "invested",
        "leverage",
        "contract_multiplier",
        "conversion_rate",
        "resolution",
        "_reserved_buying_power",
    )

    def __init__(self, instrument: str) -> None:
        self.instrument = instrument
        self.is_delisted = False
        self.invested = False
        self.leverage = Decimal(1)
        self.contract_multiplier = Decimal(1)
        self.conversion_rate = Decimal(1)
        self.resolution: Resolution = "minute"
        self._reserved_buying_power = Decimal(0)

    def update(self, state: SecurityStateModel) -> None:
        self.is_delisted = state.delisted
        self.invested = state.invested
        self.leverage = state.leverage
        self.contract_multiplier = state.contract_multiplier
        self.conversion_rate = state.conversion_rate
        self.resolution = state.resolution
        self._reserved_buying_power = state.reserved_buying_power

    def reserved_buying_power(self) -> Decimal:
        return abs(self._reserved_buying_power)


class ReplayHost:
    """Clock, portfolio and market data for one replayed run."""

    def __init__(self, *, start_date: datetime, end_date: datetime) -> None:
        self._start_date = start_date
        self._end_date = end_date
        self._utc_now = start_date

        self._total_portfolio_value = Decimal(0)
        self._securities: dict[str, ReplaySecurity] = {}
        self._bars: dict[str, Bar] = {}

    # ---- SimulationClock ----
    @property
    def utc_now(self) -> datetime:
        return self._utc_now

    @property
    def start_date(self) -> datetime:
        return self._start_date

    @property
    def end_date(self) -> datetime:
        return self._end_date

    # ---- PortfolioView ----
    def total_portfolio_value(self) -> Decimal:
        return self._total_portfolio_value

    def security(self, instrument: str) -> ReplaySecurity:
        sec = self._securities.get(instrument)
        if sec is None:
            sec = ReplaySecurity(instrument)
            self._securities[instrument] = sec
        return sec

    # ---- MarketDataView ----
    def latest_bar(self, instrument: str) -> Bar | None:
        return self._bars.get(instrument)

    # ---- Replay ----
    def apply(self, step: ReplayStep) -> None:
        """Move the host to ``step``. Time never regresses."""
        if step.utc_time < self._utc_now:
            raise ValueError(
                f"replay step at {step.utc_time.isoformat()} is before "
                f"current time {self._utc_now.isoformat()}"
            )

        self._utc_now = step.utc_time
        self._total_portfolio_value = step.total_portfolio_value

        for instrument, state in step.securities.items():
            self.security(instrument).update(state)

        for instrument, bar in step.bars.items():
            self._bars[instrument] = bar
