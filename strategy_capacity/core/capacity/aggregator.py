"""Capacity aggregation and snapshot engine.

Estimates the account-currency notional a strategy can sustain without
materially moving the instruments it trades. Fills are accumulated per
instrument; on every snapshot boundary the least liquid instrument that is
still relevant (held, or traded within the last snapshot period) is scaled
up to a portfolio-level capacity and appended to the capacity history.

"Dollar volume" means volume in account currency throughout.
"""

# pylint: disable=too-many-instance-attributes,too-many-locals
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Mapping

from strategy_capacity.core.capacity.capacity_config import CapacityConfig
from strategy_capacity.core.capacity.snapshot_clock import SnapshotClock, truncate_to_date
from strategy_capacity.core.domain.instrument_state import InstrumentCapacityState
from strategy_capacity.core.domain.monitored_set import MonitoredSet
from strategy_capacity.core.domain.smoothed_extremum import SmoothedExtremum
from strategy_capacity.core.events.events import (
    CapacitySnapshotEvent,
    InstrumentDelistedEvent,
    SettlementSkippedEvent,
)
from strategy_capacity.core.events.sinks.null_event_bus import NullEventBus

if TYPE_CHECKING:
    from strategy_capacity.core.domain.types import FillEvent
    from strategy_capacity.core.events.event_bus import EventBus
    from strategy_capacity.core.ports.clock import SimulationClock
    from strategy_capacity.core.ports.liquidity_tracker import LiquidityTracker, LiquidityTrackerFactory
    from strategy_capacity.core.ports.portfolio import PortfolioView

LOGGER = logging.getLogger(__name__)

_ZERO = Decimal(0)

SKIP_ZERO_PORTFOLIO_VALUE = "zero_portfolio_value"
SKIP_NO_TRACKED_INSTRUMENTS = "no_tracked_instruments"
SKIP_NO_BOTTLENECK = "no_bottleneck"


class CapacityAggregator:
    """Owns all per-instrument capacity state and produces capacity snapshots.

    Driven by two entry points from a single sequential event loop:
    - record_fill(event): for every order event
    - advance(force_settle): once per simulated time step, and once with
      force_settle=True at the end of the run to flush the last window.
    """

    def __init__(
        self,
        *,
        clock: SimulationClock,
        portfolio: PortfolioView,
        tracker_factory: LiquidityTrackerFactory,
        config: CapacityConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._clock = clock
        self._portfolio = portfolio
        self._tracker_factory = tracker_factory
        self._config = config if config is not None else CapacityConfig()
        self._event_bus = event_bus if event_bus is not None else NullEventBus()

        self._capacity_by_instrument: dict[str, InstrumentCapacityState] = {}
        # Instruments whose tracker still needs a per-step update.
        self._monitored: MonitoredSet[InstrumentCapacityState] = MonitoredSet()
        self._smallest_capacity_by_instrument: dict[str, SmoothedExtremum] = {}
        self._capacity_history: list[Decimal] = []

        self._snapshot_clock = SnapshotClock(
            start_date=clock.start_date,
            end_date=clock.end_date,
            min_days=self._config.min_snapshot_days,
            max_days=self._config.max_snapshot_days,
        )

        self._capacity = _ZERO
        self._minimum_capacity = _ZERO

    # ---- Diagnostics ----
    @property
    def capacity(self) -> Decimal:
        """Mean of the capacity history, 0 before the first settlement."""
        return self._capacity

    @property
    def minimum_capacity(self) -> Decimal:
        """Smallest value in the capacity history, 0 before the first settlement."""
        return self._minimum_capacity

    @property
    def lowest_capacity_instrument(self) -> str | None:
        """Instrument with the smallest smoothed bottleneck capacity."""
        if not self._smallest_capacity_by_instrument:
            return None
        return min(
            self._smallest_capacity_by_instrument.items(),
            key=lambda kv: kv[1].smoothed_value,
        )[0]

    @property
    def lowest_capacity_instrument_by_frequency(self) -> str | None:
        """Instrument chosen as bottleneck the most times."""
        if not self._smallest_capacity_by_instrument:
            return None
        return max(
            self._smallest_capacity_by_instrument.items(),
            key=lambda kv: kv[1].occurrence_count,
        )[0]

    @property
    def capacity_history(self) -> tuple[Decimal, ...]:
        return tuple(self._capacity_history)

    @property
    def bottleneck_statistics(self) -> Mapping[str, SmoothedExtremum]:
        """Copies of the per-instrument bottleneck statistics."""
        return {
            instrument: SmoothedExtremum(
                occurrence_count=stats.occurrence_count,
                smoothed_value=stats.smoothed_value,
                new_weight=stats.new_weight,
                prior_weight=stats.prior_weight,
            )
            for instrument, stats in self._smallest_capacity_by_instrument.items()
        }

    @property
    def tracked_instruments(self) -> tuple[str, ...]:
        return tuple(self._capacity_by_instrument)

    @property
    def monitored_instruments(self) -> tuple[str, ...]:
        return tuple(state.instrument for state in self._monitored)

    @property
    def next_snapshot_date(self) -> datetime:
        return self._snapshot_clock.next_snapshot_date

    @property
    def snapshot_period(self) -> timedelta:
        return self._snapshot_clock.period

    def tracker_for(self, instrument: str) -> LiquidityTracker | None:
        """Return the liquidity tracker of a tracked instrument, or None."""
        state = self._capacity_by_instrument.get(instrument)
        return None if state is None else state.tracker

    # ---- Event ingestion ----
    def record_fill(self, event: FillEvent) -> None:
        """Forward an execution to its instrument's tracker.

        Events that are not executions are ignored.
        """
        if not event.is_fill():
            return

        state = self._capacity_by_instrument.get(event.instrument)
        if state is None:
            security = self._portfolio.security(event.instrument)
            state = InstrumentCapacityState(
                instrument=event.instrument,
                tracker=self._tracker_factory(event.instrument, security),
                security=security,
            )
            self._capacity_by_instrument[event.instrument] = state
            LOGGER.debug("Tracking capacity", extra={"instrument": event.instrument})

        state.on_fill_event(event)
        self._monitored.add(state)

    # ---- Incremental maintenance ----
    def advance(self, force_settle: bool = False) -> Decimal | None:
        """Update monitored trackers and settle a snapshot when one is due.

        Returns the capacity value appended to the history, or None when no
        settlement took place.
        """
        for state in self._monitored.iter_reverse():
            if state.tracker.try_close_window():
                self._monitored.discard(state)

        utc_date = truncate_to_date(self._clock.utc_now)
        due = self._snapshot_clock.is_due(utc_date) and len(self._capacity_by_instrument) != 0
        if not (force_settle or due):
            return None

        return self._settle(utc_date)

    def _settle(self, utc_date: datetime) -> Decimal | None:
        self._sweep_delistings(utc_date)

        total_portfolio_value = self._portfolio.total_portfolio_value()
        if total_portfolio_value == 0:
            self._skip(utc_date, SKIP_ZERO_PORTFOLIO_VALUE)
            return None
        if not self._capacity_by_instrument:
            self._skip(utc_date, SKIP_NO_TRACKED_INSTRUMENTS)
            return None

        total_sale_volume = sum(
            (s.tracker.sale_volume for s in self._capacity_by_instrument.values()),
            _ZERO,
        )

        bottleneck = self._select_bottleneck(utc_date)
        if bottleneck is None:
            self._skip(utc_date, SKIP_NO_BOTTLENECK)
            return None

        tracker = bottleneck.tracker
        security = bottleneck.security

        # When there is no trading, rely on the portfolio holdings.
        sale_volume_share = tracker.sale_volume / total_sale_volume if total_sale_volume != 0 else _ZERO
        buying_power_used = security.reserved_buying_power() * security.leverage
        buying_power_share = buying_power_used / total_portfolio_value
        scaling_factor = max(sale_volume_share, buying_power_share)

        trades = tracker.trade_count if tracker.trade_count > 0 else 1
        daily_capacity = tracker.market_dollar_volume_estimate / trades

        if scaling_factor == 0:
            new_capacity = self._capacity
        else:
            new_capacity = daily_capacity / scaling_factor

        stats = self._smallest_capacity_by_instrument.get(bottleneck.instrument)
        if stats is None:
            stats = SmoothedExtremum(
                new_weight=self._config.smoothing_new_weight,
                prior_weight=self._config.smoothing_prior_weight,
            )
            self._smallest_capacity_by_instrument[bottleneck.instrument] = stats
        stats.update(new_capacity)

        self._capacity_history.append(new_capacity)
        self._capacity = sum(self._capacity_history, _ZERO) / len(self._capacity_history)
        self._minimum_capacity = min(self._capacity_history)

        for state in self._capacity_by_instrument.values():
            state.tracker.reset()

        self._snapshot_clock.advance(utc_date)

        LOGGER.debug(
            "Capacity snapshot",
            extra={
                "utc_date": utc_date.isoformat(),
                "bottleneck": bottleneck.instrument,
                "new_capacity": str(new_capacity),
                "capacity": str(self._capacity),
            },
        )
        self._event_bus.emit(
            CapacitySnapshotEvent(
                utc_time=utc_date,
                bottleneck=bottleneck.instrument,
                sale_volume_share=sale_volume_share,
                buying_power_share=buying_power_share,
                scaling_factor=scaling_factor,
                daily_capacity=daily_capacity,
                new_capacity=new_capacity,
                capacity=self._capacity,
                minimum_capacity=self._minimum_capacity,
                next_snapshot_date=self._snapshot_clock.next_snapshot_date,
            )
        )
        return new_capacity

    def _sweep_delistings(self, utc_date: datetime) -> None:
        delisted = [s for s in self._capacity_by_instrument.values() if s.is_delisted]
        for state in delisted:
            del self._capacity_by_instrument[state.instrument]
            self._monitored.discard(state)
            self._event_bus.emit(InstrumentDelistedEvent(utc_time=utc_date, instrument=state.instrument))

    def _select_bottleneck(self, utc_date: datetime) -> InstrumentCapacityState | None:
        """Least liquid instrument among those held or recently traded.

        Ties resolve to the instrument tracked first.
        """
        period = self._snapshot_clock.period
        candidates = [
            s
            for s in self._capacity_by_instrument.values()
            if s.invested or (s.last_fill_time is not None and s.last_fill_time + period > utc_date)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda s: s.tracker.market_dollar_volume_estimate)

    def _skip(self, utc_date: datetime, reason: str) -> None:
        LOGGER.debug("Capacity settlement skipped", extra={"reason": reason})
        self._event_bus.emit(
            SettlementSkippedEvent(
                utc_time=utc_date,
                reason=reason,
                tracked_instruments=len(self._capacity_by_instrument),
            )
        )
