"""Default liquidity tracker driven by market bar volume.

For every fill a measurement window is opened (if none is open). While it
is open, each new bar contributes a fraction of its dollar volume to the
instrument's market dollar volume estimate: the resolution's participation
rate, damped further for strategies that trade the same instrument many
times per day. The window closes once no fill was seen for the resolution's
timeout.
"""

# pylint: disable=too-many-instance-attributes
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from strategy_capacity.core.capacity.capacity_config import CapacityConfig, ResolutionProfile
    from strategy_capacity.core.domain.types import FillEvent
    from strategy_capacity.core.ports.clock import SimulationClock
    from strategy_capacity.core.ports.liquidity_tracker import LiquidityTrackerFactory
    from strategy_capacity.core.ports.market_data import MarketDataView
    from strategy_capacity.core.ports.portfolio import SecurityView

_ZERO = Decimal(0)
_ONE = Decimal(1)


class BarVolumeLiquidityTracker:
    """LiquidityTracker implementation based on bar dollar volume."""

    def __init__(
        self,
        *,
        instrument: str,
        security: SecurityView,
        clock: SimulationClock,
        market_data: MarketDataView,
        profile: ResolutionProfile,
        fast_trading_minutes: Decimal = Decimal(390),
    ) -> None:
        self._instrument = instrument
        self._security = security
        self._clock = clock
        self._market_data = market_data
        self._profile = profile
        self._fast_trading_minutes = fast_trading_minutes

        self._market_dollar_volume = _ZERO
        self._trade_count = 0
        self._sale_volume = _ZERO

        self._window_open = False
        self._fast_trading_factor = _ONE
        self._last_fill_time: datetime | None = None
        self._window_opened_at: datetime | None = None
        self._last_bar_time: datetime | None = None

    @property
    def market_dollar_volume_estimate(self) -> Decimal:
        return self._market_dollar_volume

    @property
    def trade_count(self) -> int:
        return self._trade_count

    @property
    def sale_volume(self) -> Decimal:
        return self._sale_volume

    @property
    def last_fill_time(self) -> datetime | None:
        return self._last_fill_time

    @property
    def window_open(self) -> bool:
        return self._window_open

    def _to_account_currency(self, value: Decimal) -> Decimal:
        return value * self._security.contract_multiplier * self._security.conversion_rate

    def on_fill_event(self, event: FillEvent) -> None:
        self._sale_volume += self._to_account_currency(event.fill_value)

        # Scale down the volume captured on each bar in proportion to how
        # often this instrument is traded. The first fill is not damped.
        if self._last_fill_time is None:
            self._fast_trading_factor = _ONE
        else:
            seconds = Decimal(str((event.utc_time - self._last_fill_time).total_seconds()))
            minutes = seconds / 60
            self._fast_trading_factor = min(max(minutes / self._fast_trading_minutes, _ZERO), _ONE)

        if not self._window_open:
            self._window_open = True
            self._window_opened_at = event.utc_time
            self._trade_count += 1

        self._last_fill_time = event.utc_time

    def try_close_window(self) -> bool:
        if not self._window_open or self._last_fill_time is None:
            return True

        if self._clock.utc_now > self._last_fill_time + self._profile.timeout:
            self._window_open = False
            return True

        bar = self._market_data.latest_bar(self._instrument)
        if bar is None or bar.volume == 0:
            return False
        # Bars that closed before the window opened were never available to it.
        if self._window_opened_at is not None and bar.utc_time < self._window_opened_at:
            return False
        if self._last_bar_time is not None and bar.utc_time <= self._last_bar_time:
            return False

        self._last_bar_time = bar.utc_time
        dollar_volume = self._to_account_currency(bar.dollar_volume)
        self._market_dollar_volume += (
            dollar_volume * self._profile.participation_rate * self._fast_trading_factor
        )
        return False

    def reset(self) -> None:
        # An open window keeps accumulating into the new measurement period.
        self._market_dollar_volume = _ZERO
        self._trade_count = 0
        self._sale_volume = _ZERO


def bar_volume_tracker_factory(
    *,
    clock: SimulationClock,
    market_data: MarketDataView,
    config: CapacityConfig,
) -> LiquidityTrackerFactory:
    """Build a factory creating one BarVolumeLiquidityTracker per instrument."""

    def _create(instrument: str, security: SecurityView) -> BarVolumeLiquidityTracker:
        return BarVolumeLiquidityTracker(
            instrument=instrument,
            security=security,
            clock=clock,
            market_data=market_data,
            profile=config.profile_for(security.resolution),
            fast_trading_minutes=config.fast_trading_minutes,
        )

    return _create
