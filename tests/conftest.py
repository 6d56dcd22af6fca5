"""In-memory host fakes shared by the semantic tests."""

# pylint: disable=redefined-outer-name,missing-function-docstring
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable

import pytest

from strategy_capacity.core.capacity.aggregator import CapacityAggregator
from strategy_capacity.core.domain.types import FillEvent
from strategy_capacity.core.events.event_bus import EventBus

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
END = datetime(2024, 1, 31, tzinfo=timezone.utc)


@dataclass
class FakeClock:
    utc_now: datetime = START
    start_date: datetime = START
    end_date: datetime = END


@dataclass
class FakeSecurity:
    instrument: str
    is_delisted: bool = False
    invested: bool = False
    leverage: Decimal = Decimal(1)
    contract_multiplier: Decimal = Decimal(1)
    conversion_rate: Decimal = Decimal(1)
    resolution: str = "minute"
    reserved: Decimal = Decimal(0)

    def reserved_buying_power(self) -> Decimal:
        return abs(self.reserved)


@dataclass
class FakePortfolio:
    value: Decimal = Decimal(100_000)
    securities: dict[str, FakeSecurity] = field(default_factory=dict)

    def total_portfolio_value(self) -> Decimal:
        return self.value

    def security(self, instrument: str) -> FakeSecurity:
        if instrument not in self.securities:
            self.securities[instrument] = FakeSecurity(instrument)
        return self.securities[instrument]


class StubLiquidityTracker:
    """Deterministic tracker: one trade per fill, estimate set by the test."""

    def __init__(self, instrument: str) -> None:
        self.instrument = instrument
        self.market_dollar_volume_estimate = Decimal(0)
        self.trade_count = 0
        self.sale_volume = Decimal(0)
        self.last_fill_time: datetime | None = None

        self.window_closed = False
        self.close_calls = 0
        self.reset_calls = 0

    def on_fill_event(self, event: FillEvent) -> None:
        self.sale_volume += event.fill_value
        self.trade_count += 1
        self.last_fill_time = event.utc_time

    def try_close_window(self) -> bool:
        self.close_calls += 1
        return self.window_closed

    def reset(self) -> None:
        self.reset_calls += 1
        self.market_dollar_volume_estimate = Decimal(0)
        self.trade_count = 0
        self.sale_volume = Decimal(0)


class StubTrackerFactory:
    def __init__(self) -> None:
        self.trackers: dict[str, StubLiquidityTracker] = {}

    def __call__(self, instrument: str, security: Any) -> StubLiquidityTracker:
        tracker = StubLiquidityTracker(instrument)
        self.trackers[instrument] = tracker
        return tracker


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[Any] = []

    def on_event(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, name: str) -> list[Any]:
        return [e for e in self.events if type(e).__name__ == name]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def portfolio() -> FakePortfolio:
    return FakePortfolio()


@pytest.fixture
def trackers() -> StubTrackerFactory:
    return StubTrackerFactory()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def aggregator(clock, portfolio, trackers, sink) -> CapacityAggregator:
    return CapacityAggregator(
        clock=clock,
        portfolio=portfolio,
        tracker_factory=trackers,
        event_bus=EventBus(sinks=[sink]),
    )


@pytest.fixture
def make_fill() -> Callable[..., FillEvent]:
    counter = {"n": 0}

    def _make(
        instrument: str = "AAA",
        *,
        utc_time: datetime = START + timedelta(hours=15),
        status: str = "filled",
        price: str = "10",
        qty: str = "1",
        side: str = "buy",
    ) -> FillEvent:
        counter["n"] += 1
        return FillEvent(
            utc_time=utc_time,
            instrument=instrument,
            client_order_id=f"order-{counter['n']}",
            status=status,
            side=side,
            fill_price={"currency": "USD", "value": price},
            fill_qty={"unit": "shares", "value": qty},
        )

    return _make
