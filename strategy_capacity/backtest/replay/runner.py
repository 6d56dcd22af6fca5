"""Replay loop driving the capacity aggregator."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from strategy_capacity.backtest.replay.host import ReplayHost
from strategy_capacity.backtest.report.summary import CapacitySummary, summarize_capacity
from strategy_capacity.core.capacity.aggregator import CapacityAggregator
from strategy_capacity.core.capacity.liquidity import bar_volume_tracker_factory

if TYPE_CHECKING:
    from strategy_capacity.backtest.replay.models import ReplayConfig, ReplayStep
    from strategy_capacity.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)


class CapacityReplayRunner:
    """Feeds replayed steps through a CapacityAggregator.

    Invariant:
    - One step is fully applied (state, bars, fills) before advance() runs.
    - The run always ends with one forced settlement.
    """

    def __init__(
        self,
        *,
        config: ReplayConfig,
        event_bus: EventBus | None = None,
    ) -> None:
        self.config = config
        self.host = ReplayHost(start_date=config.start_date, end_date=config.end_date)

        self.aggregator = CapacityAggregator(
            clock=self.host,
            portfolio=self.host,
            tracker_factory=bar_volume_tracker_factory(
                clock=self.host,
                market_data=self.host,
                config=config.capacity,
            ),
            config=config.capacity,
            event_bus=event_bus,
        )

        self._steps = 0

    def step(self, step: ReplayStep) -> Decimal | None:
        """Apply one step and return the capacity settled at it, if any."""
        self.host.apply(step)
        for fill in step.fills:
            self.aggregator.record_fill(fill)

        self._steps += 1
        return self.aggregator.advance(force_settle=False)

    def finish(self) -> CapacitySummary:
        """Flush the last window and summarize the run."""
        self.aggregator.advance(force_settle=True)

        summary = summarize_capacity(run_id=self.config.run_id, aggregator=self.aggregator)
        LOGGER.info(
            "Capacity replay finished",
            extra={
                "run_id": self.config.run_id,
                "steps": self._steps,
                "snapshots": summary.snapshot_count,
                "capacity": str(summary.capacity),
            },
        )
        return summary

    def run(self, steps: Iterable[ReplayStep]) -> CapacitySummary:
        for step in steps:
            self.step(step)
        return self.finish()
