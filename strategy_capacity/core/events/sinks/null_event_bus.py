from __future__ import annotations

from typing import Any

from strategy_capacity.core.events.event_bus import EventBus


class _NullSink:
    def on_event(self, event: Any) -> None:
        return


class NullEventBus(EventBus):
    """EventBus that discards all capacity events (default for embedded use and tests)."""

    def __init__(self) -> None:
        super().__init__(sinks=[_NullSink()])
