"""
Event sink interface.

Sinks consume the capacity events emitted by the aggregator
(snapshots taken, settlements skipped, instruments delisted).
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume a capacity event."""
