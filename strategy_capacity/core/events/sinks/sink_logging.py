"""
Logging event sink.
"""
from __future__ import annotations

import logging
from typing import Any


class LoggingEventSink:
    """Logs capacity events using the standard logging module.

    Snapshots are logged at INFO, everything else at DEBUG.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: Any) -> None:
        name = type(event).__name__
        level = logging.INFO if name == "CapacitySnapshotEvent" else logging.DEBUG
        self._logger.log(level, "capacity_event", extra={"event_type": name, "event": event})
