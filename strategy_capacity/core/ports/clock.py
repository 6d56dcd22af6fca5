from __future__ import annotations

from datetime import datetime
from typing import Protocol


class SimulationClock(Protocol):
    """Time source of the run being measured.

    All values are timezone-aware UTC datetimes.
    """

    @property
    def utc_now(self) -> datetime:
        """Current simulation time."""

    @property
    def start_date(self) -> datetime:
        """Start of the run horizon."""

    @property
    def end_date(self) -> datetime:
        """End of the run horizon."""
