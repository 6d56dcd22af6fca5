"""Snapshot scheduling for capacity settlements."""

from __future__ import annotations

from datetime import datetime, timedelta


def truncate_to_date(value: datetime) -> datetime:
    """Return midnight of ``value``'s day, keeping its timezone."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def snapshot_period_for(
    start_date: datetime,
    end_date: datetime,
    *,
    min_days: float = 1.0,
    max_days: float = 7.0,
) -> timedelta:
    """Size the snapshot period from the run horizon.

    One day shorter than the run, clamped to [min_days, max_days], so short
    runs still produce at least one scheduled snapshot before the end.
    """
    if end_date < start_date:
        raise ValueError(f"end_date {end_date} is before start_date {start_date}")

    total_days = (end_date - start_date).total_seconds() / 86400.0
    days = max(min(total_days - 1.0, max_days), min_days)
    return timedelta(days=days)


class SnapshotClock:
    """Next snapshot date plus the fixed period between snapshots.

    Invariant:
    - next_snapshot_date only moves forward, and only through advance().
    """

    __slots__ = ("_period", "_next_snapshot_date")

    def __init__(
        self,
        *,
        start_date: datetime,
        end_date: datetime,
        min_days: float = 1.0,
        max_days: float = 7.0,
    ) -> None:
        self._period = snapshot_period_for(
            start_date,
            end_date,
            min_days=min_days,
            max_days=max_days,
        )
        self._next_snapshot_date = start_date + self._period

    @property
    def period(self) -> timedelta:
        return self._period

    @property
    def next_snapshot_date(self) -> datetime:
        return self._next_snapshot_date

    def is_due(self, current_date: datetime) -> bool:
        return current_date >= self._next_snapshot_date

    def advance(self, current_date: datetime) -> None:
        """Schedule the next snapshot one period after ``current_date``."""
        candidate = current_date + self._period
        if candidate > self._next_snapshot_date:
            self._next_snapshot_date = candidate
