"""
Semantic test: scheduled settlements.

Invariant:
Without force_settle a settlement happens only once the current UTC date
reaches next_snapshot_date and at least one instrument is tracked; afterwards
next_snapshot_date = settlement date + snapshot period.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from conftest import START


def test_not_due_before_next_snapshot_date(aggregator, clock, trackers, make_fill) -> None:
    aggregator.record_fill(make_fill("AAA"))
    trackers.trackers["AAA"].market_dollar_volume_estimate = Decimal(1000)

    for days in range(7):
        clock.utc_now = START + timedelta(days=days, hours=23)
        assert aggregator.advance() is None

    assert aggregator.capacity_history == ()


def test_settles_on_snapshot_date(aggregator, clock, trackers, make_fill, sink) -> None:
    aggregator.record_fill(make_fill("AAA"))
    trackers.trackers["AAA"].market_dollar_volume_estimate = Decimal(1000)

    clock.utc_now = START + timedelta(days=7, hours=10)
    assert aggregator.advance() == Decimal(1000)

    settled_on = START + timedelta(days=7)
    assert aggregator.next_snapshot_date == settled_on + timedelta(days=7)
    (snapshot,) = sink.of_type("CapacitySnapshotEvent")
    assert snapshot.utc_time == settled_on
    assert snapshot.next_snapshot_date == settled_on + timedelta(days=7)

    # Same day again: not due any more.
    clock.utc_now = START + timedelta(days=7, hours=11)
    assert aggregator.advance() is None


def test_late_step_schedules_from_actual_date(aggregator, clock, trackers, make_fill) -> None:
    aggregator.record_fill(make_fill("AAA"))
    trackers.trackers["AAA"].market_dollar_volume_estimate = Decimal(1000)
    clock.utc_now = START + timedelta(days=3)
    aggregator.record_fill(make_fill("AAA", utc_time=clock.utc_now))

    clock.utc_now = START + timedelta(days=9, hours=1)
    assert aggregator.advance() is not None
    assert aggregator.next_snapshot_date == START + timedelta(days=16)


def test_nothing_tracked_never_settles_on_schedule(aggregator, clock, sink) -> None:
    clock.utc_now = START + timedelta(days=8)
    assert aggregator.advance() is None
    assert not sink.events
    assert aggregator.next_snapshot_date == START + timedelta(days=7)


def test_force_settle_ignores_schedule(aggregator, trackers, make_fill) -> None:
    aggregator.record_fill(make_fill("AAA"))
    trackers.trackers["AAA"].market_dollar_volume_estimate = Decimal(250)

    assert aggregator.advance(force_settle=True) == Decimal(250)
    # Settled on START: START + 7d is not later than the current schedule.
    assert aggregator.next_snapshot_date == START + timedelta(days=7)
