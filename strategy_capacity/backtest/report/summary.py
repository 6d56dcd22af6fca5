from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from strategy_capacity.core.capacity.aggregator import CapacityAggregator


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BottleneckSummary:
    instrument: str
    occurrence_count: int
    smoothed_capacity: Decimal
    occurrence_share: float  # 0.0 - 1.0


@dataclass(frozen=True, slots=True)
class CapacitySummary:
    run_id: str
    capacity: Decimal
    minimum_capacity: Decimal
    snapshot_count: int
    lowest_capacity_instrument: str | None
    lowest_capacity_instrument_by_frequency: str | None
    bottlenecks: List[BottleneckSummary]
    warnings: List[str]


# ---------------------------------------------------------------------------
# Summary builder
# ---------------------------------------------------------------------------

def summarize_capacity(
    *,
    run_id: str,
    aggregator: CapacityAggregator,
) -> CapacitySummary:
    warnings: list[str] = []
    bottlenecks: list[BottleneckSummary] = []

    history = aggregator.capacity_history
    snapshot_count = len(history)

    if snapshot_count == 0:
        warnings.append("No capacity snapshot was taken; capacity is undefined")
    elif snapshot_count == 1:
        warnings.append("Capacity is based on a single snapshot")

    stats = aggregator.bottleneck_statistics
    for instrument, extremum in sorted(
        stats.items(),
        key=lambda kv: (-kv[1].occurrence_count, kv[0]),
    ):
        share = extremum.occurrence_count / snapshot_count if snapshot_count else 0.0
        bottlenecks.append(
            BottleneckSummary(
                instrument=instrument,
                occurrence_count=extremum.occurrence_count,
                smoothed_capacity=extremum.smoothed_value,
                occurrence_share=share,
            )
        )

        if snapshot_count > 1 and share > 0.5:
            warnings.append(
                f"{instrument} was the bottleneck in {share:.0%} of snapshots"
            )

    if snapshot_count > 1 and history[-1] == history[-2]:
        warnings.append("Last two snapshots are identical; capacity may have been carried forward")
    if snapshot_count > 1 and history[-1] == 0 and history[-2] != 0:
        warnings.append("Last snapshot is zero; the final window may have been empty")

    return CapacitySummary(
        run_id=run_id,
        capacity=aggregator.capacity,
        minimum_capacity=aggregator.minimum_capacity,
        snapshot_count=snapshot_count,
        lowest_capacity_instrument=aggregator.lowest_capacity_instrument,
        lowest_capacity_instrument_by_frequency=aggregator.lowest_capacity_instrument_by_frequency,
        bottlenecks=bottlenecks,
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Pretty printer
# ---------------------------------------------------------------------------

def print_capacity_summary(summary: CapacitySummary) -> None:
    print(f"Run: {summary.run_id}")
    print(f"Capacity: {summary.capacity:,.2f}")
    print(f"Minimum capacity: {summary.minimum_capacity:,.2f}")
    print(f"Snapshots: {summary.snapshot_count}")
    print(f"Lowest capacity instrument: {summary.lowest_capacity_instrument or '-'}")
    print(
        "Most frequent bottleneck: "
        f"{summary.lowest_capacity_instrument_by_frequency or '-'}"
    )
    print()

    if summary.warnings:
        print("Warnings:")
        for w in summary.warnings:
            print(f"  - {w}")
        print()

    if summary.bottlenecks:
        print("Bottlenecks:")
        for b in summary.bottlenecks:
            print(
                f"  - {b.instrument}: "
                f"{b.occurrence_count} snapshots | "
                f"{b.occurrence_share:.0%} of snapshots | "
                f"smoothed {b.smoothed_capacity:,.2f}"
            )
