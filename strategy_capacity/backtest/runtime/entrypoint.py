from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from strategy_capacity.backtest.replay.models import iter_replay_steps, load_replay_config
from strategy_capacity.backtest.replay.runner import CapacityReplayRunner
from strategy_capacity.backtest.report.summary import print_capacity_summary
from strategy_capacity.backtest.runtime.prometheus_metrics import PrometheusMetricsClient
from strategy_capacity.core.events.event_bus import EventBus
from strategy_capacity.core.events.sinks.file_recorder import FileRecorderSink
from strategy_capacity.core.events.sinks.sink_logging import LoggingEventSink

if TYPE_CHECKING:
    from strategy_capacity.backtest.report.summary import CapacitySummary

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_event_bus(events_out: Path | None) -> EventBus:
    event_bus = EventBus(sinks=[LoggingEventSink(logging.getLogger("bus"))])
    if events_out is not None:
        event_bus.register(FileRecorderSink(events_out))
    return event_bus


def _log_to_mlflow(summary: CapacitySummary, experiment: str) -> None:
    try:
        # Imported lazily: mlflow is slow to import and only needed here.
        from strategy_capacity.backtest.runtime.mlflow_capacity_logger import (  # pylint: disable=import-outside-toplevel
            MlflowCapacityLogger,
        )

        MlflowCapacityLogger().log(summary=summary, experiment=experiment)
    except Exception:  # pylint: disable=broad-exception-caught
        LOGGER.exception("MLflow logging failed")


def _push_to_prometheus(summary: CapacitySummary, job: str) -> None:
    metrics = PrometheusMetricsClient()
    if not metrics.is_enabled():
        LOGGER.info("Prometheus push skipped: PROMETHEUS_PUSHGATEWAY_URL not set")
        return

    try:
        labels = {"run_id": summary.run_id}

        metrics.set_gauge(
            name="strategy_capacity_account_currency",
            value=float(summary.capacity),
            labels=labels,
        )
        metrics.set_gauge(
            name="strategy_minimum_capacity_account_currency",
            value=float(summary.minimum_capacity),
            labels=labels,
        )
        metrics.set_gauge(
            name="strategy_capacity_snapshots",
            value=float(summary.snapshot_count),
            labels=labels,
        )

        metrics.push_all(job=job)

    except Exception:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Prometheus push failed")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Replay fills and market state through the capacity estimator"
    )

    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to replay JSON config (run horizon + capacity block).",
    )
    parser.add_argument(
        "--steps",
        type=Path,
        required=True,
        help="Path to JSON-lines file with one replay step per line.",
    )
    parser.add_argument(
        "--events-out",
        type=Path,
        default=None,
        help="Optional JSON-lines file receiving capacity events.",
    )
    parser.add_argument(
        "--mlflow-experiment",
        type=str,
        default=None,
        help="Log the summary to this MLflow experiment.",
    )
    parser.add_argument(
        "--prometheus-job",
        type=str,
        default=None,
        help="Push summary gauges to the Pushgateway under this job name.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_replay_config(args.config)
    event_bus = _build_event_bus(args.events_out)

    runner = CapacityReplayRunner(config=config, event_bus=event_bus)
    try:
        summary = runner.run(iter_replay_steps(args.steps))
    finally:
        event_bus.close()

    print_capacity_summary(summary)

    # --- MLflow logging (side-effect only) ---
    if args.mlflow_experiment:
        _log_to_mlflow(summary, args.mlflow_experiment)

    # --- Prometheus metrics (side-effect only) ---
    if args.prometheus_job:
        _push_to_prometheus(summary, args.prometheus_job)


if __name__ == "__main__":
    main()
