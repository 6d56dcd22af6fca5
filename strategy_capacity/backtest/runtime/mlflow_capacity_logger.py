from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import mlflow

if TYPE_CHECKING:
    from strategy_capacity.backtest.report.summary import CapacitySummary

LOGGER = logging.getLogger(__name__)


class MlflowCapacityLogger:
    """Logs a capacity summary to MLflow.

    Tracking is configured via environment variables:
    - MLFLOW_TRACKING_URI: HTTP(S) address of the MLflow tracking server.

    This logger is best-effort. Callers should catch exceptions and continue.
    """

    def __init__(self) -> None:
        tracking_uri = os.environ.get("MLFLOW_TRACKING_URI")
        if tracking_uri:
            mlflow.set_tracking_uri(tracking_uri)

    def log(
        self,
        *,
        summary: CapacitySummary,
        experiment: str,
    ) -> None:
        """Log the summary as MLflow parameters/metrics/tags."""

        mlflow.set_experiment(experiment)

        with mlflow.start_run(run_name=summary.run_id):
            mlflow.log_param("snapshot_count", summary.snapshot_count)

            mlflow.log_metric("capacity", float(summary.capacity))
            mlflow.log_metric("minimum_capacity", float(summary.minimum_capacity))

            for b in summary.bottlenecks:
                mlflow.log_metric(f"bottleneck_count.{b.instrument}", b.occurrence_count)

            if summary.lowest_capacity_instrument is not None:
                mlflow.set_tag("lowest_capacity_instrument", summary.lowest_capacity_instrument)
            if summary.lowest_capacity_instrument_by_frequency is not None:
                mlflow.set_tag(
                    "lowest_capacity_instrument_by_frequency",
                    summary.lowest_capacity_instrument_by_frequency,
                )
            mlflow.set_tag("run_id", summary.run_id)

        LOGGER.info(
            "MLflow capacity log submitted",
            extra={"experiment": experiment, "run_id": summary.run_id},
        )
