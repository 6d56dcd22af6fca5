from __future__ import annotations

import json
import logging
import os

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

LOGGER = logging.getLogger(__name__)


class PrometheusMetricsClient:
    """Prometheus Pushgateway client for capacity replays.

    Expected environment:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object of string pairs
      used as grouping key, e.g. {"run_id": "nightly-2024-01-05"}.

    Delivery is best-effort: callers log failures and carry on.
    """

    def __init__(self) -> None:
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self._registry = CollectorRegistry()
        self._gauges: dict[str, Gauge] = {}

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def set_gauge(
        self,
        *,
        name: str,
        value: float,
        labels: dict[str, str],
        documentation: str | None = None,
    ) -> None:
        """Set a gauge in the local registry. Gauges are created on first use."""
        gauge = self._gauges.get(name)
        if gauge is None:
            gauge = Gauge(
                name,
                documentation=documentation or name,
                labelnames=list(labels.keys()),
                registry=self._registry,
            )
            self._gauges[name] = gauge

        gauge.labels(**labels).set(value)

    def push_all(self, *, job: str) -> None:
        if not self._pushgateway_url:
            return

        push_to_gateway(
            gateway=self._pushgateway_url,
            job=job,
            registry=self._registry,
            grouping_key=self._grouping_key,
        )

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": job, "grouping_key": self._grouping_key},
        )
