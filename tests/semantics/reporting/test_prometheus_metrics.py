"""
Semantic test: Prometheus capacity gauges.

Invariant:
Gauges are only pushed when PROMETHEUS_PUSHGATEWAY_URL is set, and a failed
push is logged without failing the run.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from strategy_capacity.backtest.report.summary import CapacitySummary
from strategy_capacity.backtest.runtime import entrypoint, prometheus_metrics
from strategy_capacity.backtest.runtime.prometheus_metrics import PrometheusMetricsClient


def _summary() -> CapacitySummary:
    return CapacitySummary(
        run_id="r1",
        capacity=Decimal("1500.5"),
        minimum_capacity=Decimal("800"),
        snapshot_count=4,
        lowest_capacity_instrument="AAA",
        lowest_capacity_instrument_by_frequency="AAA",
        bottlenecks=[],
        warnings=[],
    )


def test_disabled_without_pushgateway(monkeypatch) -> None:
    monkeypatch.delenv("PROMETHEUS_PUSHGATEWAY_URL", raising=False)
    client = PrometheusMetricsClient()

    assert not client.is_enabled()

    client.set_gauge(name="strategy_capacity_account_currency", value=1.5, labels={"run_id": "r1"})
    assert client.registry.get_sample_value("strategy_capacity_account_currency", {"run_id": "r1"}) == 1.5
    client.push_all(job="capacity")  # no-op


def test_push_uses_grouping_key(monkeypatch) -> None:
    pushed = []
    monkeypatch.setenv("PROMETHEUS_PUSHGATEWAY_URL", "http://pushgateway:9091")
    monkeypatch.setenv("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON", '{"env": "ci", "n": 1}')
    monkeypatch.setattr(prometheus_metrics, "push_to_gateway", lambda **kw: pushed.append(kw))

    client = PrometheusMetricsClient()
    client.set_gauge(name="strategy_capacity_snapshots", value=4, labels={"run_id": "r1"})
    client.push_all(job="capacity")

    (call,) = pushed
    assert call["gateway"] == "http://pushgateway:9091"
    assert call["job"] == "capacity"
    assert call["grouping_key"] == {"env": "ci"}


def test_summary_gauges(monkeypatch) -> None:
    registries = []
    monkeypatch.setenv("PROMETHEUS_PUSHGATEWAY_URL", "http://pushgateway:9091")
    monkeypatch.delenv("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON", raising=False)
    monkeypatch.setattr(prometheus_metrics, "push_to_gateway", lambda **kw: registries.append(kw["registry"]))

    entrypoint._push_to_prometheus(_summary(), "capacity")  # pylint: disable=protected-access

    (registry,) = registries
    labels = {"run_id": "r1"}
    assert registry.get_sample_value("strategy_capacity_account_currency", labels) == 1500.5
    assert registry.get_sample_value("strategy_minimum_capacity_account_currency", labels) == 800.0
    assert registry.get_sample_value("strategy_capacity_snapshots", labels) == 4.0


def test_failed_push_is_logged(monkeypatch, caplog) -> None:
    def _fail(**_kw):
        raise OSError("connection refused")

    monkeypatch.setenv("PROMETHEUS_PUSHGATEWAY_URL", "http://pushgateway:9091")
    monkeypatch.setattr(prometheus_metrics, "push_to_gateway", _fail)

    with caplog.at_level(logging.ERROR):
        entrypoint._push_to_prometheus(_summary(), "capacity")  # pylint: disable=protected-access

    assert "Prometheus push failed" in caplog.text
