# tests/test_metrics_refresher.py

from __future__ import annotations

import pytest

from taskdeck.metrics.models import AlgoResult, MetricsSnapshot
from taskdeck.metrics.refresher import MetricsRefresher, parse_metrics_payload

from .fakes import FakeService


def test_parse_orders_known_algos_and_keeps_unknown_last_stably() -> None:
    payload = {
        "results": [
            {"algo": "zeta"},
            {"algo": "lifo"},
            {"algo": "alpha"},
            {"algo": "fcfs"},
            {"algo": "LJF"},
        ]
    }
    snap = parse_metrics_payload(payload)
    assert [r.algo for r in snap] == ["fcfs", "ljf", "lifo", "zeta", "alpha"]


def test_parse_defaults_missing_aggregates_to_zero() -> None:
    snap = parse_metrics_payload({"results": [{"algo": "fcfs", "metrics": [{"task_id": 3}, {"waiting_time": 1}]}]})
    fcfs = snap.get("fcfs")
    assert fcfs is not None
    assert (fcfs.avg_waiting, fcfs.avg_tat, fcfs.throughput) == (0.0, 0.0, 0.0)
    assert [m.task_id for m in fcfs.metrics] == [3]
    assert fcfs.metrics[0].waiting_time == 0.0


@pytest.mark.parametrize("payload", [None, {}, {"results": None}, {"results": "x"}, []])
def test_parse_wrong_shape_is_empty_snapshot(payload) -> None:
    assert len(parse_metrics_payload(payload)) == 0


def test_parse_skips_malformed_results() -> None:
    snap = parse_metrics_payload({"results": ["junk", {"no_algo": 1}, {"algo": "ljf", "avg_tat": "4.5"}]})
    assert [r.algo for r in snap] == ["ljf"]
    assert snap.get("ljf").avg_tat == 4.5


@pytest.mark.asyncio
async def test_fetch_replaces_snapshot_wholesale() -> None:
    service = FakeService()
    refresher = MetricsRefresher(service)

    assert await refresher.fetch_metrics()
    assert [a for a, *_ in refresher.summary()] == ["fcfs", "ljf", "lifo"]

    service.metrics = [{"algo": "fcfs", "avg_waiting": 9}]
    assert await refresher.fetch_metrics()
    assert refresher.summary() == [("fcfs", 9.0, 0.0, 0.0)]


@pytest.mark.asyncio
async def test_fetch_failure_keeps_previous_snapshot() -> None:
    service = FakeService()
    refresher = MetricsRefresher(service)
    await refresher.fetch_metrics()
    before = refresher.snapshot

    service.fail.add("get_metrics")
    assert not await refresher.fetch_metrics()
    assert refresher.snapshot is before


@pytest.mark.asyncio
async def test_closed_refresher_drops_response() -> None:
    refresher = MetricsRefresher(FakeService())
    refresher.close()
    assert not await refresher.fetch_metrics()
    assert refresher.snapshot == MetricsSnapshot()


@pytest.mark.asyncio
async def test_fetch_algo_does_not_touch_snapshot() -> None:
    service = FakeService()
    refresher = MetricsRefresher(service)

    result = await refresher.fetch_algo("LJF")
    assert isinstance(result, AlgoResult)
    assert result.algo == "ljf"
    assert service.calls == ["get_metrics:ljf"]
    assert len(refresher.snapshot) == 0

    service.fail.add("get_metrics")
    assert await refresher.fetch_algo("fcfs") is None
