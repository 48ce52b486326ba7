# src/taskdeck/metrics/refresher.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.ports import MetricsService
from ..errors import DataShapeError, ServiceError
from .models import AlgoResult, MetricsSnapshot

logger = logging.getLogger(__name__)


def parse_metrics_payload(payload: Any) -> MetricsSnapshot:
    """
    GET /metrics?algo=all -> snapshot.

    A body without a `results` list is an empty snapshot; malformed entries are skipped.
    """
    raw_results = payload.get("results") if isinstance(payload, Mapping) else None
    if not isinstance(raw_results, list):
        logger.warning("Unexpected metrics payload (no results list); treating as empty")
        return MetricsSnapshot()

    results: list[AlgoResult] = []
    for raw in raw_results:
        try:
            results.append(AlgoResult.from_payload(raw))
        except DataShapeError as e:
            logger.warning("Skipping malformed metrics result: %s", e)
    return MetricsSnapshot.ordered(results)


class MetricsRefresher:
    """
    Owner of the metrics view: caches the latest snapshot.

    fetch_metrics() replaces the snapshot wholesale; a failed fetch keeps the previous one.
    It never raises, so it can be handed out as a fire-and-forget refresh callback.
    """

    def __init__(self, service: MetricsService) -> None:
        self._service = service
        self._snapshot = MetricsSnapshot()
        self._closed = False

    @property
    def snapshot(self) -> MetricsSnapshot:
        return self._snapshot

    def summary(self) -> list[tuple[str, float, float, float]]:
        return [(r.algo, r.avg_waiting, r.avg_tat, r.throughput) for r in self._snapshot]

    def close(self) -> None:
        self._closed = True

    async def fetch_metrics(self) -> bool:
        try:
            payload = await self._service.get_metrics("all")
        except (ServiceError, DataShapeError) as e:
            logger.error("Failed to fetch metrics: %s", e)
            return False

        snapshot = parse_metrics_payload(payload)
        if self._closed:
            logger.debug("Metrics view closed; dropping response")
            return False

        self._snapshot = snapshot
        logger.info("Metrics refreshed algos=%s", ",".join(r.algo for r in snapshot) or "-")
        return True

    async def fetch_algo(self, algo: str) -> AlgoResult | None:
        """Fetch a single algorithm's result. Does not touch the cached snapshot."""
        key = (algo or "").strip().lower()
        if not key:
            return None
        try:
            payload = await self._service.get_metrics(key)
            return AlgoResult.from_payload(payload)
        except (ServiceError, DataShapeError) as e:
            logger.error("Failed to fetch metrics for algo=%s: %s", key, e)
            return None
