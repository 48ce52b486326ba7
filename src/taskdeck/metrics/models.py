# src/taskdeck/metrics/models.py

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import DataShapeError

ALGO_ORDER: tuple[str, ...] = ("fcfs", "ljf", "lifo")


def _num(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


@dataclass(slots=True, frozen=True)
class TaskMetric:
    task_id: Any
    waiting_time: float
    turnaround_time: float


@dataclass(slots=True, frozen=True)
class AlgoResult:
    algo: str
    avg_waiting: float = 0.0
    avg_tat: float = 0.0
    throughput: float = 0.0
    metrics: tuple[TaskMetric, ...] = ()

    @classmethod
    def from_payload(cls, raw: Any) -> AlgoResult:
        """Missing aggregates count as 0; per-task entries without task_id are dropped."""
        if not isinstance(raw, Mapping):
            raise DataShapeError(f"Metrics result is not an object: {type(raw).__name__}")
        algo = str(raw.get("algo") or "").strip().lower()
        if not algo:
            raise DataShapeError("Metrics result has no algo")

        items: list[TaskMetric] = []
        raw_items = raw.get("metrics")
        if isinstance(raw_items, list):
            for m in raw_items:
                if not isinstance(m, Mapping) or m.get("task_id") is None:
                    continue
                items.append(
                    TaskMetric(
                        task_id=m["task_id"],
                        waiting_time=_num(m.get("waiting_time")),
                        turnaround_time=_num(m.get("turnaround_time")),
                    )
                )

        return cls(
            algo=algo,
            avg_waiting=_num(raw.get("avg_waiting")),
            avg_tat=_num(raw.get("avg_tat")),
            throughput=_num(raw.get("throughput")),
            metrics=tuple(items),
        )


def algo_rank(algo: str) -> int:
    try:
        return ALGO_ORDER.index(algo)
    except ValueError:
        return len(ALGO_ORDER)


@dataclass(slots=True, frozen=True)
class MetricsSnapshot:
    """All algorithm results from one fetch, in display order."""

    results: tuple[AlgoResult, ...] = field(default_factory=tuple)

    @classmethod
    def ordered(cls, results: list[AlgoResult]) -> MetricsSnapshot:
        # sorted() is stable: unknown algorithms keep their relative order at the end.
        return cls(results=tuple(sorted(results, key=lambda r: algo_rank(r.algo))))

    def get(self, algo: str) -> AlgoResult | None:
        key = algo.strip().lower()
        for r in self.results:
            if r.algo == key:
                return r
        return None

    def __iter__(self) -> Iterator[AlgoResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)
