# src/taskdeck/cli/render.py

"""Plain-text rendering of the task list and the metrics view."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from ..metrics.models import AlgoResult, MetricsSnapshot
from ..tasks.task_models import TaskRecord, TaskStatus
from ..tasks.task_status import derive_status

_STATUS_MARK = {
    TaskStatus.DONE: "[x]",
    TaskStatus.RUNNING: "[>]",
    TaskStatus.OVERDUE: "[!]",
    TaskStatus.SCHEDULED: "[ ]",
}


def strike(text: str) -> str:
    return "".join(ch + "\u0336" for ch in text)


def render_task_line(record: TaskRecord, *, now: datetime | None = None) -> str:
    derived = derive_status(record, now=now)
    name = strike(record.name) if derived.done else record.name

    parts = [f"{_STATUS_MARK[derived.status]} #{record.id} {name}", record.scheduled_time or "-"]
    if record.duration_sec is not None and record.duration_sec > 0:
        parts.append(f"{record.duration_sec}s")
    parts.append(derived.status.label)
    return " • ".join(parts)


def render_task_list(records: Iterable[TaskRecord], *, now: datetime | None = None) -> str:
    lines = [render_task_line(r, now=now) for r in records]
    if not lines:
        return "No tasks found."
    return "Tasks:\n" + "\n".join(f"  {line}" for line in lines)


def render_algo(result: AlgoResult) -> str:
    head = (
        f"{result.algo.upper()}: avg WT {result.avg_waiting:g}s, "
        f"avg TAT {result.avg_tat:g}s, throughput {result.throughput:g}/s"
    )
    rows = [
        f"    Task {m.task_id}: waiting {round(m.waiting_time)}s, turnaround {round(m.turnaround_time)}s"
        for m in result.metrics
    ]
    return "\n".join([f"  {head}", *rows])


def render_metrics(snapshot: MetricsSnapshot) -> str:
    if not len(snapshot):
        return "No metrics yet."
    return "Performance metrics (FCFS vs LJF vs LIFO):\n" + "\n".join(render_algo(r) for r in snapshot)
