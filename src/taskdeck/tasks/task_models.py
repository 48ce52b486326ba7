# src/taskdeck/tasks/task_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..errors import DataShapeError

TaskId = int | str


class TaskStatus(StrEnum):
    """
    Displayed task status.

    Notes:
    - DONE / RUNNING / SCHEDULED are mutually exclusive lifecycle states.
    - OVERDUE is a decoration of SCHEDULED (start time passed, execution not started);
      it is only ever reported instead of SCHEDULED.
    """

    SCHEDULED = "scheduled"
    RUNNING = "running"
    DONE = "done"
    OVERDUE = "overdue"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(slots=True, frozen=True)
class DerivedStatus:
    status: TaskStatus
    done: bool
    running: bool
    overdue: bool


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


def _opt_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


@dataclass(slots=True, frozen=True)
class TaskRecord:
    id: TaskId
    name: str
    scheduled_time: str | None
    duration_sec: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    done: bool | int | None = None
    arrival_time: str | None = None

    @classmethod
    def from_payload(cls, raw: Any) -> TaskRecord:
        """
        Build a record from a service payload.

        The service sends "" for unset timestamps and 0/1 for `done`;
        both are kept as-is apart from "" -> None.
        """
        if not isinstance(raw, Mapping):
            raise DataShapeError(f"Task payload is not an object: {type(raw).__name__}")

        task_id = raw.get("id")
        if task_id is None or isinstance(task_id, bool) or str(task_id).strip() == "":
            raise DataShapeError("Task payload has no id")

        return cls(
            id=task_id,
            name=str(raw.get("name") or ""),
            scheduled_time=_opt_str(raw.get("scheduled_time")),
            duration_sec=_opt_int(raw.get("duration_sec")),
            start_time=_opt_str(raw.get("start_time")),
            end_time=_opt_str(raw.get("end_time")),
            done=raw.get("done"),
            arrival_time=_opt_str(raw.get("arrival_time")),
        )


def same_id(a: TaskId, b: TaskId) -> bool:
    """Ids arrive as ints from the service and as strings from user input."""
    return str(a) == str(b)
