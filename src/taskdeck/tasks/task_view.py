# src/taskdeck/tasks/task_view.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.ports import TaskService
from ..errors import DataShapeError, ServiceError
from .task_models import TaskRecord
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def parse_tasks_payload(payload: Any) -> list[TaskRecord]:
    """
    Turn a GET /tasks body into records.

    - {"tasks": null} is an empty list (the service encodes "no rows" that way)
    - anything that is not {"tasks": [...]} raises DataShapeError
    - single malformed entries are skipped, the rest is kept
    """
    if not isinstance(payload, Mapping) or "tasks" not in payload:
        raise DataShapeError(f"Unexpected /tasks payload: {payload!r:.200}")

    raw_tasks = payload["tasks"]
    if raw_tasks is None:
        return []
    if not isinstance(raw_tasks, list):
        raise DataShapeError(f"Unexpected /tasks payload: tasks is {type(raw_tasks).__name__}")

    out: list[TaskRecord] = []
    for raw in raw_tasks:
        try:
            out.append(TaskRecord.from_payload(raw))
        except DataShapeError as e:
            logger.warning("Skipping malformed task entry: %s", e)
    return out


class TaskListView:
    """
    Owner of the task list: the store plus the "refresh task view" operation.

    refresh() is the callback handed to the orchestrator. It never raises; a failed fetch
    keeps whatever the store currently shows.
    """

    def __init__(self, service: TaskService, store: TaskStore | None = None) -> None:
        self._service = service
        self.store = store if store is not None else TaskStore()

    async def refresh(self) -> bool:
        ticket = self.store.begin_refresh()
        try:
            return await self._fetch_and_apply()
        finally:
            self.store.end_refresh(ticket)

    async def _fetch_and_apply(self) -> bool:
        try:
            payload = await self._service.list_tasks()
            records = parse_tasks_payload(payload)
        except ServiceError as e:
            logger.error("Failed to fetch tasks: %s", e)
            return False
        except DataShapeError as e:
            logger.warning("%s", e)
            return False

        if self.store.closed:
            logger.debug("Task view closed; dropping /tasks response")
            return False

        self.store.replace_all(records)
        logger.info("Tasks refreshed total=%d", len(records))
        return True

    def close(self) -> None:
        self.store.close()
