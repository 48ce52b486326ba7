# src/taskdeck/tasks/task_orchestrator.py

from __future__ import annotations

"""
Mutation orchestrator.

Sequences add / done / delete against the task service and the refreshes that follow, so that
both views (task list, metrics) end up showing server truth while the UI stays responsive:

- add:    validate -> create -> optimistic insert -> refetch tasks -> refetch metrics
- done:   mark done -> refetch tasks -> refetch metrics          (no optimistic effect)
- delete: remove locally -> delete -> refetch tasks -> refetch metrics
          on failure the record is put back and exactly one notice is emitted

Refetches are fire-and-forget asyncio tasks. Within one mutation the task refetch is always
started before the metrics refetch. Refetches from different mutations are unordered; the store
ends up with whichever response is applied last. That window is accepted, there is no locking.

The refresh operations are injected callbacks owned by the views themselves.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from ..core.ports import Notifier, RefreshCallback, TaskChangeListener, TaskService
from ..errors import DataShapeError, ServiceError, ValidationError
from .task_models import TaskId, TaskRecord
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def validate_task_fields(fields: Mapping[str, Any]) -> tuple[str, str, int]:
    """
    Check user input for a new task.

    Returns (name, scheduled_time, duration_sec) or raises ValidationError naming
    every offending field.
    """
    errors: dict[str, str] = {}

    name = str(fields.get("name") or "").strip()
    if not name:
        errors["name"] = "required"

    scheduled_time = str(fields.get("scheduled_time") or "").strip()
    if not scheduled_time:
        errors["scheduled_time"] = "required"

    raw_duration = fields.get("duration_sec")
    duration = 0
    if raw_duration is None or str(raw_duration).strip() == "":
        errors["duration_sec"] = "required"
    elif isinstance(raw_duration, bool):
        errors["duration_sec"] = "must be an integer"
    else:
        try:
            duration = int(str(raw_duration).strip())
        except ValueError:
            errors["duration_sec"] = "must be an integer"
        else:
            if duration < 0:
                errors["duration_sec"] = "must be non-negative"

    if errors:
        raise ValidationError(errors)
    return name, scheduled_time, duration


class MutationOrchestrator:
    def __init__(
        self,
        service: TaskService,
        store: TaskStore,
        *,
        refresh_tasks: RefreshCallback,
        refresh_metrics: RefreshCallback,
        notifier: Notifier | None = None,
    ) -> None:
        self._service = service
        self._store = store
        self._refresh_tasks = refresh_tasks
        self._refresh_metrics = refresh_metrics
        self._notifier = notifier
        self._listeners: list[TaskChangeListener] = []
        self._pending: set[asyncio.Task[None]] = set()
        self._closed = False

    # ---- hooks exposed to presentation ----

    def on_task_change(self, listener: TaskChangeListener) -> None:
        self._listeners.append(listener)

    def add_task_optimistic(self, record: TaskRecord | None) -> None:
        self._store.insert_optimistic(record)

    def refresh_tasks(self) -> asyncio.Task[None] | None:
        return self._spawn("tasks", self._refresh_tasks)

    def fetch_metrics(self) -> asyncio.Task[None] | None:
        return self._spawn("metrics", self._refresh_metrics)

    def initial_load(self) -> None:
        # Independent: neither fetch waits for the other.
        self.refresh_tasks()
        self.fetch_metrics()

    async def wait_idle(self) -> None:
        """Wait until every refetch scheduled so far (and any they schedule) has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """Unmount: in-flight requests are not cancelled, their responses are discarded."""
        self._closed = True
        self._store.close()

    # ---- mutations ----

    async def add(self, fields: Mapping[str, Any]) -> TaskRecord | None:
        name, scheduled_time, duration = validate_task_fields(fields)

        try:
            payload = await self._service.create_task(
                name=name,
                scheduled_time=scheduled_time,
                duration_sec=duration,
            )
        except (ServiceError, DataShapeError) as e:
            logger.error("Failed to add task name=%r: %s", name, e)
            self._notice("Failed to add task.")
            return None

        try:
            created: TaskRecord | None = TaskRecord.from_payload(payload)
        except DataShapeError as e:
            # The service did create something; let the refetch show it.
            logger.warning("Create returned an unexpected payload: %s", e)
            created = None

        if created is not None:
            self._store.insert_optimistic(created)
            logger.info("Task added id=%s name=%r", created.id, created.name)

        self._after_mutation(created)
        return created

    async def mark_done(self, task_id: TaskId) -> bool:
        try:
            await self._service.mark_done(task_id)
        except (ServiceError, DataShapeError) as e:
            logger.error("Failed to mark task as done id=%s: %s", task_id, e)
            self._notice("Failed to mark as done.")
            return False

        logger.info("Task marked done id=%s", task_id)
        self._after_mutation(None)
        return True

    async def delete(self, task_id: TaskId) -> bool:
        removed = self._store.remove_local(task_id)

        try:
            await self._service.delete_task(task_id)
        except (ServiceError, DataShapeError) as e:
            if removed is not None:
                index, record = removed
                self._store.restore(index, record)
            else:
                self._store.unhide(task_id)
            logger.error("Failed to delete task id=%s: %s", task_id, e)
            self._notice("Failed to delete.")
            return False

        self._store.confirm_removed(task_id)
        logger.info("Task deleted id=%s", task_id)
        self._after_mutation(None)
        return True

    # ---- internals ----

    def _after_mutation(self, created: TaskRecord | None) -> None:
        if self._closed:
            return
        # Order matters: metrics are computed from the task set.
        self.refresh_tasks()
        self.fetch_metrics()

        for listener in list(self._listeners):
            try:
                listener(created)
            except Exception:
                logger.exception("on_task_change listener failed")

    def _spawn(self, label: str, callback: RefreshCallback) -> asyncio.Task[None] | None:
        if self._closed:
            return None
        task = asyncio.create_task(self._run_refresh(label, callback), name=f"taskdeck-refresh-{label}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @staticmethod
    async def _run_refresh(label: str, callback: RefreshCallback) -> None:
        try:
            await callback()
        except Exception:
            logger.exception("%s refresh crashed", label)

    def _notice(self, text: str) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(text)
        except Exception:
            logger.exception("Notifier failed")
