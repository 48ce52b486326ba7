# src/taskdeck/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from .task_models import TaskId, TaskRecord, same_id

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory task list for the active view.

    The remote service is the source of truth:
    - replace_all() applies an authoritative refetch and drops anything it does not contain,
      optimistic entries included
    - insert_optimistic() prepends a provisional record; it is NOT reconciled by id, the next
      replace_all() is trusted to supersede it (a duplicate can be visible until then)
    - remove_local() drops a record right away (delete), restore() undoes that on failure

    Removed ids stay hidden from later replace_all() payloads until restored. A refetch sent
    before the service processed the delete must not bring the record back. Once the delete
    is confirmed and every refetch started before that has finished, the id is forgotten:
    nothing still in flight can carry it. Ids are assigned by the service and never reused.

    There is no update-in-place: "done" is only observed through a refetch.

    After close() every mutation is a no-op, so responses that arrive once the view is gone
    are discarded instead of mutating state.
    """

    def __init__(self, records: Iterable[TaskRecord] = ()) -> None:
        self._records: list[TaskRecord] = list(records)
        self._removed: set[str] = set()
        # confirmed delete id -> last refetch ticket issued before the confirmation
        self._confirmed: dict[str, int] = {}
        self._tickets = 0
        self._inflight: set[int] = set()
        self._closed = False

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _discard(self, op: str) -> bool:
        if self._closed:
            logger.debug("TaskStore closed; discarding %s", op)
            return True
        return False

    # ---- read API ----

    def records(self) -> tuple[TaskRecord, ...]:
        return tuple(self._records)

    def get(self, task_id: TaskId) -> TaskRecord | None:
        for rec in self._records:
            if same_id(rec.id, task_id):
                return rec
        return None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TaskRecord]:
        return iter(tuple(self._records))

    def __contains__(self, task_id: object) -> bool:
        return any(same_id(rec.id, task_id) for rec in self._records)  # type: ignore[arg-type]

    # ---- mutations ----

    def replace_all(self, records: Iterable[TaskRecord]) -> None:
        if self._discard("replace_all"):
            return
        incoming = list(records)
        self._records = [r for r in incoming if str(r.id) not in self._removed]
        hidden = len(incoming) - len(self._records)
        logger.debug("TaskStore replaced total=%d hidden=%d", len(self._records), hidden)

    def insert_optimistic(self, record: TaskRecord | None) -> None:
        if record is None or self._discard("insert_optimistic"):
            return
        self._records.insert(0, record)
        logger.debug("TaskStore optimistic insert id=%s", record.id)

    def remove_local(self, task_id: TaskId) -> tuple[int, TaskRecord] | None:
        """
        Remove the first record with this id.

        Returns (index, record) so the caller can restore it, or None if absent.
        """
        if self._discard("remove_local"):
            return None
        self._removed.add(str(task_id))
        for idx, rec in enumerate(self._records):
            if same_id(rec.id, task_id):
                del self._records[idx]
                # Drop optimistic duplicates of the same id as well.
                self._records = [r for r in self._records if not same_id(r.id, task_id)]
                logger.debug("TaskStore removed id=%s at=%d", task_id, idx)
                return idx, rec
        return None

    def restore(self, index: int, record: TaskRecord) -> None:
        """Put a removed record back at (about) its old position."""
        if self._discard("restore"):
            return
        self._removed.discard(str(record.id))
        if record.id in self:
            return
        index = max(0, min(int(index), len(self._records)))
        self._records.insert(index, record)
        logger.debug("TaskStore restored id=%s at=%d", record.id, index)

    def unhide(self, task_id: TaskId) -> None:
        """Let replace_all() show this id again (failed delete of a record we did not hold)."""
        self._removed.discard(str(task_id))

    # ---- hidden-id bookkeeping ----

    def begin_refresh(self) -> int:
        """Register a refetch about to be sent; pass the ticket to end_refresh() when it settles."""
        self._tickets += 1
        self._inflight.add(self._tickets)
        return self._tickets

    def end_refresh(self, ticket: int) -> None:
        self._inflight.discard(ticket)
        self._forget_settled()

    def confirm_removed(self, task_id: TaskId) -> None:
        """The service acknowledged the delete; the id can be forgotten once older refetches settle."""
        key = str(task_id)
        if key not in self._removed:
            return
        self._confirmed[key] = self._tickets
        self._forget_settled()

    def _forget_settled(self) -> None:
        oldest = min(self._inflight, default=None)
        for key, issued in list(self._confirmed.items()):
            if oldest is None or oldest > issued:
                del self._confirmed[key]
                self._removed.discard(key)
                logger.debug("TaskStore forgot removed id=%s", key)

    @property
    def hidden_count(self) -> int:
        return len(self._removed)
