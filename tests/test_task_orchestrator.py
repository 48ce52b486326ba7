# tests/test_task_orchestrator.py

from __future__ import annotations

import asyncio

import pytest

from taskdeck.core.state import AppState
from taskdeck.errors import ValidationError
from taskdeck.tasks.task_models import TaskStatus
from taskdeck.tasks.task_orchestrator import validate_task_fields
from taskdeck.tasks.task_status import derive_status

from .fakes import FakeService


async def _loaded(state: AppState, service: FakeService) -> None:
    assert await state.task_view.refresh()
    service.calls.clear()


async def _spin(n: int = 5) -> None:
    for _ in range(n):
        await asyncio.sleep(0)


def test_validate_task_fields_reports_every_bad_field() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_task_fields({"name": "  ", "scheduled_time": "", "duration_sec": "abc"})
    assert set(exc.value.fields) == {"name", "scheduled_time", "duration_sec"}

    with pytest.raises(ValidationError) as exc:
        validate_task_fields({"name": "x", "scheduled_time": "2024-01-01T10:00", "duration_sec": "-5"})
    assert exc.value.fields == {"duration_sec": "must be non-negative"}

    assert validate_task_fields({"name": " Read ", "scheduled_time": "2024-01-01T10:00", "duration_sec": " 1800 "}) == (
        "Read",
        "2024-01-01T10:00",
        1800,
    )


@pytest.mark.asyncio
async def test_add_is_visible_immediately_and_after_refetch(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    orch = state.orchestrator

    created = await orch.add({"name": "Read", "scheduled_time": "2024-01-01T10:00", "duration_sec": 1800})
    assert created is not None
    assert created.id == 4

    # Optimistic: visible before any refetch ran.
    assert [r.id for r in state.task_store][0] == 4
    assert service.count("list_tasks") == 0

    await orch.wait_idle()

    ids = [r.id for r in state.task_store]
    assert ids.count(4) == 1
    assert ids == [1, 2, 3, 4]
    assert state.task_store.get(4).name == "Read"
    assert service.count("get_metrics") == 1
    assert service.calls == ["create_task", "list_tasks", "get_metrics:all"]


@pytest.mark.asyncio
async def test_add_validation_error_makes_no_call(state: AppState, service: FakeService) -> None:
    with pytest.raises(ValidationError):
        await state.orchestrator.add({"name": "Read", "scheduled_time": "2024-01-01T10:00"})
    assert service.calls == []


@pytest.mark.asyncio
async def test_add_service_failure_changes_nothing(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    before = state.task_store.records()
    service.fail.add("create_task")

    created = await state.orchestrator.add({"name": "Read", "scheduled_time": "2024-01-01T10:00", "duration_sec": 5})
    await state.orchestrator.wait_idle()

    assert created is None
    assert state.task_store.records() == before
    assert service.calls == ["create_task"]
    assert list(state.notices.notices) == ["Failed to add task."]


@pytest.mark.asyncio
async def test_mark_done_transitions_after_refetch(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    orch = state.orchestrator
    assert derive_status(state.task_store.get(2)).status == TaskStatus.SCHEDULED

    assert await orch.mark_done(2)
    # No optimistic effect: still not done until the refetch lands.
    assert not derive_status(state.task_store.get(2)).done

    await orch.wait_idle()

    assert derive_status(state.task_store.get(2)).status == TaskStatus.DONE
    assert service.calls == ["mark_done:2", "list_tasks", "get_metrics:all"]


@pytest.mark.asyncio
async def test_mark_done_failure_leaves_store_untouched(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    before = state.task_store.records()
    service.fail.add("mark_done")

    assert not await state.orchestrator.mark_done(2)
    await state.orchestrator.wait_idle()

    assert state.task_store.records() == before
    assert service.calls == ["mark_done:2"]
    assert list(state.notices.notices) == ["Failed to mark as done."]


@pytest.mark.asyncio
async def test_delete_hides_record_during_round_trip(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    gate = service.gate("delete_task:2")

    pending = asyncio.create_task(state.orchestrator.delete(2))
    await _spin()
    assert 2 not in state.task_store
    assert service.calls == ["delete_task:2"]

    gate.set()
    assert await pending
    await state.orchestrator.wait_idle()

    assert 2 not in state.task_store
    assert [r.id for r in state.task_store] == [1, 3]
    assert service.count("list_tasks") == 1
    assert service.count("get_metrics") == 1


@pytest.mark.asyncio
async def test_failed_delete_restores_record_and_notifies_once(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    service.fail.add("delete_task:2")

    assert not await state.orchestrator.delete(2)
    await state.orchestrator.wait_idle()

    assert [r.id for r in state.task_store] == [1, 2, 3]
    assert list(state.notices.notices) == ["Failed to delete."]
    assert service.count("list_tasks") == 0
    assert service.count("get_metrics") == 0

    # A later refetch still shows it.
    await state.task_view.refresh()
    assert 2 in state.task_store


@pytest.mark.asyncio
async def test_two_rapid_deletes_out_of_order(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    orch = state.orchestrator
    gate2 = service.gate("delete_task:2")
    gate3 = service.gate("delete_task:3")

    first = asyncio.create_task(orch.delete(2))
    second = asyncio.create_task(orch.delete(3))
    await _spin()
    assert [r.id for r in state.task_store] == [1]

    # Second delete answers first; its refetch still sees task 2 on the server.
    gate3.set()
    assert await second
    await orch.wait_idle()
    assert [r.id for r in state.task_store] == [1]

    gate2.set()
    assert await first
    await orch.wait_idle()

    assert [r.id for r in state.task_store] == [1]
    assert service.count("list_tasks") == 2
    assert service.count("get_metrics") == 2
    assert list(state.notices.notices) == []


@pytest.mark.asyncio
async def test_task_refetch_starts_before_metrics_refetch(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    await state.orchestrator.delete(1)
    await state.orchestrator.wait_idle()

    assert service.calls.index("list_tasks") < service.calls.index("get_metrics:all")


@pytest.mark.asyncio
async def test_initial_load_fetches_are_independent(state: AppState, service: FakeService) -> None:
    gate = service.gate("list_tasks")

    state.orchestrator.initial_load()
    await _spin()

    # Metrics landed while the task fetch is still in flight.
    assert [r.algo for r in state.metrics.snapshot] == ["fcfs", "ljf", "lifo"]
    assert len(state.task_store) == 0

    gate.set()
    await state.orchestrator.wait_idle()
    assert [r.id for r in state.task_store] == [1, 2, 3]
    assert service.calls == ["list_tasks", "get_metrics:all"]


@pytest.mark.asyncio
async def test_on_task_change_fires_after_each_success(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    seen: list[object] = []

    def broken(_record) -> None:
        raise RuntimeError("listener bug")

    state.orchestrator.on_task_change(broken)
    state.orchestrator.on_task_change(seen.append)

    created = await state.orchestrator.add({"name": "Read", "scheduled_time": "2024-01-01T10:00", "duration_sec": 1})
    assert await state.orchestrator.mark_done(2)
    assert await state.orchestrator.delete(3)
    service.fail.add("delete_task")
    assert not await state.orchestrator.delete(1)
    await state.orchestrator.wait_idle()

    assert seen == [created, None, None]


@pytest.mark.asyncio
async def test_metrics_failure_is_isolated(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    assert await state.metrics.fetch_metrics()
    previous = state.metrics.snapshot
    service.fail.add("get_metrics")

    created = await state.orchestrator.add({"name": "Read", "scheduled_time": "2024-01-01T10:00", "duration_sec": 1})
    await state.orchestrator.wait_idle()

    assert created is not None
    assert 4 in state.task_store
    assert state.metrics.snapshot is previous
    assert list(state.notices.notices) == []


@pytest.mark.asyncio
async def test_close_discards_late_responses(state: AppState, service: FakeService) -> None:
    gate = service.gate("list_tasks")
    state.orchestrator.refresh_tasks()
    await _spin()

    state.close()
    gate.set()
    await state.orchestrator.wait_idle()

    assert len(state.task_store) == 0
    assert state.orchestrator.refresh_tasks() is None


@pytest.mark.asyncio
async def test_stale_refetch_across_delete_then_id_is_forgotten(state: AppState, service: FakeService) -> None:
    await _loaded(state, service)
    gate = service.gate("list_tasks")

    # Sent before the delete: its snapshot still contains task 2.
    state.orchestrator.refresh_tasks()
    await _spin()
    assert await state.orchestrator.delete(2)
    assert state.task_store.hidden_count == 1

    gate.set()
    await state.orchestrator.wait_idle()

    assert [r.id for r in state.task_store] == [1, 3]
    assert state.task_store.hidden_count == 0
