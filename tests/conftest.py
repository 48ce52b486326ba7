# tests/conftest.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from taskdeck.cli.bootstrap import create_initial_state
from taskdeck.core.state import AppState

from .fakes import FakeService

SAMPLE_TASKS = [
    {
        "id": 1,
        "name": "Write report",
        "scheduled_time": "2024-01-01 09:00",
        "duration_sec": 60,
        "done": 1,
        "start_time": "2024-01-01 09:00:00",
        "end_time": "2024-01-01 09:01:00",
    },
    {
        "id": 2,
        "name": "Email",
        "scheduled_time": "2099-01-01 09:00",
        "duration_sec": 30,
        "done": 0,
        "start_time": "",
        "end_time": "",
    },
    {
        "id": 3,
        "name": "Gym",
        "scheduled_time": "2099-01-02 18:00",
        "duration_sec": 3600,
        "done": 0,
        "start_time": "",
        "end_time": "",
    },
]


@pytest.fixture()
def settings() -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the console.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(app_name="taskdeck-test", log_level="INFO")


@pytest.fixture()
def service() -> FakeService:
    return FakeService(tasks=SAMPLE_TASKS)


@pytest.fixture()
def state(settings: SimpleNamespace, service: FakeService) -> AppState:
    """AppState wired by the real composition root, with the fake service as client."""
    return create_initial_state(settings=settings, client=service)
