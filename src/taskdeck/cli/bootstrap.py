# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- builds the service client from ClientConfig (never a module-level global),
- gives each view ownership of its own refresh operation,
- hands those refresh callbacks to the orchestrator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..config import get_settings
from ..core.state import AppState, NoticeBoard
from ..metrics.refresher import MetricsRefresher
from ..service.client import ServiceClient
from ..tasks.task_orchestrator import MutationOrchestrator
from ..tasks.task_view import TaskListView

logger = logging.getLogger(__name__)


def create_initial_state(
    *,
    settings=None,
    client: Any = None,
    notice_sink: Callable[[str], None] | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and the client injectable makes the app easier to test and avoids hidden
    global config reads. If settings is None, falls back to get_settings(); if client is None,
    a ServiceClient is built from settings.client_config().
    """
    if settings is None:
        settings = get_settings()

    if client is None:
        config = settings.client_config()
        client = ServiceClient(config)
        logger.info("Service client base_url=%s timeout_ms=%s", config.base_url, config.timeout_ms)

    task_view = TaskListView(client)
    metrics = MetricsRefresher(client)
    notices = NoticeBoard(sink=notice_sink)

    orchestrator = MutationOrchestrator(
        client,
        task_view.store,
        refresh_tasks=task_view.refresh,
        refresh_metrics=metrics.fetch_metrics,
        notifier=notices,
    )

    return AppState(
        settings=settings,
        client=client,
        task_view=task_view,
        metrics=metrics,
        orchestrator=orchestrator,
        notices=notices,
    )
