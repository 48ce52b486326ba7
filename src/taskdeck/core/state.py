# src/taskdeck/core/state.py

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..metrics.refresher import MetricsRefresher
from ..tasks.task_orchestrator import MutationOrchestrator
from ..tasks.task_store import TaskStore
from ..tasks.task_view import TaskListView

logger = logging.getLogger(__name__)

# Only the most recent notices are kept; older ones are in the log file.
NOTICE_HISTORY = 50


@dataclass
class NoticeBoard:
    """
    Notifier that keeps user-visible notices and forwards them to an optional sink
    (the console prints them as they come).
    """

    sink: Callable[[str], None] | None = None
    notices: deque[str] = field(default_factory=lambda: deque(maxlen=NOTICE_HISTORY))

    def notify(self, text: str) -> None:
        self.notices.append(text)
        logger.info("Notice: %s", text)
        if self.sink is not None:
            self.sink(text)


@dataclass
class AppState:
    """
    Application state, wired in cli/bootstrap.py.

    `client` is the constructed service client (anything with aclose()).
    """

    settings: Any
    client: Any
    task_view: TaskListView
    metrics: MetricsRefresher
    orchestrator: MutationOrchestrator
    notices: NoticeBoard

    @property
    def task_store(self) -> TaskStore:
        return self.task_view.store

    def close(self) -> None:
        """Unmount both views; late responses are dropped from here on."""
        self.orchestrator.close()
        self.metrics.close()
