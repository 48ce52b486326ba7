# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the HTTP client and the presentation layer swappable and makes testing easier.
"""

from typing import Any, Awaitable, Callable, Protocol

RefreshCallback = Callable[[], Awaitable[Any]]
# Supplied by whichever component owns a view ("refresh task view", "refresh metrics view").

TaskChangeListener = Callable[[Any], None]
# Called with the created TaskRecord after add, or None after done/delete.


class TaskService(Protocol):
    """Remote task CRUD. Every call either resolves or raises ServiceError/DataShapeError."""

    def list_tasks(self) -> Awaitable[Any]: ...

    def create_task(self, *, name: str, scheduled_time: str, duration_sec: int) -> Awaitable[Any]: ...

    def mark_done(self, task_id: Any) -> Awaitable[Any]: ...

    def delete_task(self, task_id: Any) -> Awaitable[Any]: ...


class MetricsService(Protocol):
    """Precomputed scheduling metrics; algo is "all" or a single algorithm key."""

    def get_metrics(self, algo: str = "all") -> Awaitable[Any]: ...


class Notifier(Protocol):
    """
    Presentation-side port for non-blocking, user-visible notices
    (e.g. "Failed to delete."). The core never blocks on it.
    """

    def notify(self, text: str) -> None: ...
