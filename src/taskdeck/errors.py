# src/taskdeck/errors.py

"""
Error taxonomy.

- ValidationError: user input is missing or malformed; raised before any call is made.
- ServiceError: the remote service failed (network, timeout, HTTP status).
- DataShapeError: the service answered, but with a payload we cannot interpret.

None of these is fatal: callers log them and fall back to previous/empty state + a notice.
"""

from __future__ import annotations


class TaskdeckError(Exception):
    """Base class for all taskdeck errors."""


class ValidationError(TaskdeckError):
    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = dict(fields)
        details = ", ".join(f"{k}: {v}" for k, v in self.fields.items())
        super().__init__(f"Invalid task: {details}" if details else "Invalid task.")


class ServiceError(TaskdeckError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DataShapeError(TaskdeckError):
    pass
