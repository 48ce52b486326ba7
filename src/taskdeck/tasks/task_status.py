# src/taskdeck/tasks/task_status.py

"""
Status derivation.

Pure functions: raw TaskRecord (+ "now") -> DerivedStatus. No I/O, no side effects.

A timestamp that is absent, empty or unparsable counts as "not set". That biases a record
toward SCHEDULED and never toward DONE or RUNNING.
"""

from __future__ import annotations

from datetime import datetime

from .task_models import DerivedStatus, TaskRecord, TaskStatus


def _to_local_naive(dt: datetime) -> datetime | None:
    if dt.tzinfo is None:
        return dt
    try:
        return dt.astimezone().replace(tzinfo=None)
    except (OverflowError, ValueError):
        # Offset pushes the value past datetime.min/max.
        return None


def parse_timestamp(raw: object) -> datetime | None:
    """
    Parse a service timestamp into a naive local datetime.

    Accepts "YYYY-MM-DD HH:MM[:SS]" and ISO 8601 ("T" separator, optional offset).
    Aware values are converted to local time so they compare with datetime.now().
    """
    if raw is None or isinstance(raw, bool):
        return None
    s = str(raw).strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    return _to_local_naive(dt)


def is_done(record: TaskRecord) -> bool:
    """Completion from either signal: end_time set or a truthy done flag."""
    if parse_timestamp(record.end_time) is not None:
        return True
    flag = record.done
    if isinstance(flag, str):
        return flag.strip().lower() in {"1", "true", "yes"}
    return bool(flag)


def derive_status(record: TaskRecord, *, now: datetime | None = None) -> DerivedStatus:
    scheduled_at = parse_timestamp(record.scheduled_time)
    started_at = parse_timestamp(record.start_time)
    ended_at = parse_timestamp(record.end_time)

    done = is_done(record)
    running = started_at is not None and ended_at is None and not done
    scheduled = not running and not done

    if now is None:
        now = datetime.now()
    else:
        now = _to_local_naive(now) or datetime.now()
    overdue = scheduled and scheduled_at is not None and now > scheduled_at

    if done:
        status = TaskStatus.DONE
    elif running:
        status = TaskStatus.RUNNING
    elif overdue:
        status = TaskStatus.OVERDUE
    else:
        status = TaskStatus.SCHEDULED

    return DerivedStatus(status=status, done=done, running=running, overdue=overdue)
