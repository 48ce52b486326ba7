# src/taskdeck/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState
from ..errors import ValidationError
from ..tasks.task_status import derive_status
from .render import render_algo, render_metrics, render_task_list

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        nparams = len(inspect.signature(handler).parameters)
        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _list_text(state: AppState) -> str:
    return render_task_list(state.task_store.records())


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    return _list_text(state)


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    raw = " ".join(args)
    pieces = [p.strip() for p in raw.split("|")]
    if len(pieces) != 3:
        return "Usage: /add <name> | <scheduled_time> | <duration_sec>"

    fields = {"name": pieces[0], "scheduled_time": pieces[1], "duration_sec": pieces[2]}
    try:
        created = await state.orchestrator.add(fields)
    except ValidationError as e:
        logger.debug("Add rejected: %s", e)
        return "Please fill all fields: " + ", ".join(f"{k} {v}" for k, v in e.fields.items())

    # None: create failed (notice already shown) or the service answered without a record.
    if created is not None and emit is not None:
        emit(f"Added task #{created.id} {created.name}")
    await state.orchestrator.wait_idle()
    return _list_text(state)


async def cmd_done(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /done <id>"
    task_id = args[0]

    record = state.task_store.get(task_id)
    if record is not None and derive_status(record).done:
        return f"Task #{task_id} is already done."

    await state.orchestrator.mark_done(task_id)
    await state.orchestrator.wait_idle()
    return _list_text(state)


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /delete <id>"
    await state.orchestrator.delete(args[0])
    await state.orchestrator.wait_idle()
    return _list_text(state)


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    state.orchestrator.refresh_tasks()
    state.orchestrator.fetch_metrics()
    await state.orchestrator.wait_idle()
    return _list_text(state) + "\n" + render_metrics(state.metrics.snapshot)


async def cmd_metrics(state: AppState, args: list[str]) -> str:
    if not args:
        return render_metrics(state.metrics.snapshot)

    result = await state.metrics.fetch_algo(args[0])
    if result is None:
        return f"No metrics for {args[0]}."
    return render_algo(result)


registry.register("help", cmd_help, "show this help", aliases=["h", "?"])
registry.register("list", cmd_list, "show the task list", aliases=["ls"])
registry.register("add", cmd_add, "add a task: /add <name> | <scheduled_time> | <duration_sec>")
registry.register("done", cmd_done, "mark a task as done: /done <id>")
registry.register("delete", cmd_delete, "delete a task: /delete <id>", aliases=["rm"])
registry.register("refresh", cmd_refresh, "refetch tasks and metrics")
registry.register("metrics", cmd_metrics, "show metrics, or fetch one algorithm: /metrics [fcfs|ljf|lifo]")
