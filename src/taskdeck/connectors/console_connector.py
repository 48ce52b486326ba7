# src/taskdeck/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.render import render_metrics, render_task_list
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    if sys.stdout.isatty():
        sys.stdout.write("\033[1A\033[2K\r")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()
    else:
        print(line)


def print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def print_notice(text: str) -> None:
    print_ts(f"[!] {text}")


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL. input() runs in a worker thread so refetches scheduled by a command
    keep progressing on the event loop while the user types.
    """
    logger.info("Console connector started.")
    app_name = str(getattr(state.settings, "app_name", "taskdeck"))
    print_ts(f"[{app_name}] Use /help for commands. Use /exit to quit.\n")

    state.orchestrator.initial_load()
    await state.orchestrator.wait_idle()
    print_ts(render_task_list(state.task_store.records()))
    print_ts(render_metrics(state.metrics.snapshot))

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = await command_registry.handle(state, user_input, emit=print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list available commands."
        print_ts(response)

    logger.info("Console connector finished.")
