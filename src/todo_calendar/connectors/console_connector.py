# src/todo_calendar/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.events import ChangeEvent, ChangeKind

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    def on_change(event: ChangeEvent) -> None:
        # The registry already told us what happened; only failed auto-archives need a nudge.
        if event.kind is ChangeKind.FAILED:
            logger.info("Task on %s went straight to history (past due).", event.day)

    unsubscribe = state.registry.subscribe(on_change)
    try:
        while True:
            try:
                prompt = f"{state.selected_day.isoformat()} > "
                line = (await asyncio.to_thread(input, prompt)).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not line:
                continue

            if line.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                response = await command_registry.handle(state, line)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is None:
                response = "Commands start with '/'. Use /help to list them."
            _print_ts(response)
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
