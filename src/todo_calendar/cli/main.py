# src/todo_calendar/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads persisted tasks, then runs:
- the console REPL,
- the reminder polling loop (background asyncio task).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys

from ..cli.bootstrap import create_initial_state, start_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.errors import FormatError, StoreUnavailable

logger = logging.getLogger(__name__)


async def _run(settings) -> int:
    try:
        state = create_initial_state(settings=settings)
        await start_state(state)
    except FormatError as e:
        logger.error("Stored tasks are unreadable: %s", e)
        print(f"Stored tasks are unreadable: {e}", file=sys.stderr)
        return 2
    except StoreUnavailable as e:
        logger.error("Task store unavailable: %s", e)
        print(f"Task store unavailable: {e}", file=sys.stderr)
        return 2

    reminder_loop = asyncio.create_task(
        state.reminders.run(interval_seconds=settings.reminder_poll_seconds)
    )
    try:
        await run_console_loop(state)
    finally:
        reminder_loop.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reminder_loop
    return 0


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)
    logger.info("Starting %s...", settings.app_name)

    try:
        code = asyncio.run(_run(settings))
    except KeyboardInterrupt:
        code = 0
    logger.info("Bye.")
    sys.exit(code)


if __name__ == "__main__":
    main()
