# src/todo_calendar/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime, time

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.errors import FormatError, StoreUnavailable
from ..tasks.task_models import Task, TaskState, day_key

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

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

    async def handle(self, state: AppState, line: str) -> str | None:
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

        try:
            return await handler(state, args)
        except StoreUnavailable as e:
            logger.error("Store unavailable during /%s: %s", name, e)
            return f"Could not save: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_day(raw: str) -> date:
    if raw.lower() == "today":
        return date.today()
    return day_key(raw)


def _parse_time(raw: str) -> time:
    try:
        return datetime.strptime(raw, "%H:%M").time()
    except ValueError as e:
        raise ValueError(f"time must be HH:MM, got {raw!r}") from e


def _pick(state: AppState, raw: str) -> Task:
    tasks = state.registry.tasks_for_day(state.selected_day)
    try:
        idx = int(raw)
    except ValueError as e:
        raise ValueError(f"task number expected, got {raw!r}") from e
    if not 1 <= idx <= len(tasks):
        raise ValueError(f"no task #{idx} on {state.selected_day.isoformat()}")
    return tasks[idx - 1]


def _fmt_task(i: int, task: Task, *, with_date: bool = False) -> str:
    stamp = task.time.strftime("%b %d, %Y %I:%M %p" if with_date else "%I:%M %p")
    mark = "x" if task.is_completed else ("!" if task.is_failed else " ")
    return f"{i:>2}. [{mark}] {stamp}  {task.text}"


def _outcome(task: Task, outcome: TaskState, verb: str) -> str:
    if outcome is TaskState.FAILED:
        return f"Time already passed; moved to history as failed: {task.text}"
    return f"{verb}: {task.text} at {task.time.strftime('%I:%M %p')}"


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_day(state: AppState, args: list[str]) -> str:
    """
    /day             -> show selected day
    /day YYYY-MM-DD  -> select a day
    """
    if args:
        try:
            state.selected_day = _parse_day(args[0])
        except FormatError as e:
            return str(e)
    return f"Selected day: {state.selected_day.isoformat()}"


async def cmd_list(state: AppState, args: list[str]) -> str:
    try:
        day = _parse_day(args[0]) if args else state.selected_day
    except FormatError as e:
        return str(e)
    tasks = state.registry.tasks_for_day(day)
    if not tasks:
        return f"No tasks for {day.isoformat()}"
    lines = [f"Tasks for {day.isoformat()}:"]
    lines.extend(_fmt_task(i, t) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """/add HH:MM text  -> add a task on the selected day"""
    if len(args) < 2:
        return "Usage: /add HH:MM task text"
    try:
        at = _parse_time(args[0])
        task, outcome = await task_api.create_task(state, state.selected_day, " ".join(args[1:]), at)
    except ValueError as e:
        return str(e)
    return _outcome(task, outcome, "Added")


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit N HH:MM text  -> change task #N on the selected day"""
    if len(args) < 3:
        return "Usage: /edit N HH:MM new text"
    try:
        old = _pick(state, args[0])
        at = _parse_time(args[1])
        task, outcome = await task_api.edit_task(state, state.selected_day, old, " ".join(args[2:]), at)
    except ValueError as e:
        return str(e)
    return _outcome(task, outcome, "Saved")


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /delete N"
    try:
        task = _pick(state, args[0])
    except ValueError as e:
        return str(e)
    await task_api.delete_task(state, state.selected_day, task)
    return f"Deleted: {task.text}"


async def cmd_done(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /done N"
    try:
        task = _pick(state, args[0])
    except ValueError as e:
        return str(e)
    await task_api.complete_task(state, state.selected_day, task)
    return f"Completed: {task.text}"


async def cmd_history(state: AppState, args: list[str]) -> str:
    tasks = state.history.completed_tasks
    if not tasks:
        return "No completed tasks."
    lines = ["Task history:"]
    lines.extend(_fmt_task(i, t, with_date=True) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


async def cmd_days(state: AppState, args: list[str]) -> str:
    days = state.registry.days_with_tasks()
    if not days:
        return "No scheduled tasks."
    return "Days with tasks:\n" + "\n".join(
        f"  {d.isoformat()} ({len(state.registry.tasks_for_day(d))})" for d in days
    )


async def cmd_reminders(state: AppState, args: list[str]) -> str:
    pending = state.reminders.pending()
    if not pending:
        return f"No pending reminders (notifications: {state.reminders.permission.value})."
    lines = ["Pending reminders:"]
    for r in pending:
        lines.append(f"  {r.trigger_time.strftime('%Y-%m-%d %H:%M')}  {r.body}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("day", cmd_day, help_text="Show or select the day: /day [YYYY-MM-DD|today].")
registry.register("list", cmd_list, help_text="List tasks: /list [YYYY-MM-DD].", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task on the selected day: /add HH:MM text.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit N HH:MM text.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete N.", aliases=["rm"])
registry.register("done", cmd_done, help_text="Mark a task completed: /done N.")
registry.register("history", cmd_history, help_text="Show completed and failed tasks.")
registry.register("days", cmd_days, help_text="List days that have scheduled tasks.")
registry.register("reminders", cmd_reminders, help_text="List pending reminders.")
