# src/todo_calendar/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import date, datetime, time

from ..core.state import AppState
from .errors import PermissionDenied
from .task_models import Task, TaskState, day_key, random_color

logger = logging.getLogger(__name__)


def _schedule_reminder(state: AppState, task: Task) -> bool:
    try:
        return state.reminders.schedule(
            task.reminder_id(),
            state.reminder_title,
            task.text,
            task.time,
            state.channel,
        )
    except PermissionDenied as e:
        logger.info("Reminder not scheduled: %s", e)
        return False


def _release_reminder(state: AppState, day: date | datetime | str, task: Task) -> None:
    # Equal tasks share one reminder id; keep it while a copy is still scheduled.
    if task in state.registry.tasks_for_day(day):
        return
    state.reminders.cancel(task.reminder_id())


async def create_task(state: AppState, day: date | datetime | str, text: str, at: time) -> tuple[Task, TaskState]:
    """
    Convenience helper: create a task on `day` at time-of-day `at`, add it and
    schedule its reminder if it stays scheduled.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("task text is required")

    key = day_key(day)
    task = Task(text=text, color=random_color(), time=datetime.combine(key, at))

    outcome = await state.registry.add_task(key, task)
    if outcome is TaskState.SCHEDULED:
        _schedule_reminder(state, task)
    return task, outcome


async def edit_task(
    state: AppState,
    day: date | datetime | str,
    old_task: Task,
    text: str,
    at: time,
) -> tuple[Task, TaskState]:
    """Replace text and time of a scheduled task; the color tag is kept."""
    text = (text or "").strip()
    if not text:
        raise ValueError("task text is required")

    key = day_key(day)
    new_task = Task(text=text, color=old_task.color, time=datetime.combine(key, at))

    try:
        outcome = await state.registry.edit_task(key, old_task, new_task)
    finally:
        _release_reminder(state, key, old_task)
    if outcome is TaskState.SCHEDULED:
        _schedule_reminder(state, new_task)
    return new_task, outcome


async def delete_task(state: AppState, day: date | datetime | str, task: Task) -> bool:
    try:
        return await state.registry.delete_task(day, task)
    finally:
        _release_reminder(state, day, task)


async def complete_task(state: AppState, day: date | datetime | str, task: Task) -> Task:
    try:
        return await state.registry.mark_completed(day, task)
    finally:
        _release_reminder(state, day, task)


async def reschedule_reminders(state: AppState) -> int:
    """Re-register reminders for every scheduled task (after a load). Returns how many."""
    n = 0
    for day in state.registry.days_with_tasks():
        for task in state.registry.tasks_for_day(day):
            if _schedule_reminder(state, task):
                n += 1
    logger.info("Reminders restored: %d", n)
    return n
