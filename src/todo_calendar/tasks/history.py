# src/todo_calendar/tasks/history.py

from __future__ import annotations

import logging
from collections.abc import Callable

from .events import Listener
from .task_models import Task
from .task_registry import TaskRegistry

logger = logging.getLogger(__name__)


class TaskHistory:
    """
    History log of completed and failed tasks.

    Backed by the registry's archive: one list, one writer, one persisted key
    ("completedTasks"). Reloading re-reads only that key.
    """

    def __init__(self, registry: TaskRegistry) -> None:
        self._registry = registry

    async def reload(self) -> None:
        await self._registry.load_archive()

    async def add_completed_task(self, task: Task) -> Task:
        done = task if task.is_completed else task.with_changes(is_completed=True)
        await self._registry.archive(done)
        logger.debug("History entry added text=%r", done.text)
        return done

    @property
    def completed_tasks(self) -> tuple[Task, ...]:
        return self._registry.archived_tasks()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._registry.subscribe(listener)

    def __len__(self) -> int:
        return len(self._registry.archived_tasks())
