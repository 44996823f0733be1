# src/todo_calendar/tasks/task_registry.py

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from ..core.ports import KeyValueStore
from .errors import FormatError
from .events import ChangeEvent, ChangeKind, ChangeNotifier, Listener
from .task_models import Task, TaskState, day_key

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
COMPLETED_TASKS_KEY = "completedTasks"

DayLike = date | datetime | str


class TaskRegistry:
    """
    Owns scheduled tasks (by calendar day) and the archive of completed/failed tasks.

    Rules:
    - a task is either scheduled or archived, never both (transitions move)
    - a task whose time is strictly before now is never scheduled; it is archived
      as failed instead
    - every mutation is followed by a full flush of both blobs to the store

    The archive has a single writer (this class); TaskHistory reads through it.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._clock = clock
        self._tasks: dict[date, list[Task]] = {}
        self._archived: list[Task] = []
        self._events = ChangeNotifier()
        self._save_lock = asyncio.Lock()

    # ---- observers ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._events.subscribe(listener)

    def _changed(self, kind: ChangeKind, day: date | None = None) -> None:
        self._events.notify(ChangeEvent(kind=kind, day=day))

    # ---- decoding helpers ----

    @staticmethod
    def _decode_json(raw: str, key: str) -> Any:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise FormatError(f"stored {key!r} is not valid JSON: {e}") from e

    @classmethod
    def _decode_days(cls, raw: str) -> dict[date, list[Task]]:
        data = cls._decode_json(raw, TASKS_KEY)
        if not isinstance(data, dict):
            raise FormatError(f"stored {TASKS_KEY!r} must be a JSON object")

        out: dict[date, list[Task]] = {}
        for key, items in data.items():
            if not isinstance(items, list):
                raise FormatError(f"tasks for {key!r} must be a list")
            day = day_key(key)
            # Older blobs may carry two keys for one day (different time of day).
            out.setdefault(day, []).extend(Task.from_dict(item) for item in items)
        return {d: ts for d, ts in out.items() if ts}

    @classmethod
    def _decode_archive(cls, raw: str) -> list[Task]:
        data = cls._decode_json(raw, COMPLETED_TASKS_KEY)
        if not isinstance(data, list):
            raise FormatError(f"stored {COMPLETED_TASKS_KEY!r} must be a JSON array")
        return [Task.from_dict(item) for item in data]

    # ---- persistence ----

    async def load(self) -> None:
        """
        Replace in-memory state with what the store holds.

        Missing keys mean "empty". Malformed data raises FormatError and leaves
        the current in-memory state untouched.
        """
        tasks_raw = await self._store.get_string(TASKS_KEY)
        archive_raw = await self._store.get_string(COMPLETED_TASKS_KEY)

        tasks = self._decode_days(tasks_raw) if tasks_raw is not None else {}
        archived = self._decode_archive(archive_raw) if archive_raw is not None else []

        self._tasks = tasks
        self._archived = archived
        logger.info(
            "Tasks loaded days=%d scheduled=%d archived=%d",
            len(tasks),
            sum(len(v) for v in tasks.values()),
            len(archived),
        )
        self._changed(ChangeKind.LOADED)

    async def load_archive(self) -> None:
        """Reload only the archive list from the store."""
        raw = await self._store.get_string(COMPLETED_TASKS_KEY)
        self._archived = self._decode_archive(raw) if raw is not None else []
        logger.debug("Archive reloaded archived=%d", len(self._archived))
        self._changed(ChangeKind.LOADED)

    def _snapshot(self) -> tuple[str, str]:
        days = {
            d.isoformat(): [t.to_dict() for t in ts]
            for d, ts in sorted(self._tasks.items())
            if ts
        }
        archived = [t.to_dict() for t in self._archived]
        return json.dumps(days, ensure_ascii=False), json.dumps(archived, ensure_ascii=False)

    async def persist(self) -> None:
        """
        Write both blobs. Writes are serialized and always carry the latest state,
        so a slow earlier save cannot overwrite a newer one.

        Raises StoreUnavailable if the store rejects a write.
        """
        async with self._save_lock:
            tasks_json, archive_json = self._snapshot()
            await self._store.set_string(TASKS_KEY, tasks_json)
            await self._store.set_string(COMPLETED_TASKS_KEY, archive_json)

    # ---- internal transitions ----

    def _remove(self, day: date, task: Task) -> bool:
        items = self._tasks.get(day)
        if not items:
            return False
        try:
            items.remove(task)
        except ValueError:
            return False
        if not items:
            del self._tasks[day]
        return True

    def _place(self, day: date, task: Task) -> TaskState:
        if task.is_overdue(self._clock()):
            failed = task.as_failed()
            self._archived.append(failed)
            logger.info("Task already past due, archived as failed day=%s time=%s", day, task.time)
            return TaskState.FAILED
        self._tasks.setdefault(day, []).append(task)
        return TaskState.SCHEDULED

    async def _commit(self, kind: ChangeKind, day: date | None = None) -> None:
        # Observers see the in-memory change even if the flush fails.
        try:
            await self.persist()
        finally:
            self._changed(kind, day)

    # ---- public API ----

    async def add_task(self, day: DayLike, task: Task) -> TaskState:
        key = day_key(day)
        state = self._place(key, task)
        logger.debug("add_task day=%s state=%s", key, state.value)
        await self._commit(ChangeKind.ADDED if state is TaskState.SCHEDULED else ChangeKind.FAILED, key)
        return state

    async def edit_task(self, day: DayLike, old_task: Task, new_task: Task) -> TaskState:
        key = day_key(day)
        if not self._remove(key, old_task):
            logger.debug("edit_task: original not found day=%s", key)
        state = self._place(key, new_task)
        await self._commit(ChangeKind.EDITED if state is TaskState.SCHEDULED else ChangeKind.FAILED, key)
        return state

    async def delete_task(self, day: DayLike, task: Task) -> bool:
        key = day_key(day)
        removed = self._remove(key, task)
        await self._commit(ChangeKind.DELETED, key)
        return removed

    async def mark_completed(self, day: DayLike, task: Task) -> Task:
        key = day_key(day)
        done = task.with_changes(is_completed=True)
        if not self._remove(key, task):
            logger.warning("mark_completed: task not scheduled on day=%s, archiving anyway", key)
        self._archived.append(done)
        await self._commit(ChangeKind.COMPLETED, key)
        return done

    async def archive(self, task: Task) -> None:
        """Append a task to the archive as-is (history log entry point)."""
        self._archived.append(task)
        await self._commit(ChangeKind.ARCHIVED)

    def tasks_for_day(self, day: DayLike) -> list[Task]:
        return list(self._tasks.get(day_key(day), ()))

    def archived_tasks(self) -> tuple[Task, ...]:
        return tuple(self._archived)

    def days_with_tasks(self) -> list[date]:
        return sorted(d for d, ts in self._tasks.items() if ts)
