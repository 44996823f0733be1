# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_calendar.core.state import AppState
from todo_calendar.notifications.reminders import ReminderScheduler
from todo_calendar.storage.kv_store import MemoryKVStore
from todo_calendar.tasks.history import TaskHistory
from todo_calendar.tasks.task_models import Color, Task
from todo_calendar.tasks.task_registry import TaskRegistry

from .fakes import FakeClock, FakeNotifier

NOW = datetime(2024, 6, 1, 9, 0, 0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def store() -> MemoryKVStore:
    return MemoryKVStore()


@pytest.fixture()
def registry(store: MemoryKVStore, clock: FakeClock) -> TaskRegistry:
    return TaskRegistry(store, clock=clock)


@pytest.fixture()
def make_task():
    def _make(text: str = "Buy milk", hour: int = 10, minute: int = 0, day: int = 1) -> Task:
        return Task(text=text, color=Color(10, 20, 30), time=datetime(2024, 6, day, hour, minute))

    return _make


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="TodoCalendar",
        log_level="WARNING",
        data_dir=tmp_path,
        prefs_db_path=tmp_path / "prefs.sqlite3",
        notifications_enabled=True,
        reminder_poll_seconds=0.5,
        reminder_title="Task Reminder",
        channel_id="channelId",
        channel_name="channelName",
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def state(settings, store, registry, clock, notifier) -> AppState:
    """
    AppState wired with an in-memory store and a fixed clock.
    """
    state = AppState(
        settings=settings,
        store=store,
        registry=registry,
        history=TaskHistory(registry),
        reminders=ReminderScheduler(notifier, clock=clock),
    )
    state.selected_day = NOW.date()
    return state
