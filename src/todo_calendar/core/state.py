# src/todo_calendar/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..notifications.reminders import ChannelConfig, ReminderScheduler
from ..tasks.history import TaskHistory
from ..tasks.task_registry import TaskRegistry
from .ports import KeyValueStore


@dataclass
class AppState:
    """Everything the presentation layer needs, wired once in bootstrap."""

    settings: object

    store: KeyValueStore
    registry: TaskRegistry
    history: TaskHistory
    reminders: ReminderScheduler

    channel: ChannelConfig = field(default_factory=ChannelConfig)
    reminder_title: str = "Task Reminder"

    # Day the console is "looking at" (the calendar's selected day).
    selected_day: date = field(default_factory=date.today)
