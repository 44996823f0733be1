# src/todo_calendar/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store/registry/history/reminders),
- asks for notification permission and loads persisted tasks.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStore, Notifier, PermissionPrompt
from ..core.state import AppState
from ..notifications.permissions import (
    PermissionStatus,
    StaticPermissionPrompt,
    request_notification_permission,
)
from ..notifications.reminders import ChannelConfig, ConsoleNotifier, ReminderScheduler
from ..storage.kv_store import SqliteKVStore
from ..tasks.history import TaskHistory
from ..tasks.task_api import reschedule_reminders
from ..tasks.task_registry import TaskRegistry

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.prefs_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    store: KeyValueStore | None = None,
    notifier: Notifier | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Settings, store and notifier are injectable to keep the app testable.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if store is None:
        _ensure_local_dirs(settings)
        store = SqliteKVStore(settings.prefs_db_path)

    registry = TaskRegistry(store)
    return AppState(
        settings=settings,
        store=store,
        registry=registry,
        history=TaskHistory(registry),
        reminders=ReminderScheduler(notifier or ConsoleNotifier()),
        channel=ChannelConfig(channel_id=settings.channel_id, channel_name=settings.channel_name),
        reminder_title=settings.reminder_title,
    )


async def start_state(state: AppState, *, prompt: PermissionPrompt | None = None) -> None:
    """
    Startup sequence: permission request, then load, then restore reminders.

    FormatError / StoreUnavailable from load propagate to the caller.
    """
    if prompt is None:
        enabled = bool(getattr(state.settings, "notifications_enabled", True))
        prompt = StaticPermissionPrompt(PermissionStatus.GRANTED if enabled else PermissionStatus.DENIED)

    state.reminders.permission = await request_notification_permission(prompt)

    await state.registry.load()
    if state.reminders.permission is PermissionStatus.GRANTED:
        await reschedule_reminders(state)
