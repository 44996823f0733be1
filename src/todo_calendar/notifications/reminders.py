# src/todo_calendar/notifications/reminders.py

from __future__ import annotations

"""
Reminder scheduler.

Fire-once local reminders for scheduled tasks. A small polling loop:
- picks reminders whose trigger time has arrived,
- drops them from the pending set (fire-once),
- hands them to an injected Notifier port.

How a reminder is shown (console line, desktop popup...) belongs to the notifier.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import Notifier
from ..tasks.errors import PermissionDenied
from ..tasks.task_models import local_naive
from .permissions import PermissionStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ChannelConfig:
    channel_id: str = "channelId"
    channel_name: str = "channelName"
    importance: str = "high"
    priority: str = "high"


@dataclass(slots=True, frozen=True)
class Reminder:
    reminder_id: int
    title: str
    body: str
    trigger_time: datetime
    channel: ChannelConfig


class ReminderScheduler:
    def __init__(
        self,
        notifier: Notifier,
        *,
        clock: Callable[[], datetime] = datetime.now,
        permission: PermissionStatus = PermissionStatus.GRANTED,
    ) -> None:
        self._notifier = notifier
        self._clock = clock
        self._pending: dict[int, Reminder] = {}
        self.permission = permission

    def schedule(
        self,
        reminder_id: int,
        title: str,
        body: str,
        trigger_time: datetime,
        channel: ChannelConfig | None = None,
    ) -> bool:
        """
        Register a fire-once reminder. Re-using an id replaces the earlier one.

        Returns False (and schedules nothing) when trigger_time is already past.
        Raises PermissionDenied when notifications are not allowed.
        """
        if self.permission is not PermissionStatus.GRANTED:
            raise PermissionDenied(f"notification permission is {self.permission.value}")

        trigger_time = local_naive(trigger_time)
        if trigger_time < self._clock():
            logger.debug("Reminder %s not scheduled: trigger %s already past", reminder_id, trigger_time)
            return False

        self._pending[reminder_id] = Reminder(
            reminder_id=reminder_id,
            title=title,
            body=body,
            trigger_time=trigger_time,
            channel=channel or ChannelConfig(),
        )
        logger.info("Reminder %s scheduled at %s", reminder_id, trigger_time)
        return True

    def cancel(self, reminder_id: int) -> bool:
        removed = self._pending.pop(reminder_id, None) is not None
        if removed:
            logger.info("Reminder %s cancelled", reminder_id)
        return removed

    def pending(self) -> list[Reminder]:
        return sorted(self._pending.values(), key=lambda r: (r.trigger_time, r.reminder_id))

    async def fire_due(self, now: datetime | None = None) -> list[Reminder]:
        """Deliver every reminder whose trigger time is <= now. Returns what was fired."""
        now = now or self._clock()
        due = [r for r in self.pending() if r.trigger_time <= now]

        fired: list[Reminder] = []
        for reminder in due:
            # Fire-once: drop before delivery so a failing notifier is not retried.
            self._pending.pop(reminder.reminder_id, None)
            try:
                await self._notifier.notify(
                    reminder_id=reminder.reminder_id,
                    title=reminder.title,
                    body=reminder.body,
                    channel=reminder.channel,
                )
            except Exception:
                logger.exception("Reminder delivery failed id=%s", reminder.reminder_id)
                continue
            fired.append(reminder)
            logger.info("Reminder %s fired", reminder.reminder_id)
        return fired

    async def run(self, *, interval_seconds: float = 5.0) -> None:
        """
        Polling loop. Every interval_seconds fire whatever is due.

        To stop the loop, cancel the coroutine/task.
        """
        sleep_s = max(0.01, float(interval_seconds))
        while True:
            try:
                await self.fire_due()
            except Exception:
                logger.exception("fire_due failed")
            await asyncio.sleep(sleep_s)


class ConsoleNotifier:
    """Prints reminders to stdout."""

    def __init__(self, *, stream=None) -> None:
        self._stream = stream

    async def notify(
        self,
        *,
        reminder_id: int,
        title: str,
        body: str,
        channel: ChannelConfig,
    ) -> None:
        stamp = datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")
        print(f"\n[{stamp}] [{title}] {body}", file=self._stream, flush=True)
