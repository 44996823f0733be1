# src/todo_calendar/notifications/permissions.py

from __future__ import annotations

import logging
from enum import StrEnum

from ..core.ports import PermissionPrompt

logger = logging.getLogger(__name__)


class PermissionStatus(StrEnum):
    GRANTED = "granted"
    DENIED = "denied"
    PERMANENTLY_DENIED = "permanently_denied"


async def request_notification_permission(prompt: PermissionPrompt) -> PermissionStatus:
    """
    Ask once for notification permission and log the outcome.

    Permanently denied -> point the user at the settings screen. No retries.
    """
    status = await prompt.request()
    if status is PermissionStatus.GRANTED:
        logger.info("Notification permission granted.")
    elif status is PermissionStatus.DENIED:
        logger.warning("Notification permission denied.")
    else:
        logger.warning("Notification permission permanently denied. Please enable it from settings.")
        prompt.open_settings()
    return status


class StaticPermissionPrompt:
    """Prompt with a fixed answer (console runs, tests)."""

    def __init__(self, status: PermissionStatus = PermissionStatus.GRANTED) -> None:
        self.status = status
        self.settings_opened = 0

    async def request(self) -> PermissionStatus:
        return self.status

    def open_settings(self) -> None:
        self.settings_opened += 1
        logger.info("Notifications are disabled; set TODOCAL_NOTIFICATIONS_ENABLED=1 to allow reminders.")
