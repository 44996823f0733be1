# src/todo_calendar/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The registry and reminder scheduler depend on Protocols instead of concrete
implementations, so stores and notification backends stay swappable in tests.
"""

from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..notifications.permissions import PermissionStatus
    from ..notifications.reminders import ChannelConfig


class KeyValueStore(Protocol):
    """Flat async string store (the only I/O boundary of the registry)."""

    def get_string(self, key: str) -> Awaitable[str | None]: ...

    def set_string(self, key: str, value: str) -> Awaitable[None]: ...


class Notifier(Protocol):
    """Delivers a fired reminder to the user (console, desktop, push...)."""

    def notify(
            self,
            *,
            reminder_id: int,
            title: str,
            body: str,
            channel: ChannelConfig,
    ) -> Awaitable[None]: ...


class PermissionPrompt(Protocol):
    def request(self) -> Awaitable[PermissionStatus]: ...

    def open_settings(self) -> None: ...
