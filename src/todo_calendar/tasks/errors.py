# src/todo_calendar/tasks/errors.py

from __future__ import annotations


class TodoError(Exception):
    """Base class for task subsystem errors."""


class FormatError(TodoError, ValueError):
    """Persisted data (JSON blob, task mapping or timestamp) could not be parsed."""


class StoreUnavailable(TodoError):
    """The key-value store could not be opened, read or written."""


class PermissionDenied(TodoError):
    """A reminder was requested without notification permission."""
