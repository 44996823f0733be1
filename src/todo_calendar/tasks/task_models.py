# src/todo_calendar/tasks/task_models.py

from __future__ import annotations

import hashlib
import json
import random
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from .errors import FormatError

FAILED_PREFIX = "failed task: "


@dataclass(frozen=True, slots=True)
class Color:
    """
    RGBA color tag, four 8-bit channels.

    Persisted as a single packed 32-bit ARGB integer (0xAARRGGBB).
    """

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or not 0 <= v <= 255:
                raise ValueError(f"color channel {name}={v!r} is not in 0..255")

    def to_argb(self) -> int:
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b

    @classmethod
    def from_argb(cls, value: int) -> Color:
        value = int(value)
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"packed color {value!r} is not a 32-bit ARGB value")
        return cls(
            r=(value >> 16) & 0xFF,
            g=(value >> 8) & 0xFF,
            b=value & 0xFF,
            a=(value >> 24) & 0xFF,
        )


FAILURE_COLOR = Color.from_argb(0xFFF44336)


def random_color(rng: random.Random | None = None) -> Color:
    """Opaque random color for newly created tasks."""
    rng = rng or random.Random()
    return Color(rng.randrange(256), rng.randrange(256), rng.randrange(256), 255)


class TaskState(StrEnum):
    """
    Task lifecycle: scheduled -> completed | failed (or deleted, which leaves no record).
    Completed and failed are terminal.
    """

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    FAILED = "failed"


def local_naive(value: datetime) -> datetime:
    """Aware timestamps become naive local time; naive ones are taken as local already."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def day_key(value: date | datetime | str) -> date:
    """Normalize a calendar key to a date-only value (time of day dropped)."""
    if isinstance(value, datetime):
        return local_naive(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        try:
            return local_naive(datetime.fromisoformat(s)).date()
        except ValueError as e:
            raise FormatError(f"not an ISO-8601 date: {value!r}") from e
    raise TypeError(f"cannot use {type(value).__name__} as a day key")


def _parse_time(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise FormatError(f"task time must be an ISO-8601 string, got {raw!r}")
    try:
        return local_naive(datetime.fromisoformat(raw.strip()))
    except ValueError as e:
        raise FormatError(f"unparseable task time: {raw!r}") from e


@dataclass(frozen=True, slots=True)
class Task:
    text: str
    color: Color
    time: datetime
    is_completed: bool = False

    def __post_init__(self) -> None:
        # All comparisons (overdue check, reminders) use naive local clocks.
        if isinstance(self.time, datetime) and self.time.tzinfo is not None:
            object.__setattr__(self, "time", local_naive(self.time))

    def with_changes(self, **changes: Any) -> Task:
        """Copy with the given fields replaced; the rest stay as they are."""
        return replace(self, **changes)

    def is_overdue(self, now: datetime) -> bool:
        return self.time < now

    def as_failed(self) -> Task:
        return self.with_changes(text=f"{FAILED_PREFIX}{self.text}", color=FAILURE_COLOR)

    @property
    def is_failed(self) -> bool:
        return not self.is_completed and self.text.startswith(FAILED_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "color": self.color.to_argb(),
            "time": self.time.isoformat(),
            "isCompleted": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Task:
        if not isinstance(data, Mapping):
            raise FormatError(f"task record must be a mapping, got {type(data).__name__}")

        missing = [k for k in ("text", "color", "time", "isCompleted") if k not in data]
        if missing:
            raise FormatError(f"task record is missing keys: {', '.join(missing)}")

        text = data["text"]
        if not isinstance(text, str):
            raise FormatError(f"task text must be a string, got {text!r}")

        color_raw = data["color"]
        if not isinstance(color_raw, int) or isinstance(color_raw, bool):
            raise FormatError(f"task color must be an integer, got {color_raw!r}")
        if not 0 <= color_raw <= 0xFFFFFFFF:
            raise FormatError(f"task color {color_raw!r} is not a 32-bit ARGB value")

        completed = data["isCompleted"]
        if not isinstance(completed, bool):
            raise FormatError(f"isCompleted must be a boolean, got {completed!r}")

        return cls(
            text=text,
            color=Color.from_argb(color_raw),
            time=_parse_time(data["time"]),
            is_completed=completed,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, source: str) -> Task:
        try:
            data = json.loads(source)
        except json.JSONDecodeError as e:
            raise FormatError(f"task JSON is malformed: {e}") from e
        return cls.from_dict(data)

    def reminder_id(self) -> int:
        """Stable notification id derived from the task's content (31-bit)."""
        canon = json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=False)
        digest = hashlib.sha1(canon.encode("utf-8")).hexdigest()
        return int(digest[:8], 16) & 0x7FFFFFFF
