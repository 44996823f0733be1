# tests/test_task_registry.py

from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone

import pytest

from todo_calendar.storage.kv_store import MemoryKVStore
from todo_calendar.tasks.errors import FormatError, StoreUnavailable
from todo_calendar.tasks.events import ChangeKind
from todo_calendar.tasks.task_models import FAILURE_COLOR, Color, Task, TaskState
from todo_calendar.tasks.task_registry import COMPLETED_TASKS_KEY, TASKS_KEY, TaskRegistry

DAY = date(2024, 6, 1)


@pytest.mark.asyncio
async def test_add_then_complete_scenario(registry, clock) -> None:
    task = Task(text="Buy milk", color=Color(1, 2, 3), time=clock() + timedelta(hours=1))

    assert await registry.add_task(DAY, task) is TaskState.SCHEDULED
    items = registry.tasks_for_day(DAY)
    assert len(items) == 1
    assert items[0].text == "Buy milk"

    done = await registry.mark_completed(DAY, task)
    assert registry.tasks_for_day(DAY) == []
    archived = registry.archived_tasks()
    assert len(archived) == 1
    assert archived[0].is_completed is True
    assert archived[0] == task.with_changes(is_completed=True) == done


@pytest.mark.asyncio
async def test_past_task_is_archived_as_failed(registry, clock) -> None:
    task = Task(text="Call mom", color=Color(1, 2, 3), time=clock() - timedelta(days=1))

    assert await registry.add_task(DAY, task) is TaskState.FAILED
    assert registry.tasks_for_day(DAY) == []
    archived = registry.archived_tasks()
    assert len(archived) == 1
    assert archived[0].text == "failed task: Call mom"
    assert archived[0].color == FAILURE_COLOR


@pytest.mark.asyncio
async def test_time_equal_to_now_is_not_past(registry, clock) -> None:
    task = Task(text="Right now", color=Color(1, 2, 3), time=clock())
    assert await registry.add_task(DAY, task) is TaskState.SCHEDULED
    assert registry.archived_tasks() == ()


@pytest.mark.asyncio
async def test_future_add_leaves_archive_unchanged(registry, make_task) -> None:
    before = registry.archived_tasks()
    await registry.add_task(DAY, make_task(hour=12))
    await registry.add_task(DAY, make_task(hour=12))
    assert registry.archived_tasks() == before
    # Duplicates by value are distinct entries.
    assert len(registry.tasks_for_day(DAY)) == 2


@pytest.mark.asyncio
async def test_day_key_is_normalized(registry, make_task) -> None:
    await registry.add_task(datetime(2024, 6, 1, 15, 45), make_task())
    assert len(registry.tasks_for_day(DAY)) == 1
    assert len(registry.tasks_for_day(datetime(2024, 6, 1, 0, 0))) == 1
    assert len(registry.tasks_for_day("2024-06-01")) == 1


@pytest.mark.asyncio
async def test_delete_removes_first_equal_entry_and_missing_is_noop(registry, make_task) -> None:
    a = make_task("a")
    b = make_task("b")
    await registry.add_task(DAY, a)
    await registry.add_task(DAY, b)
    await registry.add_task(DAY, a)

    assert await registry.delete_task(DAY, a) is True
    assert registry.tasks_for_day(DAY) == [b, a]

    assert await registry.delete_task(DAY, make_task("never added")) is False
    assert await registry.delete_task(date(2030, 1, 1), a) is False
    assert registry.tasks_for_day(DAY) == [b, a]


@pytest.mark.asyncio
async def test_edit_replaces_task(registry, make_task) -> None:
    old = make_task("old", hour=10)
    new = make_task("new", hour=11)
    await registry.add_task(DAY, old)

    assert await registry.edit_task(DAY, old, new) is TaskState.SCHEDULED
    assert registry.tasks_for_day(DAY) == [new]


@pytest.mark.asyncio
async def test_edit_into_the_past_archives_as_failed(registry, make_task) -> None:
    old = make_task("meeting", hour=10)
    await registry.add_task(DAY, old)

    past = make_task("meeting", hour=8)
    assert await registry.edit_task(DAY, old, past) is TaskState.FAILED
    assert registry.tasks_for_day(DAY) == []
    assert registry.archived_tasks()[-1].text == "failed task: meeting"


@pytest.mark.asyncio
async def test_edit_on_empty_day_creates_list(registry, make_task) -> None:
    new = make_task("fresh", day=2)
    await registry.edit_task(date(2024, 6, 2), make_task("missing", day=2), new)
    assert registry.tasks_for_day(date(2024, 6, 2)) == [new]


@pytest.mark.asyncio
async def test_every_mutation_persists_both_keys(registry, store, make_task) -> None:
    task = make_task()
    await registry.add_task(DAY, task)
    assert store.writes == [TASKS_KEY, COMPLETED_TASKS_KEY]

    await registry.mark_completed(DAY, task)
    assert store.writes[-2:] == [TASKS_KEY, COMPLETED_TASKS_KEY]

    assert json.loads(store.data[TASKS_KEY]) == {}
    archived = json.loads(store.data[COMPLETED_TASKS_KEY])
    assert archived == [task.with_changes(is_completed=True).to_dict()]


@pytest.mark.asyncio
async def test_persisted_layout_and_reload(store, clock, make_task) -> None:
    reg = TaskRegistry(store, clock=clock)
    t1 = make_task("a", hour=10)
    t2 = make_task("b", hour=9, day=3)
    await reg.add_task(DAY, t1)
    await reg.add_task(date(2024, 6, 3), t2)
    await reg.add_task(DAY, make_task("late", hour=7))

    days = json.loads(store.data[TASKS_KEY])
    assert days == {"2024-06-01": [t1.to_dict()], "2024-06-03": [t2.to_dict()]}

    fresh = TaskRegistry(store, clock=clock)
    await fresh.load()
    assert fresh.tasks_for_day(DAY) == [t1]
    assert fresh.tasks_for_day(date(2024, 6, 3)) == [t2]
    assert [t.text for t in fresh.archived_tasks()] == ["failed task: late"]
    assert fresh.days_with_tasks() == [DAY, date(2024, 6, 3)]


@pytest.mark.asyncio
async def test_load_with_absent_keys_is_empty(registry) -> None:
    await registry.load()
    assert registry.tasks_for_day(DAY) == []
    assert registry.archived_tasks() == ()
    assert registry.days_with_tasks() == []


@pytest.mark.asyncio
async def test_load_replaces_in_memory_state(registry, store, make_task) -> None:
    await registry.add_task(DAY, make_task("kept in memory only"))
    store.data.clear()
    await registry.load()
    assert registry.tasks_for_day(DAY) == []


@pytest.mark.asyncio
async def test_load_merges_legacy_keys_with_time_of_day(clock) -> None:
    item = {"text": "legacy", "color": 4294198070, "time": "2024-06-01T10:00:00.000", "isCompleted": False}
    store = MemoryKVStore(
        {
            TASKS_KEY: json.dumps(
                {"2024-06-01T00:00:00.000": [item], "2024-06-01T13:37:00.000": [item]}
            ),
            COMPLETED_TASKS_KEY: json.dumps([]),
        }
    )
    reg = TaskRegistry(store, clock=clock)
    await reg.load()
    assert len(reg.tasks_for_day(DAY)) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {TASKS_KEY: "{not json"},
        {TASKS_KEY: "[]"},
        {TASKS_KEY: json.dumps({"2024-06-01": "nope"})},
        {TASKS_KEY: json.dumps({"someday": []})},
        {COMPLETED_TASKS_KEY: json.dumps({"a": 1})},
        {COMPLETED_TASKS_KEY: json.dumps([{"text": "no time"}])},
    ],
)
async def test_load_malformed_raises_format_error(clock, make_task, data) -> None:
    reg = TaskRegistry(MemoryKVStore(data), clock=clock)
    with pytest.raises(FormatError):
        await reg.load()


@pytest.mark.asyncio
async def test_observers_are_notified(registry, make_task) -> None:
    events = []
    unsubscribe = registry.subscribe(events.append)

    task = make_task()
    await registry.load()
    await registry.add_task(DAY, task)
    await registry.add_task(DAY, make_task("late", hour=6))
    await registry.delete_task(DAY, task)

    assert [e.kind for e in events] == [
        ChangeKind.LOADED,
        ChangeKind.ADDED,
        ChangeKind.FAILED,
        ChangeKind.DELETED,
    ]
    assert events[1].day == DAY

    unsubscribe()
    await registry.add_task(DAY, task)
    assert len(events) == 4


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_mutation(registry, make_task) -> None:
    def boom(_event) -> None:
        raise RuntimeError("listener bug")

    seen = []
    registry.subscribe(boom)
    registry.subscribe(seen.append)
    await registry.add_task(DAY, make_task())
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_store_failure_surfaces_and_still_notifies(registry, store, make_task) -> None:
    events = []
    registry.subscribe(events.append)
    store.available = False

    with pytest.raises(StoreUnavailable):
        await registry.add_task(DAY, make_task())

    # In-memory change stands; observers were told.
    assert len(registry.tasks_for_day(DAY)) == 1
    assert [e.kind for e in events] == [ChangeKind.ADDED]


@pytest.mark.asyncio
async def test_archived_view_is_read_only(registry, make_task) -> None:
    await registry.add_task(DAY, make_task("late", hour=6))
    view = registry.archived_tasks()
    assert isinstance(view, tuple)

    listing = registry.tasks_for_day(DAY)
    listing.append(make_task("sneaky"))
    assert registry.tasks_for_day(DAY) == []


@pytest.mark.asyncio
async def test_offset_timestamps_work_with_a_naive_clock(registry, store, clock) -> None:
    future = Task(text="utc", color=Color(1, 2, 3), time=datetime(2030, 1, 1, tzinfo=timezone.utc))
    past = Task(text="old utc", color=Color(1, 2, 3), time=datetime(2020, 1, 1, tzinfo=timezone.utc))

    assert await registry.add_task(DAY, future) is TaskState.SCHEDULED
    assert await registry.add_task(DAY, past) is TaskState.FAILED

    store.data[TASKS_KEY] = json.dumps(
        {"2030-01-01": [{"text": "z", "color": 1, "time": "2030-01-01T10:00:00.000Z", "isCompleted": False}]}
    )
    await registry.load()
    loaded = registry.tasks_for_day(date(2030, 1, 1))
    assert len(loaded) == 1
    assert loaded[0].time.tzinfo is None
    edited = loaded[0].with_changes(text="z2")
    assert await registry.edit_task(date(2030, 1, 1), loaded[0], edited) is TaskState.SCHEDULED
