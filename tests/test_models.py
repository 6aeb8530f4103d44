from datetime import datetime

import pytest

from pomotrack.errors import ValidationError
from pomotrack.models import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    TASK_TITLE_LIMIT,
    Phase,
    SessionSnapshot,
    Settings,
    Task,
    new_task_id,
    parse_minutes,
    parse_title,
    sort_for_display,
)


def test_task_defaults():
    task = Task(id=1, title="Write report")
    assert task.completed is False
    assert task.pomodoros == 0
    assert task.pomodoro_goal == 1
    assert task.goal_reached is False


def test_task_rejects_empty_title():
    with pytest.raises(Exception):
        Task(id=1, title="")


def test_task_rejects_goal_below_one():
    with pytest.raises(Exception):
        Task(id=1, title="x", pomodoroGoal=0)


def test_task_record_uses_stored_field_names():
    record = Task(id=7, title="Read", pomodoro_goal=3).to_record()
    assert record == {"id": 7, "title": "Read", "completed": False, "pomodoros": 0, "pomodoroGoal": 3}
    assert Task.model_validate(record).pomodoro_goal == 3


def test_task_created_at_comes_from_id():
    created = datetime(2024, 5, 1, 9, 30)
    task = Task(id=int(created.timestamp() * 1000), title="x")
    assert task.created_at == created


def test_new_task_id_is_unique_after_previous():
    first = new_task_id()
    assert new_task_id(after=first) > first
    assert new_task_id(after=10**15) == 10**15 + 1


@pytest.mark.parametrize("raw", ["", "   ", None], ids=["empty", "blank", "none"])
def test_parse_title_rejects_blank(raw):
    with pytest.raises(ValidationError):
        parse_title(raw)


def test_parse_title_trims():
    assert parse_title("  Write report ") == "Write report"
    assert parse_title("x" * TASK_TITLE_LIMIT) == "x" * TASK_TITLE_LIMIT


def test_parse_title_rejects_too_long():
    with pytest.raises(ValidationError, match="longer than"):
        parse_title("x" * (TASK_TITLE_LIMIT + 1))


@pytest.mark.parametrize("raw", ["0", "-3", "abc", "1.5", ""], ids=["zero", "negative", "text", "float", "empty"])
def test_parse_minutes_rejects(raw):
    with pytest.raises(ValidationError):
        parse_minutes(raw)


def test_parse_minutes_accepts_positive():
    assert parse_minutes(" 45 ") == 45
    assert parse_minutes(3) == 3


def test_sort_for_display_puts_completed_last_and_keeps_order():
    a = Task(id=1, title="A")
    b = Task(id=2, title="B", completed=True)
    c = Task(id=3, title="C")
    assert [task.title for task in sort_for_display([a, b, c])] == ["A", "C", "B"]


def test_settings_defaults():
    settings = Settings()
    assert settings.work_minutes == DEFAULT_WORK_MINUTES
    assert settings.break_minutes == DEFAULT_BREAK_MINUTES
    assert settings.dark_mode is False
    assert settings.total_breaks == 0
    assert settings.version == 1


def test_settings_from_record_applies_defaults():
    settings = Settings.from_record({"pomodoroTime": 0, "breakTime": None, "darkMode": True})
    assert settings.work_minutes == 25
    assert settings.break_minutes == 5
    assert settings.dark_mode is True


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        ({"pomodoroTime": 50, "breakTime": 10, "totalBreaks": 4}, (50, 10, 4)),
        ({"pomodoroTime": "abc", "breakTime": -1, "totalBreaks": -2}, (25, 5, 0)),
        ({"pomodoroTime": True, "totalBreaks": "7"}, (25, 5, 7)),
        (None, (25, 5, 0)),
    ],
    ids=["valid", "invalid", "coerced", "missing"],
)
def test_settings_from_record(record, expected):
    settings = Settings.from_record(record)
    assert (settings.work_minutes, settings.break_minutes, settings.total_breaks) == expected


def test_settings_keeps_profile_fields():
    settings = Settings.from_record({"name": "Alice", "role": "dev", "darkMode": "yes"})
    record = settings.to_record()
    assert record["name"] == "Alice"
    assert record["role"] == "dev"
    assert record["darkMode"] is False
    assert record["pomodoroTime"] == 25


def test_session_snapshot():
    snapshot = SessionSnapshot(phase=Phase.ON_BREAK, minutes=4, seconds=30)
    assert snapshot.remaining_seconds == 270
    assert snapshot.is_break is True
    assert SessionSnapshot().phase is Phase.IDLE
