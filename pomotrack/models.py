import time
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from pomotrack.errors import ValidationError

SETTINGS_VERSION = 1
DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
TASK_TITLE_LIMIT = 120


def new_task_id(after: int | None = None) -> int:
    """Millisecond creation timestamp, bumped past ``after`` so ids stay unique."""
    candidate = time.time_ns() // 1_000_000
    if after is not None and candidate <= after:
        return after + 1
    return candidate


def parse_title(raw: str) -> str:
    title = (raw or "").strip()
    if not title:
        raise ValidationError("Task title cannot be empty")
    if len(title) > TASK_TITLE_LIMIT:
        raise ValidationError(f"Task title is longer than {TASK_TITLE_LIMIT} characters")
    return title


def parse_minutes(raw: str | int) -> int:
    try:
        minutes = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"Not a whole number of minutes: {raw!r}") from None
    if minutes <= 0:
        raise ValidationError("Durations must be at least one minute")
    return minutes


class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str = Field(min_length=1)
    completed: bool = False
    pomodoros: int = Field(default=0, ge=0)
    pomodoro_goal: int = Field(default=1, ge=1, alias="pomodoroGoal")

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.id / 1000)

    @property
    def goal_reached(self) -> bool:
        return self.pomodoros >= self.pomodoro_goal

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def sort_for_display(tasks: list[Task]) -> list[Task]:
    # sorted() is stable, so insertion order survives within each group
    return sorted(tasks, key=lambda task: task.completed)


class Settings(BaseModel):
    """Per-user preferences as stored remotely.

    Accepts the stored record keys (``pomodoroTime``, ``breakTime``, ``darkMode``,
    ``totalBreaks``) as well as the field names. Missing or unusable values fall
    back to the defaults here, so callers never have to re-check them. Unknown
    profile fields such as ``name`` or ``role`` are kept untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    version: int = SETTINGS_VERSION
    work_minutes: int = Field(default=DEFAULT_WORK_MINUTES, alias="pomodoroTime")
    break_minutes: int = Field(default=DEFAULT_BREAK_MINUTES, alias="breakTime")
    dark_mode: bool = Field(default=False, alias="darkMode")
    total_breaks: int = Field(default=0, alias="totalBreaks")

    @field_validator("work_minutes", "break_minutes", mode="before")
    @classmethod
    def _positive_or_default(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        if isinstance(value, bool):
            return default
        try:
            minutes = int(value)
        except (TypeError, ValueError):
            return default
        return minutes if minutes > 0 else default

    @field_validator("total_breaks", mode="before")
    @classmethod
    def _count_or_zero(cls, value: Any) -> int:
        if isinstance(value, bool):
            return 0
        try:
            count = int(value)
        except (TypeError, ValueError):
            return 0
        return max(0, count)

    @field_validator("dark_mode", mode="before")
    @classmethod
    def _bool_or_default(cls, value: Any) -> bool:
        return value if isinstance(value, bool) else False

    @field_validator("version", mode="before")
    @classmethod
    def _known_version(cls, value: Any) -> int:
        return value if isinstance(value, int) and value > 0 else SETTINGS_VERSION

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> "Settings":
        return cls.model_validate(record or {})

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Phase(StrEnum):
    IDLE = "idle"
    WORKING = "working"
    ON_BREAK = "on_break"


class SessionSnapshot(BaseModel):
    phase: Phase = Phase.IDLE
    paused: bool = False
    minutes: int = DEFAULT_WORK_MINUTES
    seconds: int = 0
    active_task_id: int | None = None

    @property
    def remaining_seconds(self) -> int:
        return self.minutes * 60 + self.seconds

    @property
    def is_break(self) -> bool:
        return self.phase is Phase.ON_BREAK
