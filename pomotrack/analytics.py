"""Aggregate statistics over the task list.

Task ids are millisecond creation timestamps, so a task's creation date and
hour are derived from its id. Break intervals are only counted globally
(``total_breaks``), so per-hour break figures are an even share of that total.
"""

from datetime import date, timedelta

from pydantic import BaseModel

from pomotrack.errors import ValidationError
from pomotrack.models import Task


class ProductivityOverview(BaseModel):
    total_tasks: int
    completed_tasks: int
    total_pomodoros: int
    total_breaks: int
    completion_rate: float


class HourBucket(BaseModel):
    work: float = 0
    breaks: float = 0


class AnalyticsSummary(BaseModel):
    start: date
    end: date
    total_work_sessions: int
    total_break_sessions: int
    total_sessions: int
    total_work_minutes: int
    total_break_minutes: int
    total_minutes: int
    task_completion_rate: float
    productive_hours: dict[str, HourBucket]


def _completion_rate(tasks: list[Task]) -> float:
    if not tasks:
        return 0.0
    return sum(1 for task in tasks if task.completed) / len(tasks)


def productivity_overview(tasks: list[Task], total_breaks: int) -> ProductivityOverview:
    return ProductivityOverview(
        total_tasks=len(tasks),
        completed_tasks=sum(1 for task in tasks if task.completed),
        total_pomodoros=sum(task.pomodoros for task in tasks),
        total_breaks=total_breaks,
        completion_rate=_completion_rate(tasks),
    )


def default_range(today: date | None = None) -> tuple[date, date]:
    end = today or date.today()
    return end - timedelta(days=7), end


def parse_date_range(raw: str) -> tuple[date, date]:
    """Parse ``"YYYY-MM-DD YYYY-MM-DD"`` into an inclusive (start, end) pair."""
    parts = (raw or "").replace(" to ", " ").split()
    if len(parts) != 2:
        raise ValidationError("Enter a start and an end date, e.g. 2024-05-01 2024-05-07")
    try:
        start, end = (date.fromisoformat(part) for part in parts)
    except ValueError:
        raise ValidationError(f"Not a date range: {raw!r}") from None
    if start > end:
        raise ValidationError("The start date must not be after the end date")
    return start, end


def filter_by_creation(tasks: list[Task], start: date, end: date) -> list[Task]:
    return [task for task in tasks if start <= task.created_at.date() <= end]


def productive_hours(tasks: list[Task], total_breaks: int) -> dict[str, HourBucket]:
    hours: dict[str, HourBucket] = {}
    for task in tasks:
        bucket = hours.setdefault(f"{task.created_at.hour}:00", HourBucket())
        bucket.work += task.pomodoros
    if hours:
        share = total_breaks / len(hours)
        for bucket in hours.values():
            bucket.breaks += share
    return hours


def analytics_summary(
    tasks: list[Task],
    total_breaks: int,
    work_minutes: int,
    break_minutes: int,
    start: date | None = None,
    end: date | None = None,
) -> AnalyticsSummary:
    default_start, default_end = default_range()
    start = start or default_start
    end = end or default_end
    selected = filter_by_creation(tasks, start, end)

    work_sessions = sum(task.pomodoros for task in selected)
    work_time = work_sessions * work_minutes
    break_time = total_breaks * break_minutes
    return AnalyticsSummary(
        start=start,
        end=end,
        total_work_sessions=work_sessions,
        total_break_sessions=total_breaks,
        total_sessions=work_sessions + total_breaks,
        total_work_minutes=work_time,
        total_break_minutes=break_time,
        total_minutes=work_time + break_time,
        task_completion_rate=_completion_rate(selected),
        productive_hours=productive_hours(selected, total_breaks),
    )
