from rich.markup import escape
from textual.widgets import Static

from pomotrack.models import Task
from pomotrack.tasks import TaskStore


def _format_task_label(task: Task, is_active: bool) -> str:
    status = "✓" if task.completed else " "
    marker = "▶" if is_active else " "
    return f"{marker} [{status}] {escape(task.title)} ({task.pomodoros}/{task.pomodoro_goal})"


class TaskList(Static):
    """Tasks in display order with a movable cursor."""

    def __init__(self, store: TaskStore) -> None:
        super().__init__(id="task-list")
        self.store = store
        self.cursor = 0
        self.active_task_id: int | None = None

    @property
    def ordered(self) -> list[Task]:
        return self.store.sorted_for_display()

    @property
    def selected(self) -> Task | None:
        tasks = self.ordered
        if not tasks:
            return None
        return tasks[min(self.cursor, len(tasks) - 1)]

    def move(self, delta: int) -> None:
        if count := len(self.store):
            self.cursor = max(0, min(self.cursor + delta, count - 1))
        self.refresh_tasks()

    def select(self, task_id: int) -> None:
        for index, task in enumerate(self.ordered):
            if task.id == task_id:
                self.cursor = index
        self.refresh_tasks()

    def set_active(self, task_id: int | None) -> None:
        self.active_task_id = task_id
        self.refresh_tasks()

    def refresh_tasks(self) -> None:
        tasks = self.ordered
        if not tasks:
            self.cursor = 0
            self.update("[dim]No tasks yet. Press A to add one.[/dim]")
            return
        self.cursor = min(self.cursor, len(tasks) - 1)
        lines = []
        for index, task in enumerate(tasks):
            line = _format_task_label(task, task.id == self.active_task_id)
            if task.completed:
                line = f"[dim]{line}[/dim]"
            if index == self.cursor:
                line = f"[reverse]{line}[/reverse]"
            lines.append(line)
        self.update("\n".join(lines))
