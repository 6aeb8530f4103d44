import logging

from pomotrack.contracts import RemoteTaskStore
from pomotrack.models import Task, new_task_id, parse_title, sort_for_display
from pomotrack.sync import RemoteSync

logger = logging.getLogger(__name__)


class TaskStore:
    """The task collection and the only writer of task fields.

    Every mutation is applied in memory first, then mirrored to the remote
    store through ``RemoteSync`` without waiting for it.
    """

    def __init__(self, sync: RemoteSync, remote: RemoteTaskStore) -> None:
        self._sync = sync
        self._remote = remote
        self._tasks: list[Task] = []

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Task | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    def sorted_for_display(self) -> list[Task]:
        return sort_for_display(self._tasks)

    def replace_all(self, tasks: list[Task]) -> None:
        self._tasks = list(tasks)

    def clear(self) -> None:
        self._tasks = []

    def add(self, title: str) -> Task:
        last_id = max((task.id for task in self._tasks), default=None)
        task = Task(id=new_task_id(after=last_id), title=parse_title(title))
        self._tasks.append(task)
        logger.info("Added task %s", task.id)
        self._sync.submit("create_task", lambda user_id: self._remote.create_task(user_id, task))
        return task

    def insert(self, task: Task) -> Task:
        """Append an existing task and upload it, re-numbering on an id clash."""
        if self.get(task.id) is not None:
            last_id = max(existing.id for existing in self._tasks)
            task = task.model_copy(update={"id": new_task_id(after=last_id)})
        self._tasks.append(task)
        self._sync.submit("create_task", lambda user_id: self._remote.create_task(user_id, task))
        return task

    def update(self, task: Task) -> bool:
        for index, existing in enumerate(self._tasks):
            if existing.id == task.id:
                self._tasks[index] = task
                self._sync.submit("update_task", lambda user_id: self._remote.update_task(user_id, task))
                return True
        logger.debug("Ignoring update for unknown task %s", task.id)
        return False

    def delete(self, task_id: int) -> bool:
        if self.get(task_id) is None:
            return False
        self._tasks = [task for task in self._tasks if task.id != task_id]
        logger.info("Deleted task %s", task_id)
        self._sync.submit("delete_task", lambda user_id: self._remote.delete_task(user_id, task_id))
        return True

    def rename(self, task_id: int, title: str) -> Task | None:
        return self._change(task_id, title=parse_title(title))

    def increment_goal(self, task_id: int) -> Task | None:
        if (task := self.get(task_id)) is None:
            return None
        return self._change(task_id, pomodoro_goal=task.pomodoro_goal + 1)

    def decrement_goal(self, task_id: int) -> Task | None:
        if (task := self.get(task_id)) is None:
            return None
        if task.pomodoro_goal <= 1:
            return task
        return self._change(task_id, pomodoro_goal=task.pomodoro_goal - 1)

    def toggle_completed(self, task_id: int) -> Task | None:
        if (task := self.get(task_id)) is None:
            return None
        return self._change(task_id, completed=not task.completed)

    def increment_pomodoros(self, task_id: int) -> Task | None:
        if (task := self.get(task_id)) is None:
            return None
        return self._change(task_id, pomodoros=task.pomodoros + 1)

    def _change(self, task_id: int, **fields) -> Task | None:
        if (task := self.get(task_id)) is None:
            return None
        updated = task.model_copy(update=fields)
        self.update(updated)
        return updated
