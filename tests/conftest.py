import pytest

from pomotrack.contracts import NotificationKind
from pomotrack.models import Settings, Task
from pomotrack.tracker import Tracker


class FakeRemote:
    def __init__(self, tasks: list[Task] | None = None, settings: Settings | None = None) -> None:
        self.tasks = {task.id: task for task in tasks or []}
        self.settings = settings
        self.calls: list[tuple] = []
        self.fail_writes = False
        self.fail_reads = False

    def _record(self, name: str, *args, read: bool = False) -> None:
        self.calls.append((name, *args))
        if (self.fail_reads if read else self.fail_writes):
            raise ConnectionError("remote unavailable")

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def fetch_tasks(self, user_id):
        self._record("fetch_tasks", user_id, read=True)
        return list(self.tasks.values())

    async def create_task(self, user_id, task):
        self._record("create_task", user_id, task)
        self.tasks[task.id] = task

    async def update_task(self, user_id, task):
        self._record("update_task", user_id, task)
        self.tasks[task.id] = task

    async def delete_task(self, user_id, task_id):
        self._record("delete_task", user_id, task_id)
        self.tasks.pop(task_id, None)

    async def fetch_settings(self, user_id):
        self._record("fetch_settings", user_id, read=True)
        return self.settings

    async def save_settings(self, user_id, partial):
        self._record("save_settings", user_id, partial)

    async def increment_total_breaks(self, user_id, total_breaks):
        self._record("increment_total_breaks", user_id, total_breaks)


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[NotificationKind, str]] = []

    def notify(self, kind, message):
        self.messages.append((kind, message))

    def of_kind(self, kind: NotificationKind) -> list[str]:
        return [message for recorded, message in self.messages if recorded is kind]


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def tracker(remote, notifier):
    return Tracker(remote, remote, notifier)


@pytest.fixture
def signed_in(tracker):
    tracker.handle_auth_change("alice")
    return tracker
