import logging
from collections.abc import Callable, Coroutine
from typing import Any

from pomotrack.contracts import (
    IdentityProvider,
    NotificationKind,
    NotificationSink,
    RemoteSettingsStore,
    RemoteTaskStore,
)
from pomotrack.settings import SettingsProvider
from pomotrack.storage import LocalCache
from pomotrack.sync import RemoteSync
from pomotrack.tasks import TaskStore
from pomotrack.timer import PomodoroStateMachine

logger = logging.getLogger(__name__)


class Tracker:
    """Wires the task store, settings and timer to one identity.

    Signed out, everything works in memory and no remote call is made. On
    sign-in the user's tasks and settings are fetched and remote mirroring
    starts; on sign-out the session stops and local state is cleared.
    """

    def __init__(
        self,
        remote_tasks: RemoteTaskStore,
        remote_settings: RemoteSettingsStore,
        notifier: NotificationSink,
        cache: LocalCache | None = None,
    ) -> None:
        self._remote_tasks = remote_tasks
        self._remote_settings = remote_settings
        self._notifier = notifier
        self.sync = RemoteSync()
        self.tasks = TaskStore(self.sync, remote_tasks)
        self.settings = SettingsProvider(self.sync, remote_settings, notifier, cache)
        self.timer = PomodoroStateMachine(self.tasks, self.settings, notifier)
        self.on_loaded: Callable[[], None] | None = None
        self._generation = 0

    @property
    def user_id(self) -> str | None:
        return self.sync.user_id

    def bind(self, identity: IdentityProvider) -> Callable[[], None]:
        return identity.on_auth_change(self.handle_auth_change)

    def handle_auth_change(self, user_id: str | None) -> None:
        if user_id is None:
            self.sign_out()
        else:
            self.sync.spawn(self.sign_in(user_id))

    def sign_in(self, user_id: str) -> Coroutine[Any, Any, None]:
        """Start loading the user's data; await or spawn the returned coroutine.

        A sign-out or another sign-in before the fetch finishes makes this
        load stale; it is then dropped without touching local state. Tasks
        added locally while it is in flight are kept and uploaded.
        """
        self._generation += 1
        known_ids = {task.id for task in self.tasks.tasks}
        return self._load(user_id, self._generation, known_ids)

    async def _load(self, user_id: str, generation: int, known_ids: set[int]) -> None:
        logger.info("Loading data for %s", user_id)
        try:
            tasks = await self._remote_tasks.fetch_tasks(user_id)
            settings = await self._remote_settings.fetch_settings(user_id)
        except Exception:
            logger.exception("Could not load data for %s", user_id)
            if generation != self._generation:
                return
            self._notifier.notify(NotificationKind.ERROR, "Could not load your saved data. Working offline.")
            return
        if generation != self._generation:
            logger.info("Discarding stale load for %s", user_id)
            return
        added = [task for task in self.tasks.tasks if task.id not in known_ids]
        self.tasks.replace_all(tasks)
        self.settings.load(settings)
        self.sync.user_id = user_id
        for task in added:
            self.tasks.insert(task)
        logger.info("Loaded %d tasks for %s", len(tasks), user_id)
        if self.on_loaded is not None:
            self.on_loaded()

    def sign_out(self) -> None:
        self._generation += 1
        if self.sync.user_id is not None:
            logger.info("Clearing data for %s", self.sync.user_id)
        self.timer.stop()
        self.sync.user_id = None
        self.tasks.clear()
        self.settings.reset()
        if self.on_loaded is not None:
            self.on_loaded()
