import logging
from collections.abc import Callable

from pomotrack.contracts import NotificationKind, NotificationSink, RemoteSettingsStore
from pomotrack.errors import RemoteSyncFailure
from pomotrack.models import Settings, parse_minutes
from pomotrack.storage import LocalCache
from pomotrack.sync import RemoteSync

logger = logging.getLogger(__name__)

SettingsListener = Callable[[Settings], None]


class SettingsProvider:
    """Durations, theme preference and the completed-break counter.

    Dark mode has two values. ``dark_mode`` is the live one, restored from the
    local cache at startup so the first frame uses the right theme.
    ``persistent_dark_mode`` is what the remote store confirmed after login.
    Loading settings, or saving the preference, makes the two agree again.
    """

    def __init__(
        self,
        sync: RemoteSync,
        remote: RemoteSettingsStore,
        notifier: NotificationSink,
        cache: LocalCache | None = None,
    ) -> None:
        self._sync = sync
        self._remote = remote
        self._notifier = notifier
        self._cache = cache
        self._settings = Settings()
        self.dark_mode = cache.load_dark_mode() if cache else False
        self.persistent_dark_mode = self.dark_mode
        self._listeners: list[SettingsListener] = []

    @property
    def current(self) -> Settings:
        return self._settings.model_copy()

    @property
    def work_minutes(self) -> int:
        return self._settings.work_minutes

    @property
    def break_minutes(self) -> int:
        return self._settings.break_minutes

    @property
    def total_breaks(self) -> int:
        return self._settings.total_breaks

    def subscribe(self, listener: SettingsListener) -> None:
        self._listeners.append(listener)

    def load(self, settings: Settings | None) -> None:
        if settings is None:
            logger.info("No stored settings, keeping defaults")
            return
        self._settings = settings.model_copy()
        self.update_persistent_dark_mode(settings.dark_mode, save=False)
        self._changed()

    def reset(self) -> None:
        self._settings = Settings(dark_mode=self.dark_mode)
        self._changed()

    def set_work_minutes(self, value: str | int) -> int:
        minutes = parse_minutes(value)
        self._settings = self._settings.model_copy(update={"work_minutes": minutes})
        self._save({"pomodoroTime": minutes})
        self._changed()
        return minutes

    def set_break_minutes(self, value: str | int) -> int:
        minutes = parse_minutes(value)
        self._settings = self._settings.model_copy(update={"break_minutes": minutes})
        self._save({"breakTime": minutes})
        self._changed()
        return minutes

    def update_persistent_dark_mode(self, mode: bool, *, save: bool = True) -> None:
        self.persistent_dark_mode = mode
        self.dark_mode = mode
        self._settings = self._settings.model_copy(update={"dark_mode": mode})
        self._write_cache()
        if save:
            self._save({"darkMode": mode})

    def save_profile(self, work_minutes: str | int, break_minutes: str | int, dark_mode: bool) -> None:
        """Apply a whole settings form at once and store it with a single write.

        Both durations are validated before anything changes.
        """
        work = parse_minutes(work_minutes)
        rest = parse_minutes(break_minutes)
        self._settings = self._settings.model_copy(update={"work_minutes": work, "break_minutes": rest})
        self.update_persistent_dark_mode(dark_mode, save=False)
        record = {"pomodoroTime": work, "breakTime": rest, "darkMode": dark_mode}

        async def save(user_id: str) -> None:
            await self._remote.save_settings(user_id, record)
            self._notifier.notify(NotificationKind.SUCCESS, "Settings saved successfully!")

        self._sync.submit("save_settings", save, on_error=self._report_failure)
        self._changed()

    def record_break(self) -> int:
        total = self._settings.total_breaks + 1
        self._settings = self._settings.model_copy(update={"total_breaks": total})
        self._sync.submit(
            "increment_total_breaks",
            lambda user_id: self._remote.increment_total_breaks(user_id, total),
        )
        return total

    def _save(self, partial: dict) -> None:
        self._sync.submit(
            "save_settings",
            lambda user_id: self._remote.save_settings(user_id, partial),
            on_error=self._report_failure,
        )

    def _report_failure(self, failure: RemoteSyncFailure) -> None:
        self._notifier.notify(NotificationKind.ERROR, "Failed to save settings. Please try again.")

    def _write_cache(self) -> None:
        if self._cache is not None:
            self._cache.save_dark_mode(self.dark_mode)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener(self.current)
