"""Pomodoro session state machine.

The session is either idle, in a work interval, or in a break interval, and
a running interval can be paused. Time is counted down one tick per second.
When a work interval runs out the active task is credited with a pomodoro and
the break starts, unless that pomodoro reaches the task's goal, in which case
the session stops instead. When a break runs out the completed-break counter
goes up and the next work interval starts.
"""

import logging

from pomotrack.contracts import NotificationKind, NotificationSink
from pomotrack.errors import InvalidTransition
from pomotrack.models import Phase, SessionSnapshot, Settings
from pomotrack.settings import SettingsProvider
from pomotrack.tasks import TaskStore

logger = logging.getLogger(__name__)

BREAK_IN_PROGRESS = "It's break time. Please wait until the break is over to start a new session."
SESSION_IN_PROGRESS = "A session is already running. Stop it before starting another."

WORK_COMPLETE = "work_complete"
BREAK_COMPLETE = "break_complete"
TASK_COMPLETE = "task_complete"


class PomodoroStateMachine:
    def __init__(self, tasks: TaskStore, settings: SettingsProvider, notifier: NotificationSink) -> None:
        self._tasks = tasks
        self._settings = settings
        self._notifier = notifier
        self.is_active = False
        self.is_paused = False
        self.is_break = False
        self.minutes = settings.work_minutes
        self.seconds = 0
        self.active_task_id: int | None = None
        settings.subscribe(self._on_settings_changed)

    @property
    def phase(self) -> Phase:
        if not self.is_active:
            return Phase.IDLE
        return Phase.ON_BREAK if self.is_break else Phase.WORKING

    @property
    def is_running(self) -> bool:
        return self.is_active and not self.is_paused

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            paused=self.is_paused,
            minutes=self.minutes,
            seconds=self.seconds,
            active_task_id=self.active_task_id,
        )

    def start(self, task_id: int) -> bool:
        try:
            self._check_can_start()
        except InvalidTransition as exc:
            logger.info("Rejected start for task %s: %s", task_id, exc)
            self._notifier.notify(NotificationKind.WARNING, str(exc))
            return False
        self.is_active = True
        self.is_paused = False
        self.is_break = False
        self.active_task_id = task_id
        self.minutes = self._settings.work_minutes
        self.seconds = 0
        logger.info("Started work interval for task %s", task_id)
        return True

    def _check_can_start(self) -> None:
        if self.phase is Phase.ON_BREAK:
            raise InvalidTransition(BREAK_IN_PROGRESS)
        if self.phase is Phase.WORKING:
            raise InvalidTransition(SESSION_IN_PROGRESS)

    def pause(self) -> bool:
        if not self.is_active or self.is_paused:
            return False
        self.is_paused = True
        return True

    def resume(self) -> bool:
        if not self.is_paused:
            return False
        self.is_paused = False
        return True

    def stop(self) -> bool:
        if not self.is_active:
            return False
        self.is_active = False
        self.is_paused = False
        self.active_task_id = None
        self.reset()
        logger.info("Session stopped")
        return True

    def reset(self) -> None:
        self.minutes = self._settings.work_minutes
        self.seconds = 0
        self.is_break = False

    def tick(self) -> list[str]:
        """Advance the countdown by one second; return the transitions that fired."""
        if not self.is_running:
            return []
        if self.seconds > 0:
            self.seconds -= 1
            return []
        if self.minutes > 0:
            self.minutes -= 1
            self.seconds = 59
            return []
        if self.is_break:
            return self._finish_break()
        return self._finish_work()

    def _finish_break(self) -> list[str]:
        self.is_break = False
        self.minutes = self._settings.work_minutes
        self.seconds = 0
        total = self._settings.record_break()
        logger.info("Break finished (%d total)", total)
        return [BREAK_COMPLETE]

    def _finish_work(self) -> list[str]:
        self.is_break = True
        self.minutes = self._settings.break_minutes
        self.seconds = 0
        events = [WORK_COMPLETE]
        if self.active_task_id is None:
            return events
        task = self._tasks.increment_pomodoros(self.active_task_id)
        if task is None:
            logger.warning("Active task %s no longer exists", self.active_task_id)
            return events
        logger.info("Task %s at %d/%d pomodoros", task.id, task.pomodoros, task.pomodoro_goal)
        if task.goal_reached:
            self.stop()
            self._notifier.notify(NotificationKind.SUCCESS, f'Task "{task.title}" completed!')
            events.append(TASK_COMPLETE)
        return events

    def _on_settings_changed(self, settings: Settings) -> None:
        # Durations only apply to the next interval unless nothing is running.
        if not self.is_active:
            self.reset()
