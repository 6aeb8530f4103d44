import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any

from rich.markup import escape
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Input, Label, Static, Switch

from pomotrack.analytics import (
    AnalyticsSummary,
    ProductivityOverview,
    analytics_summary,
    default_range,
    parse_date_range,
    productivity_overview,
)
from pomotrack.clock import SessionClock
from pomotrack.config import AppConfig, configure_logging
from pomotrack.connectivity import ConnectivityProbe
from pomotrack.contracts import NotificationKind
from pomotrack.errors import ValidationError
from pomotrack.identity import LocalIdentity
from pomotrack.models import TASK_TITLE_LIMIT, Phase, Task
from pomotrack.storage import JsonRemoteStore, LocalCache
from pomotrack.theme import get_theme_name
from pomotrack.timer import BREAK_COMPLETE, TASK_COMPLETE, WORK_COMPLETE, PomodoroStateMachine
from pomotrack.tracker import Tracker
from pomotrack.widgets import TaskList, TimerPanel

logger = logging.getLogger(__name__)

SEVERITIES = {
    NotificationKind.SUCCESS: "information",
    NotificationKind.WARNING: "warning",
    NotificationKind.ERROR: "error",
}


class AppNotifier:
    """Shows core notifications as textual toasts."""

    def __init__(self, app: App) -> None:
        self.app = app

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.app.notify(message, severity=SEVERITIES[kind])


def _format_overview(overview: ProductivityOverview) -> str:
    return (
        f"Tasks {overview.total_tasks} · Done {overview.completed_tasks} · "
        f"Pomodoros {overview.total_pomodoros} · Breaks {overview.total_breaks} · "
        f"{overview.completion_rate:.0%} complete"
    )


def _format_summary(summary: AnalyticsSummary) -> str:
    lines = [
        f"[bold]{summary.start.isoformat()} → {summary.end.isoformat()}[/bold]",
        f"Work sessions:  {summary.total_work_sessions}",
        f"Break sessions: {summary.total_break_sessions}",
        f"Total sessions: {summary.total_sessions}",
        f"Work time:      {summary.total_work_minutes} min",
        f"Break time:     {summary.total_break_minutes} min",
        f"Total time:     {summary.total_minutes} min",
        f"Completion:     {summary.task_completion_rate:.0%}",
        "",
        "[bold]Productive hours[/bold]",
    ]
    if not summary.productive_hours:
        lines.append("(no tasks in range)")
    for hour, bucket in summary.productive_hours.items():
        bar = "█" * round(bucket.work)
        lines.append(f"{hour:>6} {bar} {bucket.work:g} work / {bucket.breaks:.1f} break")
    return "\n".join(lines)


class PomotrackApp(App):
    TITLE = "pomotrack"

    CSS = """
    TaskList {
        border: solid $success;
        padding: 1;
        margin: 1;
        height: auto;
        min-height: 5;
    }

    TimerPanel {
        border: solid $primary;
        padding: 1;
        margin: 1;
        width: 40;
        height: auto;
    }

    #timer-time {
        text-style: bold;
        width: 100%;
        content-align: center middle;
    }

    #timer-phase {
        color: $error;
    }

    #timer-phase.break {
        color: $success;
    }

    #stats {
        padding: 0 1;
        margin: 0 1;
        height: auto;
    }
    """

    BINDINGS = [
        Binding("up,k", "cursor_up", "Up", show=False),
        Binding("down,j", "cursor_down", "Down", show=False),
        Binding("a", "add_task", "Add", show=True),
        Binding("e", "edit_task", "Edit", show=True),
        Binding("x", "delete_task", "Delete", show=True),
        Binding("c", "toggle_complete", "Complete", show=True),
        Binding("plus", "increase_goal", "Goal +", show=False),
        Binding("minus", "decrease_goal", "Goal -", show=False),
        Binding("enter", "start", "Start", show=True),
        Binding("space", "toggle_pause", "Pause/Resume", show=True),
        Binding("s", "stop", "Stop", show=True),
        Binding("w", "set_work_minutes", "Work min", show=False),
        Binding("b", "set_break_minutes", "Break min", show=False),
        Binding("d", "toggle_dark_mode", "Theme", show=False),
        Binding("p", "edit_settings", "Settings", show=True),
        Binding("v", "show_analytics", "Analytics", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        tracker: Tracker | None = None,
        identity: LocalIdentity | None = None,
        probe_check: Callable[[], Awaitable[bool]] | None = None,
    ) -> None:
        super().__init__()
        self.app_config = config or AppConfig.from_env()
        if tracker is None:
            store = JsonRemoteStore(self.app_config.data_dir)
            cache = LocalCache(self.app_config.data_dir / "cache.json")
            tracker = Tracker(store, store, AppNotifier(self), cache)
            probe_check = probe_check or store.ping
        self.tracker = tracker
        self.identity = identity or LocalIdentity()
        self.task_list: TaskList | None = None
        self.timer_panel: TimerPanel | None = None
        self.clock = SessionClock(self.handle_clock_tick, self.app_config.tick_seconds)
        self.probe = (
            ConnectivityProbe(probe_check, self.app_config.probe_seconds, on_change=self.handle_connectivity_change)
            if probe_check
            else None
        )
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical():
                self.task_list = TaskList(self.tracker.tasks)
                yield self.task_list
                yield Static("", id="stats")
            self.timer_panel = TimerPanel()
            yield self.timer_panel
        yield Footer()

    def on_mount(self) -> None:
        self.tracker.on_loaded = self.refresh_all
        self._unsubscribe = self.tracker.bind(self.identity)
        if self.app_config.user_id and self.identity.user_id is None:
            self.identity.sign_in(self.app_config.user_id)
        self.clock.start()
        if self.probe is not None:
            self.probe.start()
        self.refresh_all()

    async def on_unmount(self) -> None:
        self.clock.stop()
        if self.probe is not None:
            self.probe.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
        await self.tracker.sync.drain()

    @property
    def pomodoro(self) -> PomodoroStateMachine:
        return self.tracker.timer

    def _active_task(self) -> Task | None:
        if self.pomodoro.active_task_id is None:
            return None
        return self.tracker.tasks.get(self.pomodoro.active_task_id)

    def refresh_all(self) -> None:
        self.theme = get_theme_name(self.tracker.settings.dark_mode)
        self.sub_title = self.tracker.user_id or "offline mode"
        self.refresh_timer()
        self.task_list.set_active(self.pomodoro.active_task_id)
        self.refresh_stats()

    def refresh_timer(self) -> None:
        self.timer_panel.refresh_timer(self.pomodoro.snapshot(), self._active_task())

    def refresh_stats(self) -> None:
        overview = productivity_overview(self.tracker.tasks.tasks, self.tracker.settings.total_breaks)
        self.query_one("#stats", Static).update(_format_overview(overview))

    def handle_clock_tick(self) -> None:
        if not self.pomodoro.is_running:
            return
        events = self.pomodoro.tick()
        self.refresh_timer()
        if not events:
            return
        if BREAK_COMPLETE in events:
            self.notify("Break over. Back to work!")
        elif WORK_COMPLETE in events and TASK_COMPLETE not in events:
            self.notify("Work interval done. Take a break!")
        self.task_list.set_active(self.pomodoro.active_task_id)
        self.refresh_stats()

    def handle_connectivity_change(self, online: bool) -> None:
        if online:
            self.notify("Connection restored")
        else:
            self.notify("Remote store unreachable. Changes are kept locally.", severity="warning")

    def action_cursor_up(self) -> None:
        self.task_list.move(-1)

    def action_cursor_down(self) -> None:
        self.task_list.move(1)

    def _prompt(self, screen: ModalScreen, handle: Callable[[Any], None]) -> None:
        async def get_input() -> None:
            result = await self.push_screen_wait(screen)
            if result is None:
                return
            try:
                handle(result)
            except ValidationError as exc:
                self.notify(str(exc), severity="warning")
                return
            self.refresh_all()

        self.run_worker(get_input())

    def action_add_task(self) -> None:
        def add(title: str) -> None:
            task = self.tracker.tasks.add(title)
            self.task_list.select(task.id)
            self.notify("Task added successfully!")

        self._prompt(PromptScreen("New task", placeholder="What are you working on?", max_length=TASK_TITLE_LIMIT), add)

    def action_edit_task(self) -> None:
        if (task := self.task_list.selected) is None:
            self.notify("No task selected", severity="warning")
            return

        def rename(title: str) -> None:
            self.tracker.tasks.rename(task.id, title)
            self.notify("Task updated successfully!")

        self._prompt(PromptScreen("Edit task", value=task.title, max_length=TASK_TITLE_LIMIT), rename)

    def action_delete_task(self) -> None:
        if (task := self.task_list.selected) is None:
            return
        self.tracker.tasks.delete(task.id)
        self.notify("Task deleted successfully!")
        self.refresh_all()

    def action_toggle_complete(self) -> None:
        if (task := self.task_list.selected) is None:
            return
        self.tracker.tasks.toggle_completed(task.id)
        self.task_list.select(task.id)
        self.refresh_stats()

    def action_increase_goal(self) -> None:
        if (task := self.task_list.selected) is not None:
            self.tracker.tasks.increment_goal(task.id)
            self.task_list.refresh_tasks()

    def action_decrease_goal(self) -> None:
        if (task := self.task_list.selected) is not None:
            self.tracker.tasks.decrement_goal(task.id)
            self.task_list.refresh_tasks()

    def action_start(self) -> None:
        if (task := self.task_list.selected) is None:
            self.notify("Please select a task before starting the timer.", severity="error")
            return
        if self.pomodoro.start(task.id):
            self.notify(f"Working on: {escape(task.title)}")
        self.refresh_all()

    def action_toggle_pause(self) -> None:
        if self.pomodoro.phase is Phase.IDLE:
            self.notify("Nothing to pause. Press Enter to start the selected task.", severity="warning")
        elif self.pomodoro.is_paused:
            self.pomodoro.resume()
            self.notify("Timer resumed")
        else:
            self.pomodoro.pause()
            self.notify("Timer paused")
        self.refresh_timer()

    def action_stop(self) -> None:
        if self.pomodoro.stop():
            self.notify("Session stopped")
        self.refresh_all()

    def _edit_duration(self, label: str, current: int, apply: Callable[[str], int]) -> None:
        if self.pomodoro.phase is not Phase.IDLE:
            self.notify("Stop the session before changing durations.", severity="warning")
            return

        def update(value: str) -> None:
            minutes = apply(value)
            self.notify(f"{label} set to {minutes} minutes")

        self._prompt(PromptScreen(f"{label} (minutes)", value=str(current)), update)

    def action_set_work_minutes(self) -> None:
        settings = self.tracker.settings
        self._edit_duration("Work time", settings.work_minutes, settings.set_work_minutes)

    def action_set_break_minutes(self) -> None:
        settings = self.tracker.settings
        self._edit_duration("Break time", settings.break_minutes, settings.set_break_minutes)

    def action_toggle_dark_mode(self) -> None:
        settings = self.tracker.settings
        settings.update_persistent_dark_mode(not settings.dark_mode)
        self.theme = get_theme_name(settings.dark_mode)

    def action_edit_settings(self) -> None:
        settings = self.tracker.settings

        def save(form: tuple[str, str, bool]) -> None:
            settings.save_profile(*form)
            if self.tracker.user_id is None:
                self.notify("Settings applied. Sign in to keep them.")

        self._prompt(SettingsScreen(settings.work_minutes, settings.break_minutes, settings.dark_mode), save)

    def summarize(self, start: date, end: date) -> AnalyticsSummary:
        settings = self.tracker.settings
        return analytics_summary(
            self.tracker.tasks.tasks,
            settings.total_breaks,
            settings.work_minutes,
            settings.break_minutes,
            start,
            end,
        )

    def action_show_analytics(self) -> None:
        self.push_screen(AnalyticsScreen(self.summarize))


class PromptScreen(ModalScreen[str | None]):
    CSS = """
    PromptScreen {
        align: center middle;
    }

    #dialog {
        width: 60;
        height: 11;
        border: solid $success;
        background: $surface;
        padding: 1;
    }

    #prompt-input {
        width: 100%;
        margin-bottom: 1;
    }

    #buttons {
        width: 100%;
        height: auto;
        align: center middle;
    }
    """

    def __init__(self, title: str, *, value: str = "", placeholder: str = "", max_length: int = 0) -> None:
        super().__init__()
        self.prompt_title = title
        self.initial_value = value
        self.placeholder = placeholder
        self.input_max_length = max_length

    def compose(self) -> ComposeResult:
        with Container(id="dialog"):
            yield Label(self.prompt_title)
            yield Input(
                value=self.initial_value,
                placeholder=self.placeholder,
                max_length=self.input_max_length,
                id="prompt-input",
            )
            with Horizontal(id="buttons"):
                yield Button("Save", variant="success", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one(Input).focus()

    @on(Button.Pressed, "#save")
    def save(self) -> None:
        self.dismiss(self.query_one(Input).value)

    @on(Button.Pressed, "#cancel")
    def cancel(self) -> None:
        self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)


class SettingsScreen(ModalScreen[tuple[str, str, bool] | None]):
    """Form for both durations and the theme, saved together."""

    CSS = """
    SettingsScreen {
        align: center middle;
    }

    #settings-dialog {
        width: 50;
        height: auto;
        border: solid $success;
        background: $surface;
        padding: 1;
    }

    #settings-dialog Input {
        margin-bottom: 1;
    }

    #buttons {
        width: 100%;
        height: auto;
        align: center middle;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, work_minutes: int, break_minutes: int, dark_mode: bool) -> None:
        super().__init__()
        self.initial_form = (work_minutes, break_minutes, dark_mode)

    def compose(self) -> ComposeResult:
        work_minutes, break_minutes, dark_mode = self.initial_form
        with Container(id="settings-dialog"):
            yield Label("Work time (minutes)")
            yield Input(value=str(work_minutes), id="work-input")
            yield Label("Break time (minutes)")
            yield Input(value=str(break_minutes), id="break-input")
            with Horizontal():
                yield Label("Dark mode ")
                yield Switch(value=dark_mode, id="dark-switch")
            with Horizontal(id="buttons"):
                yield Button("Save", variant="success", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#work-input", Input).focus()

    def _form(self) -> tuple[str, str, bool]:
        return (
            self.query_one("#work-input", Input).value,
            self.query_one("#break-input", Input).value,
            self.query_one("#dark-switch", Switch).value,
        )

    @on(Button.Pressed, "#save")
    @on(Input.Submitted)
    def save(self) -> None:
        self.dismiss(self._form())

    @on(Button.Pressed, "#cancel")
    def cancel(self) -> None:
        self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class AnalyticsScreen(ModalScreen[None]):
    CSS = """
    AnalyticsScreen {
        align: center middle;
    }

    #analytics {
        width: 70;
        height: auto;
        border: solid $primary;
        background: $surface;
        padding: 1;
    }
    """

    BINDINGS = [
        Binding("escape,q,v", "close", "Close"),
        Binding("r", "set_range", "Date range"),
    ]

    def __init__(self, summarize: Callable[[date, date], AnalyticsSummary]) -> None:
        super().__init__()
        self.summarize = summarize
        self.range_start, self.range_end = default_range()
        self.summary = summarize(self.range_start, self.range_end)

    def compose(self) -> ComposeResult:
        yield Static(_format_summary(self.summary), id="analytics")

    def action_set_range(self) -> None:
        def apply(raw: str | None) -> None:
            if raw is None:
                return
            try:
                self.range_start, self.range_end = parse_date_range(raw)
            except ValidationError as exc:
                self.notify(str(exc), severity="warning")
                return
            self.summary = self.summarize(self.range_start, self.range_end)
            self.query_one("#analytics", Static).update(_format_summary(self.summary))

        value = f"{self.range_start.isoformat()} {self.range_end.isoformat()}"
        self.app.push_screen(PromptScreen("Date range (YYYY-MM-DD YYYY-MM-DD)", value=value), apply)

    def action_close(self) -> None:
        self.dismiss(None)


def main() -> None:
    config = AppConfig.from_env()
    configure_logging(config)
    logger.info("Starting pomotrack with data in %s", config.data_dir)
    app = PomotrackApp(config)
    app.run()


if __name__ == "__main__":
    main()
