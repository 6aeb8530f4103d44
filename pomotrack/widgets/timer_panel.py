from rich.markup import escape
from textual.app import ComposeResult
from textual.widgets import Label, Static

from pomotrack.models import Phase, SessionSnapshot, Task


def _format_timer_time(minutes: int, seconds: int) -> str:
    return f"{minutes:02d}:{seconds:02d}"


def _get_phase_label(snapshot: SessionSnapshot) -> str:
    return "Break Session" if snapshot.is_break else "Work Session"


def _get_timer_status(snapshot: SessionSnapshot, task: Task | None) -> str:
    if snapshot.phase is Phase.IDLE:
        return "Ready. Select a task and press Enter."
    if snapshot.paused:
        return "⏸ Paused"
    if snapshot.phase is Phase.ON_BREAK:
        return "▶ Break time!"
    title = escape(task.title) if task else "(deleted task)"
    return f"▶ {title}"


class TimerPanel(Static):
    def compose(self) -> ComposeResult:
        yield Label("", id="timer-phase")
        yield Label("--:--", id="timer-time")
        yield Label("", id="timer-status")

    def refresh_timer(self, snapshot: SessionSnapshot, task: Task | None) -> None:
        phase = self.query_one("#timer-phase", Label)
        phase.update(_get_phase_label(snapshot))
        phase.set_class(snapshot.is_break, "break")
        self.query_one("#timer-time", Label).update(_format_timer_time(snapshot.minutes, snapshot.seconds))
        self.query_one("#timer-status", Label).update(_get_timer_status(snapshot, task))
