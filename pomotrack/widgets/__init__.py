from pomotrack.widgets.task_list import TaskList
from pomotrack.widgets.timer_panel import TimerPanel

__all__ = ["TaskList", "TimerPanel"]
