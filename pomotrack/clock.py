import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class SessionClock:
    """Calls ``on_tick`` once per ``interval`` seconds on the running loop.

    The next sleep only starts once the callback has returned, so a slow tick
    delays the following one instead of letting ticks pile up.
    """

    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0, sleep: Sleep = asyncio.sleep) -> None:
        self.interval = interval
        self._on_tick = on_tick
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval)
            self._on_tick()
