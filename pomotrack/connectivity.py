import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

PROBE_INTERVAL_SECONDS = 30.0


class ConnectivityProbe:
    """Periodically checks that the remote store is reachable.

    Runs as its own task, independent of the session clock. Only reports
    state changes through ``on_change``; it never retries writes.
    """

    def __init__(
        self,
        check: Callable[[], Awaitable[bool]],
        interval: float = PROBE_INTERVAL_SECONDS,
        on_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.interval = interval
        self.online = True
        self._check = check
        self._on_change = on_change
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def probe(self) -> bool:
        try:
            online = bool(await self._check())
        except Exception:
            logger.warning("Connectivity check failed", exc_info=True)
            online = False
        if online != self.online:
            logger.info("Remote store is %s", "reachable" if online else "unreachable")
            self.online = online
            if self._on_change is not None:
                self._on_change(online)
        return online

    async def _run(self) -> None:
        while True:
            await self.probe()
            await asyncio.sleep(self.interval)
