import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from pomotrack.errors import RemoteSyncFailure

logger = logging.getLogger(__name__)

RemoteCall = Callable[[str], Awaitable[Any]]
ErrorHandler = Callable[[RemoteSyncFailure], None]


class RemoteSync:
    """Fire-and-forget dispatcher for writes to the remote stores.

    In-memory state is already updated when a write is submitted, so nothing
    here waits on the result. Failures are logged and handed to ``on_error``;
    they never reach the caller. With no signed-in user every write is dropped.
    """

    def __init__(self, user_id: str | None = None) -> None:
        self.user_id = user_id
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self.user_id is not None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, operation: str, call: RemoteCall, on_error: ErrorHandler | None = None) -> None:
        if self.user_id is None:
            logger.debug("Skipping %s: no signed-in user", operation)
            return
        logger.debug("Dispatching %s for %s", operation, self.user_id)
        self.spawn(self._guarded(operation, call, self.user_id, on_error))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (scripts, plain function calls): finish the write now.
            asyncio.run(coro)
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _guarded(
        self,
        operation: str,
        call: RemoteCall,
        user_id: str,
        on_error: ErrorHandler | None,
    ) -> None:
        try:
            await call(user_id)
        except Exception as exc:
            logger.exception("Remote %s failed for %s", operation, user_id)
            if on_error is not None:
                on_error(RemoteSyncFailure(operation, exc))
