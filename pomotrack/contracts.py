"""Interfaces of the collaborators the tracker depends on.

None of these are implemented by the core. ``pomotrack.storage`` and
``pomotrack.identity`` provide local implementations, and the textual app
provides the notification sink.
"""

from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

from pomotrack.models import Settings, Task


class NotificationKind(StrEnum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationSink(Protocol):
    def notify(self, kind: NotificationKind, message: str) -> None: ...


class RemoteTaskStore(Protocol):
    async def fetch_tasks(self, user_id: str) -> list[Task]: ...

    async def create_task(self, user_id: str, task: Task) -> None: ...

    async def update_task(self, user_id: str, task: Task) -> None: ...

    async def delete_task(self, user_id: str, task_id: int) -> None: ...


class RemoteSettingsStore(Protocol):
    async def fetch_settings(self, user_id: str) -> Settings | None: ...

    async def save_settings(self, user_id: str, partial: dict[str, Any]) -> None: ...

    async def increment_total_breaks(self, user_id: str, total_breaks: int) -> None: ...


AuthCallback = Callable[[str | None], None]


class IdentityProvider(Protocol):
    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]: ...
