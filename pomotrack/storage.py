import asyncio
import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from pydantic import BaseModel, Field

from pomotrack.models import Settings, Task

logger = logging.getLogger(__name__)


class UserDocument(BaseModel):
    tasks: dict[str, Task] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)


def _parse_user_file(content: str) -> UserDocument:
    try:
        data = json.loads(content)
        return UserDocument.model_validate(data)
    except (json.JSONDecodeError, ValueError):
        logger.warning("Discarding unreadable user document")
        return UserDocument()


def _write_atomic(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=str(path.parent)) as handle:
        handle.write(payload)
        handle.flush()
        os.fsync(handle.fileno())
        tmp_path = Path(handle.name)
    os.replace(tmp_path, path)


class JsonRemoteStore:
    """Task and settings store kept as one JSON document per user.

    Stands in for a hosted backend: records are keyed the same way
    (tasks by id, one settings record per user) and use the same field names.
    File access runs in a worker thread; read-modify-write cycles hold a lock
    so concurrent writes cannot overwrite each other.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self._lock = asyncio.Lock()

    def user_file(self, user_id: str) -> Path:
        return self.data_dir / "users" / f"{user_id}.json"

    def _load(self, user_id: str) -> UserDocument:
        path = self.user_file(user_id)
        return _parse_user_file(path.read_text(encoding="utf-8")) if path.exists() else UserDocument()

    def _save(self, user_id: str, document: UserDocument) -> None:
        _write_atomic(self.user_file(user_id), document.model_dump_json(by_alias=True, indent=2))

    async def _read(self, user_id: str) -> UserDocument:
        return await asyncio.to_thread(self._load, user_id)

    async def _modify(self, user_id: str, change: Callable[[UserDocument], None]) -> None:
        async with self._lock:
            document = await self._read(user_id)
            change(document)
            await asyncio.to_thread(self._save, user_id, document)

    async def fetch_tasks(self, user_id: str) -> list[Task]:
        document = await self._read(user_id)
        return sorted(document.tasks.values(), key=lambda task: task.id)

    async def create_task(self, user_id: str, task: Task) -> None:
        def change(document: UserDocument) -> None:
            document.tasks[str(task.id)] = task

        await self._modify(user_id, change)

    async def update_task(self, user_id: str, task: Task) -> None:
        def change(document: UserDocument) -> None:
            if str(task.id) not in document.tasks:
                raise KeyError(f"No task {task.id} stored for {user_id}")
            document.tasks[str(task.id)] = task

        await self._modify(user_id, change)

    async def delete_task(self, user_id: str, task_id: int) -> None:
        await self._modify(user_id, lambda document: document.tasks.pop(str(task_id), None))

    async def fetch_settings(self, user_id: str) -> Settings | None:
        document = await self._read(user_id)
        return Settings.from_record(document.settings) if document.settings else None

    async def save_settings(self, user_id: str, partial: dict[str, Any]) -> None:
        await self._modify(user_id, lambda document: document.settings.update(partial))

    async def increment_total_breaks(self, user_id: str, total_breaks: int) -> None:
        def change(document: UserDocument) -> None:
            document.settings["totalBreaks"] = total_breaks

        await self._modify(user_id, change)

    async def ping(self) -> bool:
        try:
            await asyncio.to_thread(self.data_dir.mkdir, parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(self.data_dir, os.W_OK)


class LocalCache:
    """Small on-disk cache read before any remote data arrives."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def load_dark_mode(self) -> bool:
        return self._read().get("darkMode") is True

    def save_dark_mode(self, mode: bool) -> None:
        data = self._read()
        data["darkMode"] = mode
        _write_atomic(self.path, json.dumps(data, indent=2))
