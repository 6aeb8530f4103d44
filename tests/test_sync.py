import asyncio

from pomotrack.errors import RemoteSyncFailure
from pomotrack.sync import RemoteSync


def test_without_user_nothing_is_called():
    calls = []

    async def write(user_id):
        calls.append(user_id)

    sync = RemoteSync()
    assert sync.enabled is False
    sync.submit("write", write)
    assert calls == []


def test_without_loop_runs_immediately():
    calls = []

    async def write(user_id):
        calls.append(user_id)

    RemoteSync("alice").submit("write", write)
    assert calls == ["alice"]


def test_failure_is_swallowed_and_reported():
    failures = []

    async def write(user_id):
        raise ConnectionError("down")

    RemoteSync("alice").submit("write", write, on_error=failures.append)
    assert len(failures) == 1
    assert isinstance(failures[0], RemoteSyncFailure)
    assert failures[0].operation == "write"
    assert isinstance(failures[0].cause, ConnectionError)


async def test_with_loop_writes_are_not_awaited():
    started = asyncio.Event()
    release = asyncio.Event()
    done = []

    async def write(user_id):
        started.set()
        await release.wait()
        done.append(user_id)

    sync = RemoteSync("alice")
    sync.submit("write", write)
    assert sync.pending == 1
    assert done == []

    await started.wait()
    release.set()
    await sync.drain()
    assert done == ["alice"]


async def test_drain_with_failures():
    failures = []

    async def write(user_id):
        await asyncio.sleep(0)
        raise ConnectionError("down")

    sync = RemoteSync("alice")
    sync.submit("first", write, on_error=failures.append)
    sync.submit("second", write, on_error=failures.append)
    await sync.drain()
    assert [failure.operation for failure in failures] == ["first", "second"]
