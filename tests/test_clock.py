import asyncio

import pytest

from pomotrack.clock import SessionClock
from pomotrack.connectivity import ConnectivityProbe
from pomotrack.identity import LocalIdentity


async def _yield(times: int = 5) -> None:
    for _ in range(times):
        await asyncio.sleep(0)


async def test_clock_ticks_until_stopped():
    ticks = []
    clock = SessionClock(lambda: ticks.append(1), interval=0)
    clock.start()
    await _yield()
    assert clock.running
    assert len(ticks) > 0

    clock.stop()
    await _yield()
    count = len(ticks)
    await _yield()
    assert len(ticks) == count
    assert not clock.running


async def test_clock_start_is_idempotent():
    clock = SessionClock(lambda: None, interval=0)
    clock.start()
    task = clock._task
    clock.start()
    assert clock._task is task
    clock.stop()


async def test_clock_uses_interval():
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)
        await asyncio.sleep(0)

    clock = SessionClock(lambda: None, interval=1.0, sleep=fake_sleep)
    clock.start()
    await _yield()
    clock.stop()
    assert slept and set(slept) == {1.0}


async def test_probe_reports_changes():
    results = iter([True, False, False, True])
    changes = []

    async def check():
        return next(results)

    probe = ConnectivityProbe(check, on_change=changes.append)
    for _ in range(4):
        await probe.probe()
    assert changes == [False, True]
    assert probe.online is True


async def test_probe_treats_errors_as_offline():
    async def check():
        raise OSError("no route")

    probe = ConnectivityProbe(check)
    assert await probe.probe() is False
    assert probe.online is False


async def test_probe_runs_in_background():
    calls = []

    async def check():
        calls.append(1)
        return True

    probe = ConnectivityProbe(check, interval=0)
    probe.start()
    await _yield()
    probe.stop()
    assert calls


def test_identity_rejects_blank_user():
    with pytest.raises(ValueError):
        LocalIdentity().sign_in("  ")
