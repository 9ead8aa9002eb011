"""Tests for the per-key debounce scheduler."""

import asyncio
import logging

from whycomment.scheduler import DebounceScheduler


def _recorder():
    calls = []

    def factory(value):
        async def job():
            calls.append(value)

        return job

    return calls, factory


def test_rescheduling_replaces_pending_timer():
    calls, job = _recorder()

    async def go():
        scheduler = DebounceScheduler(0.02)
        scheduler.schedule("a.py", job(1))
        scheduler.schedule("a.py", job(2))
        assert scheduler.pending("a.py")
        await scheduler.wait_idle()
        assert scheduler.idle

    asyncio.run(go())
    assert calls == [2]


def test_keys_are_independent():
    calls, job = _recorder()

    async def go():
        scheduler = DebounceScheduler(0.01)
        scheduler.schedule("a.py", job("a"))
        scheduler.schedule("b.py", job("b"))
        await scheduler.wait_idle()

    asyncio.run(go())
    assert sorted(calls) == ["a", "b"]


def test_cancel():
    calls, job = _recorder()

    async def go():
        scheduler = DebounceScheduler(0.01)
        scheduler.schedule("a.py", job(1))
        assert scheduler.cancel("a.py")
        assert not scheduler.cancel("a.py")
        await asyncio.sleep(0.03)
        assert scheduler.idle

    asyncio.run(go())
    assert calls == []


def test_cancel_all():
    calls, job = _recorder()

    async def go():
        scheduler = DebounceScheduler(0.01)
        scheduler.schedule("a.py", job(1))
        scheduler.schedule("b.py", job(2))
        scheduler.cancel_all()
        assert not scheduler.pending("a.py")
        await asyncio.sleep(0.03)

    asyncio.run(go())
    assert calls == []


def test_failing_task_is_logged(caplog):
    calls, job = _recorder()

    async def boom():
        raise RuntimeError("analysis exploded")

    async def go():
        scheduler = DebounceScheduler(0.0)
        scheduler.schedule("bad.py", lambda: boom())
        scheduler.schedule("good.py", job("ok"))
        await scheduler.wait_idle()

    with caplog.at_level(logging.ERROR, logger="whycomment"):
        asyncio.run(go())

    assert calls == ["ok"]
    assert "Debounced task for bad.py failed" in caplog.text
