"""Per-key debounce on the running asyncio loop."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Set

from .logging_config import get_logger

logger = get_logger(__name__)

TaskFactory = Callable[[], Awaitable[object]]


class DebounceScheduler:
    """Runs a coroutine ``delay_seconds`` after the last ``schedule`` for its key.

    Re-scheduling a key cancels its pending timer, so one trigger never
    runs twice. Tasks that already started run to completion.
    """

    def __init__(self, delay_seconds: float) -> None:
        self.delay_seconds = delay_seconds
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._running: Set[asyncio.Task] = set()

    def schedule(self, key: str, factory: TaskFactory) -> None:
        """Arm (or re-arm) the timer for ``key``. Must be called from the loop."""
        loop = asyncio.get_running_loop()
        self.cancel(key)
        self._timers[key] = loop.call_later(self.delay_seconds, self._fire, key, factory)

    def _fire(self, key: str, factory: TaskFactory) -> None:
        self._timers.pop(key, None)
        task = asyncio.ensure_future(self._run(key, factory))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, key: str, factory: TaskFactory) -> None:
        try:
            await factory()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Debounced task for %s failed", key)

    def cancel(self, key: str) -> bool:
        handle = self._timers.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    def pending(self, key: str) -> bool:
        return key in self._timers

    @property
    def idle(self) -> bool:
        return not self._timers and not self._running

    async def wait_idle(self, poll_seconds: float = 0.01) -> None:
        """Wait until no timer is armed and no fired task is running."""
        while not self.idle:
            if self._running:
                await asyncio.gather(*list(self._running), return_exceptions=True)
            else:
                await asyncio.sleep(poll_seconds)
