"""Shot stopwatch and the schedulers that drive it."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

log = logging.getLogger(__name__)

TICK_SECONDS = 0.1


class Handle(ABC):
    """A repeating call that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """Runs a callback every ``interval`` seconds until its handle is cancelled."""

    @abstractmethod
    def call_repeating(self, interval: float, callback: Callable[[], None]) -> Handle:
        pass


class _AsyncioHandle(Handle):
    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._pending = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._callback()
        if not self._cancelled:
            self._pending = self._loop.call_later(self._interval, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        self._pending.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(Scheduler):
    """Cooperative scheduling on an asyncio event loop.

    Each call is re-armed after the previous one ran, so late ticks are
    not made up for.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_repeating(self, interval: float, callback: Callable[[], None]) -> Handle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioHandle(loop, interval, callback)


class _ManualHandle(Handle):
    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler advanced explicitly with ``tick()``."""

    def __init__(self):
        self._handles: list[_ManualHandle] = []

    def call_repeating(self, interval: float, callback: Callable[[], None]) -> Handle:
        handle = _ManualHandle(callback)
        self._handles.append(handle)
        return handle

    @property
    def active(self) -> int:
        """Number of handles that have not been cancelled."""
        self._handles = [h for h in self._handles if not h.cancelled]
        return len(self._handles)

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            for handle in list(self._handles):
                if not handle.cancelled:
                    handle.callback()


class ShotTimer:
    """Stopwatch counting up in fixed ticks.

    ``start()`` always resets to zero and re-arms, even if already running.
    ``stop()`` keeps the last value.
    """

    def __init__(self, scheduler: Scheduler, tick: float = TICK_SECONDS):
        self.scheduler = scheduler
        self.tick = tick
        self._ticks = 0
        self._handle: Handle | None = None

    @property
    def elapsed(self) -> float:
        return self._ticks * self.tick

    @property
    def running(self) -> bool:
        return self._handle is not None

    def _on_tick(self) -> None:
        self._ticks += 1

    def start(self) -> None:
        self.stop()
        self._ticks = 0
        self._handle = self.scheduler.call_repeating(self.tick, self._on_tick)
        log.debug("Shot timer started")

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        log.debug("Shot timer stopped at %.1fs", self.elapsed)

    def reset(self) -> None:
        self.stop()
        self._ticks = 0
