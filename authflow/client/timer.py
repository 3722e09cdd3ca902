"""
Schedulers and a resettable one-shot timer.

IdleTimer only knows how to arm and cancel a callback; when it fires is
decided by the injected scheduler. ManualClock moves time forward only when
told to, which makes idle timeouts testable without waiting.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class Handle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        ...


class Scheduler(ABC):
    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> Handle:
        ...


class _AsyncioHandle(Handle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """Runs callbacks on an asyncio event loop via loop.call_later."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callback) -> Handle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioHandle(loop.call_later(delay, callback))


class _ManualHandle(Handle):
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock(Scheduler):
    """Deterministic scheduler whose time advances only via advance()."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, _ManualHandle, Callback]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> Handle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self._now + delay, next(self._seq), handle, callback))
        return handle

    def advance(self, seconds: float) -> int:
        """Move time forward, running due callbacks in order. Returns how many ran."""
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = when
            callback()
            ran += 1
        self._now = target
        return ran

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)


class IdleTimer:
    """One-shot timer; arming again replaces the previous deadline."""

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._handle: Optional[Handle] = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self, duration: float, callback: Callback) -> None:
        self.cancel()

        def fire() -> None:
            self._handle = None
            callback()

        self._handle = self.scheduler.call_later(duration, fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
