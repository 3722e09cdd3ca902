"""
Inactivity monitor.

Re-arms an idle timer on every user interaction event. When the timer runs
out the monitor stops listening and calls on_idle exactly once.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence

from authflow.client.timer import IdleTimer

logger = logging.getLogger(__name__)

ACTIVITY_EVENTS = ("mousemove", "keydown", "click", "scroll")
INACTIVITY_TIMEOUT_SECONDS = 5 * 60

Listener = Callable[[], None]


class EventSource(ABC):
    @abstractmethod
    def add_listener(self, event: str, listener: Listener) -> None:
        ...

    @abstractmethod
    def remove_listener(self, event: str, listener: Listener) -> None:
        ...


class LocalEventSource(EventSource):
    """In-process event emitter standing in for the window's DOM events."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def add_listener(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def emit(self, event: str) -> None:
        for listener in list(self._listeners[event]):
            listener()

    def listener_count(self, event: Optional[str] = None) -> int:
        if event is not None:
            return len(self._listeners[event])
        return sum(len(listeners) for listeners in self._listeners.values())


class InactivityMonitor:
    def __init__(
        self,
        events: EventSource,
        timer: IdleTimer,
        timeout: float = INACTIVITY_TIMEOUT_SECONDS,
        activity_events: Sequence[str] = ACTIVITY_EVENTS,
    ):
        self.events = events
        self.timer = timer
        self.timeout = timeout
        self.activity_events = tuple(activity_events)
        self._on_idle: Optional[Callable[[], None]] = None

    @property
    def running(self) -> bool:
        return self._on_idle is not None

    def start(self, on_idle: Callable[[], None]) -> None:
        if self.running:
            self.stop()

        self._on_idle = on_idle
        for event in self.activity_events:
            self.events.add_listener(event, self._on_activity)
        self._arm()

    def stop(self) -> None:
        for event in self.activity_events:
            self.events.remove_listener(event, self._on_activity)
        self.timer.cancel()
        self._on_idle = None

    def _on_activity(self) -> None:
        if self.running:
            self._arm()

    def _arm(self) -> None:
        self.timer.arm(self.timeout, self._fire)

    def _fire(self) -> None:
        on_idle = self._on_idle
        self.stop()
        if on_idle is not None:
            logger.info(f"No activity for {self.timeout} seconds")
            on_idle()
