"""Countdown for timed prompts."""
from typing import Callable, Optional, Protocol

from vocab_drill.constants import THINKING_TIME, TICK_INTERVAL


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with call_later(); asyncio event loops qualify."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle: ...


class AnswerTimer:
    """Counts down from the thinking time once per tick while armed.

    Reaching zero fires on_timeout exactly once and disarms the timer. The
    timer never fires again until start() is called.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_timeout: Callable[[], None],
        on_tick: Optional[Callable[[int], None]] = None,
        duration: int = THINKING_TIME,
        interval: float = TICK_INTERVAL,
    ):
        self.scheduler = scheduler
        self.on_timeout = on_timeout
        self.on_tick = on_tick
        self.duration = duration
        self.interval = interval
        self.remaining = duration
        self.armed = False
        self._handle: Optional[Handle] = None

    def start(self) -> None:
        self._cancel()
        self.remaining = self.duration
        self.armed = True
        self._schedule()

    def stop(self) -> None:
        self._cancel()
        self.armed = False

    def reset(self) -> None:
        self.stop()
        self.remaining = self.duration

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.interval, self._tick)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if not self.armed:
            return
        self.remaining = max(self.remaining - 1, 0)
        if self.on_tick is not None:
            self.on_tick(self.remaining)
        if self.remaining == 0:
            self.armed = False
            self.on_timeout()
        elif self.armed:
            self._schedule()
