"""Cancellable delayed callbacks for turn timers and AI think delays.

The game controller arms a timer with the key of the phase it belongs to and
checks, when the timer fires, whether that key is still the live one. A
scheduler only runs callbacks; deciding staleness is the owner's job.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .types import Color, Phase


@dataclass(frozen=True, slots=True)
class TimerKey:
    purpose: str  # "turn", "game" or "ai"
    phase: Phase
    color: Optional[Color]
    generation: int


@dataclass(slots=True)
class TimerHandle:
    key: TimerKey
    delay: float
    callback: Callable[[TimerKey], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False
    _native: object = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        if not self.active:
            return
        self.cancelled = True
        if self._native is not None:
            self._native.cancel()

    def fire(self) -> None:
        if not self.active:
            return
        self.fired = True
        self.callback(self.key)


class Scheduler:
    """Interface: run ``callback(key)`` after ``delay`` seconds unless cancelled."""

    def time(self) -> float:  # pragma: no cover - abstract
        raise NotImplementedError

    def schedule(
        self, delay: float, key: TimerKey, callback: Callable[[TimerKey], None]
    ) -> TimerHandle:  # pragma: no cover - abstract
        raise NotImplementedError


class AsyncioScheduler(Scheduler):
    """Schedules on an asyncio event loop with ``call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def time(self) -> float:
        return self.loop.time()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(
        self, delay: float, key: TimerKey, callback: Callable[[TimerKey], None]
    ) -> TimerHandle:
        handle = TimerHandle(key=key, delay=delay, callback=callback)
        handle._native = self.loop.call_later(max(0.0, delay), handle.fire)
        return handle


class ManualScheduler(Scheduler):
    """Virtual clock advanced by hand. Used by tests and headless simulations."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def time(self) -> float:
        return self.now

    def schedule(
        self, delay: float, key: TimerKey, callback: Callable[[TimerKey], None]
    ) -> TimerHandle:
        handle = TimerHandle(key=key, delay=delay, callback=callback)
        heapq.heappush(
            self._queue, (self.now + max(0.0, delay), next(self._counter), handle)
        )
        return handle

    def pending(self) -> List[TimerHandle]:
        return [h for _, _, h in sorted(self._queue) if h.active]

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in order. Returns how many fired."""
        deadline = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle = heapq.heappop(self._queue)
            self.now = due
            if handle.active:
                handle.fire()
                fired += 1
        self.now = deadline
        return fired

    def run_next(self) -> bool:
        """Jump to the next live callback and fire it."""
        while self._queue:
            due, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self.now = max(self.now, due)
            handle.fire()
            return True
        return False
