"""
Timer schedulers

Autosave never sleeps; every wait is a callback scheduled on a
TimerScheduler. Two implementations:
- ManualScheduler: logical clock advanced explicitly (tests, simulations)
- AsyncioScheduler: real timers on the running asyncio event loop
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle:
    """
    Cancellable scheduled callback

    A handle is active until it fires or is cancelled.
    """

    def __init__(self, deadline_ms: float, callback: Callback):
        self.deadline_ms = deadline_ms
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        return not self._cancelled and not self._fired

    def cancel(self) -> None:
        self._cancelled = True

    def fire(self) -> None:
        if not self.active:
            return
        self._fired = True
        self._callback()


class TimerScheduler(ABC):
    """
    Scheduler abstract base

    Core interface:
    - now(): monotonic time in milliseconds
    - call_later(): schedule a one-shot callback
    - wall_clock(): timestamp used for saved snapshots
    """

    @abstractmethod
    def now(self) -> float:
        """Current monotonic time in milliseconds"""
        pass

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        """
        Schedule callback after delay_ms

        Args:
            delay_ms: delay in milliseconds, negative values count as 0
            callback: zero-argument callable

        Returns:
            Handle that cancels the callback
        """
        pass

    def wall_clock(self) -> datetime:
        """Current UTC time"""
        return datetime.now(timezone.utc)


class ManualScheduler(TimerScheduler):
    """
    Logical-clock scheduler

    Time only moves through advance(). Due callbacks fire in deadline order,
    ties in scheduling order; callbacks scheduled while advancing fire in the
    same call when they fall inside the window.
    """

    def __init__(
        self, start_ms: float = 0.0, epoch: Optional[datetime] = None
    ):
        self._now = float(start_ms)
        self._epoch = epoch or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._now

    def wall_clock(self) -> datetime:
        return self._epoch + timedelta(milliseconds=self._now)

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(self._now + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (handle.deadline_ms, next(self._sequence), handle))
        return handle

    def advance(self, delay_ms: float) -> int:
        """
        Move the clock forward, firing due callbacks

        Returns:
            Number of callbacks fired
        """
        target = self._now + delay_ms
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = deadline
            handle.fire()
            fired += 1

        self._now = target
        return fired

    def advance_to(self, time_ms: float) -> int:
        """Move the clock to an absolute time"""
        return self.advance(max(0.0, time_ms - self._now))

    def pending(self) -> int:
        """Number of active scheduled callbacks"""
        return sum(1 for _, _, handle in self._queue if handle.active)


class _AsyncioTimerHandle(TimerHandle):
    """TimerHandle backed by an asyncio.TimerHandle"""

    def __init__(self, deadline_ms: float, callback: Callback):
        super().__init__(deadline_ms, callback)
        self._loop_handle: Optional[asyncio.TimerHandle] = None

    def cancel(self) -> None:
        super().cancel()
        if self._loop_handle is not None:
            self._loop_handle.cancel()


class AsyncioScheduler(TimerScheduler):
    """
    Scheduler on an asyncio event loop

    The loop is looked up lazily, so the scheduler can be built outside of a
    running loop and used from inside one.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        delay_ms = max(0.0, delay_ms)
        handle = _AsyncioTimerHandle(self.now() + delay_ms, callback)
        handle._loop_handle = self.loop.call_later(delay_ms / 1000.0, handle.fire)
        return handle


class TimerSlots:
    """
    Named one-shot timers

    Each name holds at most one timer; arming a name cancels the timer
    already in it. A slot is emptied before its callback runs, so the
    callback may re-arm it.
    """

    def __init__(self, scheduler: TimerScheduler):
        self.scheduler = scheduler
        self._handles: Dict[str, TimerHandle] = {}

    def arm(self, name: str, delay_ms: float, callback: Callback) -> TimerHandle:
        self.cancel(name)

        def _fire() -> None:
            if self._handles.get(name) is handle:
                del self._handles[name]
            callback()

        handle = self.scheduler.call_later(delay_ms, _fire)
        self._handles[name] = handle
        logger.debug("Armed timer '%s' for %.0f ms", name, delay_ms)
        return handle

    def cancel(self, name: str) -> bool:
        """Cancel a slot; returns True when an active timer was cancelled"""
        handle = self._handles.pop(name, None)
        if handle is None or not handle.active:
            return False
        handle.cancel()
        logger.debug("Cancelled timer '%s'", name)
        return True

    def cancel_all(self) -> None:
        for name in list(self._handles):
            self.cancel(name)

    def is_armed(self, name: str) -> bool:
        handle = self._handles.get(name)
        return handle is not None and handle.active

    def armed(self) -> List[str]:
        return [name for name in self._handles if self.is_armed(name)]
