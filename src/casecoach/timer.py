"""Practice stopwatch and the cooperative tick source that drives it."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

Clock = Callable[[], float]
TickListener = Callable[[str], None]

logger = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    """Render whole seconds as ``m:ss`` (minutes unpadded)."""
    if seconds < 0:
        raise ValueError(f"seconds must be non-negative, got {seconds}")
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


class RepeatingTask:
    """Handle for a callback the scheduler fires every ``interval`` seconds."""

    def __init__(self, scheduler: TickScheduler, interval: float, callback: Callable[[], None], next_due: float):
        self._scheduler = scheduler
        self.interval = interval
        self._callback = callback
        self._next_due = next_due
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop future firings. Cancelling twice is a no-op."""
        if self._cancelled:
            return
        self._cancelled = True
        self._scheduler._discard(self)

    def _fire_due(self, now: float) -> int:
        fired = 0
        while not self._cancelled and now >= self._next_due:
            self._next_due += self.interval
            self._callback()
            fired += 1
        return fired


class TickScheduler:
    """Single-threaded scheduler pumped by the caller between events.

    Nothing runs in the background: ``run_pending`` fires every interval that
    has fully elapsed since the last pump, one callback at a time.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._tasks: list[RepeatingTask] = []

    def every(self, interval: float, callback: Callable[[], None]) -> RepeatingTask:
        if interval <= 0:
            raise ValueError("interval must be positive")
        task = RepeatingTask(self, interval, callback, self._clock() + interval)
        self._tasks.append(task)
        return task

    def run_pending(self) -> int:
        """Fire all due callbacks; returns how many fired."""
        now = self._clock()
        fired = 0
        for task in list(self._tasks):
            fired += task._fire_due(now)
        return fired

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    def seconds_until_next(self) -> float | None:
        if not self._tasks:
            return None
        now = self._clock()
        return max(0.0, min(task._next_due for task in self._tasks) - now)

    def _discard(self, task: RepeatingTask) -> None:
        if task in self._tasks:
            self._tasks.remove(task)


class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class PracticeTimer:
    """Whole-second stopwatch: idle, running, or paused while running."""

    TICK_SECONDS = 1.0

    def __init__(self, scheduler: TickScheduler, on_tick: TickListener | None = None) -> None:
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._task: RepeatingTask | None = None
        self._state = TimerState.IDLE
        self._elapsed = 0

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def running(self) -> bool:
        return self._state is not TimerState.IDLE

    @property
    def paused(self) -> bool:
        return self._state is TimerState.PAUSED

    @property
    def can_start(self) -> bool:
        return self._state is TimerState.IDLE

    @property
    def display(self) -> str:
        return format_time(self._elapsed)

    def start(self) -> None:
        """Begin (or resume) advancing with a fresh tick source."""
        self.stop()
        self._state = TimerState.RUNNING
        self._task = self._scheduler.every(self.TICK_SECONDS, self.tick)
        logger.debug("Timer started at %s", self.display)

    def tick(self) -> None:
        if self._state is not TimerState.RUNNING:
            return
        self._elapsed += 1
        self._emit()

    def pause(self) -> bool:
        """Toggle between running and paused; returns the new paused flag."""
        if self._state is TimerState.RUNNING:
            self._state = TimerState.PAUSED
        elif self._state is TimerState.PAUSED:
            self._state = TimerState.RUNNING
        return self.paused

    def stop(self) -> None:
        """Cancel the tick source without touching elapsed time."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def reset(self) -> None:
        self.stop()
        self._elapsed = 0
        self._state = TimerState.IDLE
        self._emit()

    def _emit(self) -> None:
        if self._on_tick is not None:
            self._on_tick(self.display)
