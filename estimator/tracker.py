# estimator/tracker.py
"""
Live progress tracking against a target duration.

The tracker measures real elapsed time from an injected clock instead of
counting scheduled callbacks, so late, throttled or skipped ticks never skew
the result. Periodic ticks come from an injected scheduler (anything with
`call_later(delay, callback)` returning a cancellable handle, e.g. an asyncio
event loop); without one, the owner drives `tick()` directly.

States: idle -> running <-> paused -> completed, with `reset` back to idle.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional, Protocol

from estimator.models import TimerState, TimerVariant
from estimator.timefmt import format_time, format_time_with_label, get_timer_color_theme

logger = logging.getLogger(__name__)

Listener = Optional[Callable[[], None]]


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


def _sanitize_duration(value) -> float:
    """Non-finite or negative durations collapse to 0 (already at the bound)."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0:
        return 0.0
    return v


class ProgressTracker:
    """
    Drift-corrected countdown / stopwatch / progress timer.

    Listener callbacks are synchronous notifications. They run after the
    tracker has finished its own bookkeeping, and an exception raised by a
    listener is logged, never propagated into the tracker.
    """

    def __init__(
        self,
        initial_duration: float = 0.0,
        variant: TimerVariant = "countdown",
        target_time: Optional[float] = None,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        scheduler: Optional[Scheduler] = None,
        auto_start: bool = False,
        stop_at_target: bool = True,
        on_start: Listener = None,
        on_pause: Listener = None,
        on_resume: Listener = None,
        on_reset: Listener = None,
        on_complete: Listener = None,
        on_tick: Optional[Callable[[TimerState], None]] = None,
    ):
        if variant not in ("countdown", "stopwatch", "progress"):
            raise ValueError(f"unknown timer variant: {variant!r}")
        self.variant = variant
        self.initial_duration = _sanitize_duration(initial_duration)
        target = _sanitize_duration(target_time) if target_time is not None else 0.0
        self.target_time: Optional[float] = target if target > 0 else None
        self.interval = interval if interval and interval > 0 else 1.0
        # a stopwatch with stop_at_target=False keeps counting past its target
        self.stop_at_target = stop_at_target

        self._clock = clock
        self._scheduler = scheduler
        self._on_start = on_start
        self._on_pause = on_pause
        self._on_resume = on_resume
        self._on_reset = on_reset
        self._on_complete = on_complete
        self._on_tick = on_tick

        self.time = self.initial_duration
        self._status = "idle"
        self._elapsed = 0.0
        self._last_tick = clock()
        self._hidden_at: Optional[float] = None
        self._handle: Optional[Cancellable] = None
        self._completion_reported = False

        if auto_start:
            self.start()

    # ------------------------------------------------------------------ state

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == "running"

    @property
    def is_paused(self) -> bool:
        return self._status == "paused"

    @property
    def is_completed(self) -> bool:
        return self._status == "completed"

    @property
    def elapsed(self) -> float:
        """Real seconds spent running, pauses excluded."""
        return self._elapsed

    @property
    def progress(self) -> float:
        if self.variant in ("countdown", "progress"):
            if self.initial_duration <= 0:
                return 100.0
            pct = (self.initial_duration - self.time) / self.initial_duration * 100
        else:
            if not self.target_time:
                return 0.0
            pct = self.time / self.target_time * 100
        return max(0.0, min(100.0, pct))

    @property
    def state(self) -> TimerState:
        return TimerState(
            time=self.time,
            is_running=self.is_running,
            is_paused=self.is_paused,
            is_completed=self.is_completed,
            progress=self.progress,
        )

    def formatted_time(self, show_hours: bool = False, show_milliseconds: bool = False) -> str:
        return format_time(self.time, show_hours, show_milliseconds)

    def time_with_label(self, context: str = "remaining") -> str:
        return format_time_with_label(self.time, context)

    def color_theme(self) -> str:
        if self.variant == "stopwatch":
            return "default"
        return get_timer_color_theme(self.time, self.initial_duration)

    # ------------------------------------------------------------ transitions

    def start(self) -> None:
        if self._status in ("completed", "running"):
            return
        if self._status == "paused":
            self.resume()
            return
        self._status = "running"
        self._last_tick = self._clock()
        logger.debug(f"[tracker] start variant={self.variant} time={self.time:.2f}")
        if self._should_complete():
            self._complete()
            self._notify(self._on_start)
            self._notify(self._on_complete)
            return
        self._schedule()
        self._notify(self._on_start)

    def pause(self) -> None:
        if self._status != "running":
            return
        # bank the time since the last tick before stopping the clock
        completed = self._advance()
        if completed:
            self._notify(self._on_complete)
            return
        self._status = "paused"
        self._cancel()
        self._hidden_at = None
        logger.debug(f"[tracker] pause time={self.time:.2f}")
        self._notify(self._on_pause)

    def resume(self) -> None:
        if self._status != "paused":
            return
        self._status = "running"
        self._last_tick = self._clock()
        self._schedule()
        logger.debug(f"[tracker] resume time={self.time:.2f}")
        self._notify(self._on_resume)

    def reset(self) -> None:
        self._cancel()
        self.time = self.initial_duration
        self._status = "idle"
        self._elapsed = 0.0
        self._last_tick = self._clock()
        self._hidden_at = None
        self._completion_reported = False
        logger.debug("[tracker] reset")
        self._notify(self._on_reset)

    def toggle(self) -> None:
        if self._status == "completed":
            return
        if self._status == "running":
            self.pause()
        elif self._status == "paused":
            self.resume()
        else:
            self.start()

    def tick(self) -> TimerState:
        """
        Advance by the real time since the previous tick. No-op unless running.
        """
        if self._status != "running":
            return self.state
        completed = self._advance()
        if not completed:
            self._schedule()
        snapshot = self.state
        self._notify(self._on_tick, snapshot)
        if completed:
            self._notify(self._on_complete)
        return snapshot

    # ------------------------------------------------------------- visibility

    def on_visibility_change(self, hidden: bool) -> None:
        """
        React to the host losing or regaining focus (sleep, background tab).

        On regain after a gap longer than one interval, tick immediately
        instead of waiting for the next scheduled callback.
        """
        if self._status != "running":
            self._hidden_at = None
            return
        now = self._clock()
        if hidden:
            # repeated hidden signals keep the first timestamp
            if self._hidden_at is None:
                self._hidden_at = now
            return
        if self._hidden_at is None:
            return
        gap = now - self._hidden_at
        self._hidden_at = None
        if gap > self.interval:
            logger.debug(f"[tracker] visible again after {gap:.2f}s; catching up")
            self.tick()

    def suspend(self) -> None:
        self.on_visibility_change(True)

    def wake(self) -> None:
        self.on_visibility_change(False)

    # --------------------------------------------------------------- internal

    def _advance(self) -> bool:
        """Apply the wall-clock delta; returns True if this completed the timer."""
        now = self._clock()
        delta = max(0.0, now - self._last_tick)
        self._last_tick = now
        self._elapsed += delta
        if self.variant == "stopwatch":
            self.time += delta
        else:
            self.time = max(0.0, self.time - delta)
        if self._should_complete():
            return self._complete()
        return False

    def _should_complete(self) -> bool:
        if self.variant == "stopwatch":
            return self.stop_at_target and self.target_time is not None and self.time >= self.target_time
        return self.time <= 0

    def _complete(self) -> bool:
        if self._completion_reported:
            return False
        self._completion_reported = True
        self._status = "completed"
        self._cancel()
        logger.debug(f"[tracker] complete elapsed={self._elapsed:.2f}s")
        return True

    def _schedule(self) -> None:
        if self._scheduler is None:
            return
        self._cancel()
        self._handle = self._scheduler.call_later(self.interval, self._scheduled_tick)

    def _scheduled_tick(self) -> None:
        self._handle = None
        self.tick()

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify(self, listener, *args) -> None:
        if listener is None:
            return
        try:
            listener(*args)
        except Exception:
            logger.exception("[tracker] listener raised; continuing")
