"""
Time display helpers and per-context timer duration policy.
"""
from __future__ import annotations
import math
from typing import Dict, Tuple
from estimator.models import DurationValidation, TimerContext
from estimator.utils import is_finite_number

# context -> (min seconds, max seconds)
DURATION_LIMITS: Dict[str, Tuple[int, int]] = {
    "quiz": (30, 3600),
    "ai": (60, 300),
    "learning": (60, 1800),
    "general": (1, 7200),
}


def format_time(seconds: float, show_hours: bool = False, show_milliseconds: bool = False) -> str:
    """
    Format seconds as MM:SS, or H:MM:SS once an hour is reached.

    Negative and non-finite values render as zero.

    >>> format_time(90)
    '01:30'
    >>> format_time(3661, show_hours=True)
    '1:01:01'
    """
    if not is_finite_number(seconds) or seconds < 0:
        return "0:00:00" if show_hours else "00:00"

    total = math.floor(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    millis = math.floor((seconds - total) * 1000)

    if show_hours or hours > 0:
        out = f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        out = f"{minutes:02d}:{secs:02d}"
    return f"{out}.{millis:03d}" if show_milliseconds else out

def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"

def format_time_with_label(seconds: float, context: str = "remaining") -> str:
    """
    Human readable duration with at most two units, e.g. "1 minute 30 seconds remaining".
    """
    if not is_finite_number(seconds) or seconds < 0:
        return f"0 seconds {context}"

    total = math.floor(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)

    parts = []
    if hours > 0:
        parts.append(_plural(hours, "hour"))
    if minutes > 0:
        parts.append(_plural(minutes, "minute"))
    if secs > 0 or not parts:
        parts.append(_plural(secs, "second"))
    return f"{' '.join(parts[:2])} {context}"

def calculate_progress(elapsed: float, total: float) -> float:
    """Percentage of `total` covered by `elapsed`, clamped to [0, 100]."""
    if not is_finite_number(elapsed) or not is_finite_number(total) or total <= 0:
        return 0
    return max(0, min(100, elapsed / total * 100))

def get_timer_color_theme(
    remaining: float,
    total: float,
    danger: float = 0.25,
    warning: float = 0.5,
) -> str:
    if not is_finite_number(remaining) or not is_finite_number(total) or total <= 0:
        return "default"
    share = remaining / total
    if share <= danger:
        return "danger"
    if share <= warning:
        return "warning"
    return "success"

def validate_timer_duration(duration: float, context: TimerContext = "general") -> DurationValidation:
    """
    Check a timer duration against the bounds for its usage context.

    Out-of-policy durations are not rejected: the result carries the nearest
    acceptable duration plus an advisory message.

    Args:
        duration: Requested duration in seconds.
        context: One of "quiz", "ai", "learning", "general".

    Returns:
        DurationValidation
    """
    lo, hi = DURATION_LIMITS.get(context, DURATION_LIMITS["general"])

    if not is_finite_number(duration):
        return DurationValidation(is_valid=False, duration=lo, error="Duration must be a valid number")
    if duration < lo:
        return DurationValidation(
            is_valid=False, duration=lo,
            error=f"Duration must be at least {lo} seconds for {context} timers",
        )
    if duration > hi:
        return DurationValidation(
            is_valid=False, duration=hi,
            error=f"Duration cannot exceed {hi} seconds for {context} timers",
        )
    return DurationValidation(is_valid=True, duration=math.floor(duration))
