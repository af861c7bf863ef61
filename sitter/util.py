from __future__ import annotations

import time


def now_s() -> float:
    """Monotonic clock in seconds."""
    return time.monotonic()


def format_duration(seconds: float) -> str:
    """Render a duration the way the status line shows it ("42 seconds", "3:07 minutes")."""
    secs = int(max(0.0, seconds))
    if secs < 60:
        return f"{secs} seconds"
    return f"{secs // 60}:{secs % 60:02d} minutes"
