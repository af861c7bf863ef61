from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ReminderState:
    """Holds the countdown/snooze state of the reminder.

    Owned by the thread that drives tick(); only the event channel crosses
    thread boundaries. Remaining time and past-due status are derived from
    these timestamps on every query and are never stored."""
    last_reset_time: float
    timer_duration: float
    snooze_duration: float
    snooze_started_at: Optional[float] = None
    tick_count: int = 0

    # diagnostics
    last_member: str = ""
    events_consumed: int = 0
    resets: int = 0
