from __future__ import annotations

from .constants import WAKE_MEMBER
from .events import EventChannel
from .logging import NullLogger
from .state import ReminderState
from .util import now_s


class SitReminder:
    """Stand-up reminder state machine.

    Counts down timer_duration from the last reset. A wake signal taken off
    the channel by tick() resets the countdown and cancels a snooze. snooze()
    opens a grace window that takes precedence over the base countdown while
    it runs; once it lapses the reminder is past due again until the next
    reset. Everything derived (elapsed, remaining, past due) is recomputed
    from timestamps on each call.

    Not thread-safe: tick(), snooze(), reset() and the queries must all be
    called from the thread that owns the instance."""
    def __init__(
        self,
        channel: EventChannel,
        timer_duration: float,
        snooze_duration: float,
        logger=None,
        notifier=None,
        wake_member: str = WAKE_MEMBER,
        verbose: bool = False,
    ):
        self.channel = channel
        self.logger = logger if logger is not None else NullLogger()
        self.notifier = notifier
        self.wake_member = wake_member
        self.verbose = bool(verbose)
        self.state = ReminderState(
            last_reset_time=now_s(),
            timer_duration=float(timer_duration),
            snooze_duration=float(snooze_duration),
        )
        # Set while the current past-due episode has been announced.
        self._past_due_latched = False

    def tick(self):
        """Fold at most one pending signal event into the state.

        Never blocks. Queued events beyond the first wait for later ticks."""
        st = self.state
        st.tick_count += 1
        event = self.channel.try_recv()
        if event is not None:
            st.events_consumed += 1
            st.last_member = event.member
            if event.member == self.wake_member:
                self._reset(event.timestamp, source="signal")
            elif self.verbose:
                self.logger.emit("signal_ignored", member=event.member)
        self._check_past_due()

    def snooze(self):
        """Start (or restart) the snooze window from now."""
        self.state.snooze_started_at = now_s()
        self.logger.emit(
            "snoozed",
            snooze_s=self.state.snooze_duration,
            elapsed_s=round(self.elapsed(), 3),
        )
        self._check_past_due()

    def reset(self):
        """Manual reset, same effect as a wake signal observed now."""
        self._reset(now_s(), source="manual")
        self._check_past_due()

    def _reset(self, ts: float, source: str):
        st = self.state
        sat_s = ts - st.last_reset_time
        st.last_reset_time = ts
        st.snooze_started_at = None
        st.resets += 1
        self.logger.emit("reset", source=source, sat_s=round(max(0.0, sat_s), 3))

    def _check_past_due(self):
        """Announce each past-due episode once; re-arm when it ends."""
        past_due = self.is_past_due()
        if past_due and not self._past_due_latched:
            self._past_due_latched = True
            elapsed = self.elapsed()
            self.logger.emit(
                "past_due",
                elapsed_s=round(elapsed, 3),
                snoozed=int(self.state.snooze_started_at is not None),
            )
            if self.notifier is not None:
                self.notifier.notify_past_due(elapsed)
        elif not past_due and self._past_due_latched:
            self._past_due_latched = False

    def elapsed(self) -> float:
        """Seconds since the last reset. A clock stepping backwards reads as 0."""
        return max(0.0, now_s() - self.state.last_reset_time)

    def remaining(self) -> float:
        st = self.state
        if st.snooze_started_at is not None:
            snoozed = max(0.0, now_s() - st.snooze_started_at)
            return max(0.0, st.snooze_duration - snoozed)
        return max(0.0, st.timer_duration - self.elapsed())

    def is_past_due(self) -> bool:
        return self.remaining() <= 0.0

    def is_snoozing(self) -> bool:
        return self.state.snooze_started_at is not None and not self.is_past_due()

    def can_snooze(self) -> bool:
        """Snoozing is offered only once the reminder is past due."""
        return self.is_past_due()

    def status(self) -> dict:
        st = self.state
        return {
            "elapsed_s": round(self.elapsed(), 3),
            "remaining_s": round(self.remaining(), 3),
            "past_due": self.is_past_due(),
            "snoozing": self.is_snoozing(),
            "timer_duration_s": st.timer_duration,
            "snooze_duration_s": st.snooze_duration,
            "tick_count": st.tick_count,
            "events_consumed": st.events_consumed,
            "resets": st.resets,
            "last_member": st.last_member,
        }
