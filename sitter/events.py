from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Optional, Union

from .util import now_s

SIGNAL_KEYWORD = "signal"
MEMBER_KEY = "member"


class ChannelClosed(Exception):
    """Raised by EventChannel.send() once the channel has been closed."""


@dataclass(frozen=True)
class SignalEvent:
    """One observed bus signal.

    timestamp is taken from now_s() at the moment the header line was parsed."""
    timestamp: float
    member: str


def parse_monitor_line(line: Union[str, bytes], now: Optional[float] = None) -> Optional[SignalEvent]:
    """Parse a single line of dbus-monitor output.

    Only signal header lines carry an event, e.g.:

        signal time=1700000000.1 sender=:1.23 -> destination=(null destination)
        serial=42 path=/org/gnome/ScreenSaver; interface=org.gnome.ScreenSaver
        member=WakeUpScreen

    Body lines (``string "..."``, ``array [`` ...) and headers without a
    ``member=`` token return None.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    tokens = line.split()
    if not tokens or tokens[0] != SIGNAL_KEYWORD:
        return None

    member = None
    for tok in tokens[1:]:
        key, sep, value = tok.partition("=")
        if sep and key == MEMBER_KEY:
            member = value
    if member is None:
        return None
    return SignalEvent(timestamp=now_s() if now is None else now, member=member)


class EventChannel:
    """Unbounded FIFO hand-off between the watcher thread and the reminder.

    One producer calls send(), one consumer calls try_recv(). close() plays the
    part of dropping the sending half: the producer's next send() raises
    ChannelClosed, which is its cue to stop. Already queued events stay
    receivable."""
    def __init__(self):
        self._q = queue.SimpleQueue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, event: SignalEvent):
        if self._closed.is_set():
            raise ChannelClosed("event channel closed")
        self._q.put(event)

    def try_recv(self) -> Optional[SignalEvent]:
        """Return the oldest pending event, or None without blocking."""
        try:
            return self._q.get_nowait()
        except queue.Empty:
            return None

    def close(self):
        self._closed.set()
