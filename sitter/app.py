from __future__ import annotations

import threading
from typing import Optional

from .config import SitterConfig
from .constants import CONTROL_RESET, CONTROL_SNOOZE, CONTROL_STATUS, VERSION
from .control import ControlServer
from .events import EventChannel
from .reminder import SitReminder
from .util import format_duration, now_s
from .watcher import SignalWatcher


class ReminderLoop:
    """Headless host for the reminder.

    Owns the SitReminder and is the only thread that calls into it: ticks,
    control socket commands and status lines all run from step(). The
    watcher thread and the control socket thread only hand data over through
    queues."""
    def __init__(self, config: SitterConfig, logger, notifier=None, channel: Optional[EventChannel] = None):
        self.config = config
        self.logger = logger
        self.channel = channel if channel is not None else EventChannel()
        self.reminder = SitReminder(
            self.channel,
            timer_duration=config.timer_duration_s,
            snooze_duration=config.snooze_duration_s,
            logger=logger,
            notifier=notifier,
            wake_member=config.wake_member,
            verbose=config.verbose,
        )
        self.watcher: Optional[SignalWatcher] = None
        self.control: Optional[ControlServer] = None
        self._watcher_dead_logged = False
        self._next_status_ts = now_s() + config.status_interval_s

    def start(self, watcher: Optional[SignalWatcher] = None):
        """Start the watcher (spawning dbus-monitor unless one is given) and the control socket.

        Raises WatcherStartError if the monitor process cannot be started."""
        if watcher is None:
            watcher = SignalWatcher.spawn(self.channel, self.logger, verbose=self.config.verbose)
        self.watcher = watcher
        self.watcher.start()
        if self.config.control_socket:
            self.control = ControlServer(self.config.control_socket, self.logger)
            self.control.start()

    def stop(self):
        """Close the channel (the watcher exits on its next send) and the control socket."""
        self.channel.close()
        if self.control is not None:
            self.control.stop()
            self.control.join(timeout=1.0)

    def handle_control_command(self, cmd: str) -> dict:
        if cmd == CONTROL_STATUS:
            return {"ok": True, "status": self.reminder.status(), "version": VERSION}
        if cmd == CONTROL_SNOOZE:
            self.reminder.snooze()
            return {"ok": True, "remaining_s": round(self.reminder.remaining(), 3)}
        if cmd == CONTROL_RESET:
            self.reminder.reset()
            return {"ok": True, "remaining_s": round(self.reminder.remaining(), 3)}
        return {"ok": False, "error": f"unknown command: {cmd}"}

    def step(self):
        """One host cycle: pending control commands, one tick, housekeeping."""
        if self.control is not None:
            self.control.drain(self.handle_control_command)
        self.reminder.tick()
        self._check_watcher()
        self._maybe_status()

    def _check_watcher(self):
        # A dead watcher leaves the countdown running without resets.
        w = self.watcher
        if w is None or self._watcher_dead_logged or w.is_alive():
            return
        self._watcher_dead_logged = True
        self.logger.emit("watcher_dead", reason=w.stop_reason, events_sent=w.events_sent)

    def _maybe_status(self):
        interval = self.config.status_interval_s
        if interval <= 0:
            return
        now = now_s()
        if now < self._next_status_ts:
            return
        r = self.reminder
        self.logger.emit(
            "status",
            sat=format_duration(r.elapsed()),
            remaining=format_duration(r.remaining()),
            past_due=int(r.is_past_due()),
            snoozing=int(r.is_snoozing()),
        )
        self._next_status_ts = now + interval

    def run(self, stop_evt: threading.Event):
        """Tick every tick_interval_s until stop_evt is set."""
        while not stop_evt.is_set():
            self.step()
            stop_evt.wait(self.config.tick_interval_s)
