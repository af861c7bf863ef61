from __future__ import annotations

import subprocess
import threading
from typing import Iterable, Optional, Sequence

from .constants import MONITOR_COMMAND
from .events import ChannelClosed, EventChannel, parse_monitor_line


class WatcherStartError(RuntimeError):
    """The bus monitor process could not be started."""


def spawn_monitor(command: Sequence[str] = MONITOR_COMMAND) -> subprocess.Popen:
    """Start the bus monitor with stdout captured as a byte pipe.

    Raises WatcherStartError if the executable is missing or cannot be run;
    without it there is no event source at all."""
    try:
        return subprocess.Popen(
            list(command),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
        )
    except OSError as e:
        raise WatcherStartError(f"failed to start {command[0]}: {e}") from e


class SignalWatcher(threading.Thread):
    """Background bus signal reader.

    Reads lines from the monitor's output, turns signal headers into
    SignalEvents and sends them on the channel. The loop ends when the stream
    ends, when reading fails, or when the channel has been closed by the
    consumer. It never respawns the monitor."""
    def __init__(self, lines: Iterable, channel: EventChannel, logger, verbose: bool = False,
                 process: Optional[subprocess.Popen] = None):
        """Create the watcher thread.

        Args:
            lines: Iterable of text or byte lines (a pipe, or a list in tests).
            channel: Sending side for parsed events.
            logger: Object with an .emit(event, **fields) method.
            process: The monitor process the lines come from, if any.
        """
        super().__init__(name="signal-watcher", daemon=True)
        self.lines = lines
        self.channel = channel
        self.logger = logger
        self.verbose = bool(verbose)
        self.process = process
        self.lines_read = 0
        self.events_sent = 0
        self.stop_reason: Optional[str] = None

    @classmethod
    def spawn(cls, channel: EventChannel, logger, command: Sequence[str] = MONITOR_COMMAND,
              verbose: bool = False) -> "SignalWatcher":
        """Spawn the monitor process and return an unstarted watcher reading its stdout."""
        proc = spawn_monitor(command)
        logger.emit("watcher_spawned", pid=proc.pid, command=" ".join(command))
        return cls(proc.stdout, channel, logger, verbose=verbose, process=proc)

    def _emit(self, event: str, **fields):
        try:
            self.logger.emit(event, **fields)
        except Exception:
            pass

    def run(self):
        """Thread entry point. Reads monitor lines until the stream or the channel goes away."""
        try:
            for raw in self.lines:
                self.lines_read += 1
                event = parse_monitor_line(raw)
                if event is None:
                    continue
                try:
                    self.channel.send(event)
                except ChannelClosed:
                    self.stop_reason = "channel_closed"
                    self._emit("watcher_channel_closed", events_sent=self.events_sent)
                    return
                self.events_sent += 1
                if self.verbose:
                    self._emit("signal", member=event.member, ts=round(event.timestamp, 3))
        except (OSError, ValueError) as e:
            # ValueError: read on a pipe that was closed underneath us.
            self.stop_reason = "read_error"
            self._emit("watcher_read_error", error=str(e))
            return
        self.stop_reason = "eof"
        self._emit("watcher_eof", lines_read=self.lines_read)
