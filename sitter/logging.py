from __future__ import annotations

import json
import sys
import time


class JsonLogger:
    """Minimal structured logger.

    Emits single-line events for reminder transitions (reset, snooze, past due)
    so logs are easy to grep and machine-parse."""
    def __init__(self, enable_json: bool, stream=None):
        """Create a logger.

        Args:
            enable_json: Emit JSON objects instead of human-readable lines.
            stream: A file-like object (defaults to stdout) used for event output.
        """
        self.enable_json = enable_json
        self.stream = stream

    def emit(self, event: str, **fields):
        """Emit an event with a name and optional key/value fields."""
        out = self.stream if self.stream is not None else sys.stdout
        t = time.time()
        # ts_iso is local time with milliseconds.
        ts_iso = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(t)) + f'.{int((t - int(t))*1000):03d}'
        if self.enable_json:
            payload = {"ts": t, "ts_iso": ts_iso, "event": event, **fields}
            print(json.dumps(payload, sort_keys=True), file=out, flush=True)
        else:
            msg = f"[{ts_iso}] {event}"
            if fields:
                msg += " " + " ".join(f"{k}={v}" for k, v in fields.items())
            print(msg, file=out, flush=True)


class NullLogger:
    """Logger that drops every event."""
    def emit(self, event: str, **fields):
        pass
