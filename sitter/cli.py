from __future__ import annotations

import signal
import sys
import threading

from .app import ReminderLoop
from .config import get_notifier_config, load_config
from .constants import VERSION
from .logging import JsonLogger
from .notify import Notifier
from .watcher import WatcherStartError


def main():
    """Entry point. Loads config ($SITTER_CONFIG), starts the watcher and runs the reminder loop."""
    try:
        config = load_config()
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logger = JsonLogger(enable_json=config.json)
    notifier = Notifier(**get_notifier_config(), logger=logger)
    loop = ReminderLoop(config, logger, notifier=notifier)

    logger.emit(
        "startup",
        version=VERSION,
        timer_duration_s=config.timer_duration_s,
        snooze_duration_s=config.snooze_duration_s,
        wake_member=config.wake_member,
        control_socket=config.control_socket,
        notify=int(notifier.enabled),
    )

    try:
        loop.start()
    except WatcherStartError as e:
        # No signal source, nothing to remind about.
        logger.emit("watcher_start_failed", error=str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    loop.run(stop)
    loop.stop()
    logger.emit("shutdown", ticks=loop.reminder.state.tick_count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
