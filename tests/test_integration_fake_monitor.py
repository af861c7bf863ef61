import sys
import textwrap

import pytest

from sitter.events import EventChannel
from sitter.reminder import SitReminder
from sitter.watcher import SignalWatcher

FAKE_MONITOR = textwrap.dedent(
    """
    import sys
    lines = [
        "signal time=1.0 sender=org.freedesktop.DBus -> destination=:1.9 serial=2 path=/org/freedesktop/DBus; interface=org.freedesktop.DBus; member=NameAcquired",
        '   string ":1.9"',
        "signal time=2.0 sender=:1.36 -> destination=(null destination) serial=11 path=/org/gnome/ScreenSaver; interface=org.gnome.ScreenSaver; member=WakeUpScreen",
    ]
    for line in lines:
        print(line, flush=True)
    """
)


@pytest.mark.integration
def test_spawned_monitor_feeds_reminder(logger):
    """Run a stand-in for dbus-monitor as a real child process and fold its events."""
    ch = EventChannel()
    w = SignalWatcher.spawn(ch, logger, command=[sys.executable, "-c", FAKE_MONITOR])
    try:
        w.start()
        w.join(timeout=10.0)
        assert not w.is_alive(), "watcher did not reach end of stream"
        assert w.stop_reason == "eof"
        assert w.events_sent == 2
    finally:
        w.process.wait(timeout=5.0)
        w.process.stdout.close()

    r = SitReminder(ch, timer_duration=60.0, snooze_duration=5.0, logger=logger)
    r.tick()
    r.tick()
    assert r.state.last_member == "WakeUpScreen"
    assert r.state.resets == 1
