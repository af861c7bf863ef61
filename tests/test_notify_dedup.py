from sitter.events import EventChannel, SignalEvent
from sitter.reminder import SitReminder


class DummyNotifier:
    def __init__(self):
        self.calls = []

    def notify_past_due(self, elapsed_s):
        self.calls.append(elapsed_s)


def _mk(clock, logger, timer=2.0, snooze=1.0):
    n = DummyNotifier()
    ch = EventChannel()
    r = SitReminder(ch, timer_duration=timer, snooze_duration=snooze, logger=logger, notifier=n)
    return ch, r, n


def test_single_notification_per_past_due_episode(clock, logger):
    ch, r, n = _mk(clock, logger)
    clock.advance(3.0)
    for _ in range(5):
        r.tick()
        clock.advance(1.0)
    assert n.calls == [3.0]
    assert logger.names().count("past_due") == 1


def test_snooze_lapse_starts_a_new_episode(clock, logger):
    ch, r, n = _mk(clock, logger)
    clock.advance(3.0)
    r.tick()
    r.snooze()
    clock.advance(0.5)
    r.tick()
    assert len(n.calls) == 1

    clock.advance(1.0)
    r.tick()
    r.tick()
    assert len(n.calls) == 2
    assert logger.events[-1] == ("past_due", {"elapsed_s": 4.5, "snoozed": 1})


def test_reset_rearms_notification(clock, logger):
    ch, r, n = _mk(clock, logger)
    clock.advance(3.0)
    r.tick()
    ch.send(SignalEvent(timestamp=clock(), member="WakeUpScreen"))
    r.tick()
    assert len(n.calls) == 1

    clock.advance(2.0)
    r.tick()
    assert len(n.calls) == 2


def test_no_notification_before_due(clock, logger):
    ch, r, n = _mk(clock, logger, timer=60.0)
    for _ in range(30):
        clock.advance(1.0)
        r.tick()
    assert n.calls == []
