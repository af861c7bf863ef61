import threading

import pytest

from sitter.app import ReminderLoop
from sitter.config import SitterConfig
from sitter import control
from sitter.control import ControlRequest, ControlServer, send_command


def _config(**kw):
    base = dict(timer_duration_s=2, snooze_duration_s=60, status_interval_s=0, control_socket=None)
    base.update(kw)
    return SitterConfig(**base)


def _drive(loop, stop):
    while not stop.is_set():
        loop.step()
        stop.wait(0.02)


@pytest.fixture
def running_loop(tmp_path, logger):
    """A ReminderLoop with a live control socket, stepped from its own thread."""
    sock = str(tmp_path / "ctl.sock")
    loop = ReminderLoop(_config(), logger)
    loop.control = ControlServer(sock, logger)
    loop.control.start()
    assert loop.control.ready.wait(2.0)

    stop = threading.Event()
    owner = threading.Thread(target=_drive, args=(loop, stop), daemon=True)
    owner.start()
    yield loop, sock
    stop.set()
    owner.join(timeout=1.0)
    loop.stop()


def test_status_over_socket(running_loop):
    loop, sock = running_loop
    resp = send_command(sock, "status")
    assert resp["ok"] is True
    assert resp["status"]["timer_duration_s"] == 2.0
    assert resp["status"]["past_due"] is False
    assert "version" in resp


def test_snooze_over_socket(running_loop):
    loop, sock = running_loop
    resp = send_command(sock, "SNOOZE")
    assert resp["ok"] is True
    assert 59.0 <= resp["remaining_s"] <= 60.0
    assert "snoozed" in loop.logger.names()


def test_reset_over_socket(running_loop):
    loop, sock = running_loop
    resp = send_command(sock, "reset")
    assert resp["ok"] is True
    assert ("reset", "manual") in [(e, f.get("source")) for e, f in loop.logger.events]


def test_unknown_and_empty_commands(running_loop):
    loop, sock = running_loop
    assert send_command(sock, "rearm") == {"ok": False, "error": "unknown command: rearm"}
    assert send_command(sock, "") == {"ok": False, "error": "empty command"}


def test_drain_runs_commands_on_caller_thread(logger):
    srv = ControlServer("/unused", logger)
    seen = []

    def handler(cmd):
        seen.append((cmd, threading.current_thread()))
        return {"ok": True}

    req = ControlRequest("status")
    srv.requests.put(req)
    assert srv.drain(handler) == 1
    assert seen == [("status", threading.current_thread())]
    assert req.reply.get_nowait() == {"ok": True}


def test_drain_reports_handler_errors(logger):
    srv = ControlServer("/unused", logger)
    req = ControlRequest("snooze")
    srv.requests.put(req)

    def handler(cmd):
        raise RuntimeError("nope")

    srv.drain(handler)
    assert req.reply.get_nowait() == {"ok": False, "error": "nope"}


def test_socket_removed_on_stop(tmp_path, logger):
    sock = tmp_path / "ctl.sock"
    srv = ControlServer(str(sock), logger)
    srv.start()
    assert srv.ready.wait(2.0)
    assert sock.exists()
    srv.stop()
    srv.join(timeout=2.0)
    assert not sock.exists()


def test_timed_out_command_is_not_applied_later(tmp_path, logger, monkeypatch):
    monkeypatch.setattr(control, "REPLY_TIMEOUT_S", 0.2)
    sock = str(tmp_path / "ctl.sock")
    loop = ReminderLoop(_config(), logger)
    loop.control = ControlServer(sock, logger)
    loop.control.start()
    assert loop.control.ready.wait(2.0)
    try:
        # Nobody is stepping the loop, so the reply times out.
        resp = send_command(sock, "snooze")
        assert resp == {"ok": False, "error": "timed out waiting for reminder loop"}

        loop.step()
        assert loop.reminder.state.snooze_started_at is None
        assert "snoozed" not in logger.names()
        assert ("control_command_dropped", {"command": "snooze"}) in logger.events
    finally:
        loop.stop()


def test_claim_and_cancel_are_exclusive():
    req = ControlRequest("reset")
    assert req.cancel() is True
    assert req.claim() is False

    req = ControlRequest("reset")
    assert req.claim() is True
    assert req.cancel() is False
