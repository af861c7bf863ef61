from __future__ import annotations

import json
import os
import queue
import socket
import threading
from typing import Callable

from .constants import CONTROL_COMMANDS

REPLY_TIMEOUT_S = 2.0


class ControlRequest:
    """A command waiting to be run on the reminder's owning thread.

    Exactly one of claim() (by the draining loop) and cancel() (by the socket
    thread after its reply timeout) wins."""
    def __init__(self, command: str):
        self.command = command
        self.reply: queue.Queue = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self.claimed = False
        self.cancelled = False

    def claim(self) -> bool:
        with self._lock:
            if self.cancelled:
                return False
            self.claimed = True
            return True

    def cancel(self) -> bool:
        with self._lock:
            if self.claimed:
                return False
            self.cancelled = True
            return True


class ControlServer(threading.Thread):
    """Local UNIX control socket.

    Accepts single-line commands (status, snooze, reset) and answers with a
    single-line JSON response. The socket thread does not touch the reminder:
    each command is queued and executed by whoever calls drain(), normally
    the host loop between ticks.
    """
    def __init__(self, sock_path: str, logger):
        super().__init__(name="control-socket", daemon=True)
        self.sock_path = sock_path
        self.logger = logger
        self.requests: queue.Queue = queue.Queue()
        self._stop_evt = threading.Event()
        self.ready = threading.Event()

    def stop(self):
        self._stop_evt.set()

    def drain(self, handler: Callable[[str], dict]) -> int:
        """Run every queued command through handler and hand back the replies."""
        n = 0
        while True:
            try:
                req = self.requests.get_nowait()
            except queue.Empty:
                return n
            if not req.claim():
                # The client already got a timeout reply.
                self.logger.emit("control_command_dropped", command=req.command)
                continue
            try:
                resp = handler(req.command)
            except Exception as e:
                resp = {"ok": False, "error": str(e)}
            req.reply.put(resp)
            n += 1

    def _submit(self, cmd: str) -> dict:
        cmd = (cmd or "").strip().lower()
        if not cmd:
            return {"ok": False, "error": "empty command"}
        if cmd not in CONTROL_COMMANDS:
            return {"ok": False, "error": f"unknown command: {cmd}"}
        req = ControlRequest(cmd)
        self.requests.put(req)
        try:
            return req.reply.get(timeout=REPLY_TIMEOUT_S)
        except queue.Empty:
            if req.cancel():
                return {"ok": False, "error": "timed out waiting for reminder loop"}
        # Claimed just before the timeout; the handler is running, its reply follows.
        return req.reply.get()

    def _bind(self) -> socket.socket:
        path = self.sock_path
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        # A stale socket from a previous run blocks bind().
        if os.path.exists(path):
            os.remove(path)
        srv = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            srv.bind(path)
            os.chmod(path, 0o600)
            srv.listen(4)
            srv.settimeout(0.5)
        except OSError:
            srv.close()
            raise
        return srv

    def run(self):
        try:
            srv = self._bind()
        except OSError as e:
            self.logger.emit("control_socket_error", error=str(e), path=self.sock_path)
            self.ready.set()
            return
        self.logger.emit("control_socket_started", path=self.sock_path)
        self.ready.set()

        try:
            while not self._stop_evt.is_set():
                try:
                    conn, _ = srv.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break
                with conn:
                    self._serve(conn)
        finally:
            srv.close()
            try:
                os.remove(self.sock_path)
            except FileNotFoundError:
                pass

    def _serve(self, conn: socket.socket):
        try:
            conn.settimeout(REPLY_TIMEOUT_S)
            data = b""
            while b"\n" not in data and len(data) < 4096:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                data += chunk
            resp = self._submit(data.decode("utf-8", errors="replace"))
            conn.sendall((json.dumps(resp, sort_keys=True) + "\n").encode("utf-8"))
        except OSError as e:
            self.logger.emit("control_client_error", error=str(e))


def send_command(sock_path: str, cmd: str, timeout_s: float = 5.0) -> dict:
    """Send one command to a running reminder and return its JSON reply."""
    s = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        s.settimeout(timeout_s)
        s.connect(sock_path)
        s.sendall((cmd.strip() + "\n").encode("utf-8"))
        data = b""
        while b"\n" not in data and len(data) < 65536:
            chunk = s.recv(4096)
            if not chunk:
                break
            data += chunk
    finally:
        s.close()
    line = data.decode("utf-8", errors="replace").strip()
    if not line:
        return {"ok": False, "error": "empty response"}
    try:
        return json.loads(line)
    except ValueError:
        return {"ok": False, "error": "non-json response", "raw": line}
