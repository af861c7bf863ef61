from __future__ import annotations
import threading
from typing import Optional
import requests

from .logging import NullLogger
from .util import format_duration

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"
PAST_DUE_TITLE = "Time to stand up"


class Notifier:
    """Pushover notification when the reminder becomes past due.

    The POST runs on a daemon thread so tick() never waits on the network.
    Failures are logged as notify_failed and otherwise ignored; the reminder
    keeps working without push."""
    def __init__(self, enabled: bool, pushover_token: Optional[str], pushover_user: Optional[str],
                 timeout_s: float = 5.0, logger=None):
        self.enabled = enabled and bool(pushover_token and pushover_user)
        self._token = pushover_token
        self._user = pushover_user
        self._timeout = timeout_s
        self.logger = logger if logger is not None else NullLogger()

    def notify_past_due(self, elapsed_s: float):
        if not self.enabled:
            return
        message = f"You have been sitting for {format_duration(elapsed_s)}."
        threading.Thread(target=self._post, args=(PAST_DUE_TITLE, message), daemon=True).start()

    def _post(self, title: str, message: str):
        payload = {"token": self._token, "user": self._user, "title": title, "message": message}
        try:
            resp = requests.post(PUSHOVER_URL, data=payload, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            self.logger.emit("notify_failed", error=str(e))
            return
        self.logger.emit("notified", title=title)
