"""sitter package for sit-reminder."""

from .events import EventChannel, SignalEvent
from .reminder import SitReminder
from .state import ReminderState
from .watcher import SignalWatcher

__all__ = ["EventChannel", "SignalEvent", "SitReminder", "ReminderState", "SignalWatcher"]
