from __future__ import annotations

VERSION = "0.3.0"

# Signal member the screensaver emits when the screen wakes up.
WAKE_MEMBER = "WakeUpScreen"

MONITOR_INTERFACE = "org.gnome.ScreenSaver"
MONITOR_COMMAND = [
    "dbus-monitor",
    "--session",
    f"type='signal',interface='{MONITOR_INTERFACE}'",
]

DEFAULT_DURATION_MIN = 30.0
DEFAULT_SNOOZE_MIN = 5.0
DEFAULT_TICK_INTERVAL_S = 1.0
DEFAULT_STATUS_INTERVAL_S = 60.0

CONTROL_STATUS = "status"
CONTROL_SNOOZE = "snooze"
CONTROL_RESET = "reset"
CONTROL_COMMANDS = (CONTROL_STATUS, CONTROL_SNOOZE, CONTROL_RESET)


USAGE_EXAMPLES = """\
Usage examples:
  # Run with the defaults (30 minute countdown, 5 minute snooze)
  python sit-reminder.py

  # Use a config file
  SITTER_CONFIG=~/.config/sitter.toml python sit-reminder.py

  # Snooze a past-due reminder from another terminal
  python sitterctl.py snooze
"""
