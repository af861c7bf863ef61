#!/usr/bin/env python3
#
# Stand-up reminder
#
# Counts down from the moment you sit down and nags once the countdown runs
# out. The countdown restarts whenever the GNOME screensaver reports that the
# screen woke up (observed through dbus-monitor), so stepping away long enough
# to lock the screen counts as a break.
#

from __future__ import annotations

from sitter.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
