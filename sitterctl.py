#!/usr/bin/env python3
"""Local control client for sit-reminder.

Talks to the running reminder over its UNIX socket.

Commands:
  status | snooze | reset

Socket path:
  - default: $XDG_RUNTIME_DIR/sitter.sock
  - override: --socket PATH or SITTER_SOCKET env var
"""

from __future__ import annotations

import argparse
from argparse import RawDescriptionHelpFormatter
import json
import os
import sys

from sitter.config import default_socket_path
from sitter.constants import CONTROL_COMMANDS, USAGE_EXAMPLES
from sitter.control import send_command
from sitter.util import format_duration


def main() -> int:
    ap = argparse.ArgumentParser(
        description="Control sit-reminder via its local UNIX socket",
        epilog=USAGE_EXAMPLES,
        formatter_class=RawDescriptionHelpFormatter,
    )
    ap.add_argument("command", choices=list(CONTROL_COMMANDS), help="Command to send to the reminder")
    ap.add_argument("--socket", default=os.environ.get("SITTER_SOCKET") or default_socket_path(),
                    help="Control socket path")
    ap.add_argument("--json", action="store_true", help="Print raw JSON response")
    args = ap.parse_args()

    try:
        resp = send_command(args.socket, args.command)
    except OSError as e:
        print(f"error: cannot reach {args.socket}: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(resp, indent=2, sort_keys=True))
        return 0 if resp.get("ok") else 2

    if not resp.get("ok"):
        print(f"error: {resp.get('error', 'unknown error')}", file=sys.stderr)
        raw = resp.get("raw")
        if raw:
            print(raw, file=sys.stderr)
        return 2

    if args.command == "status":
        st = resp.get("status", {})
        ver = resp.get("version", "")
        print(
            f"ok  version={ver} sat={format_duration(st.get('elapsed_s', 0))} "
            f"remaining={format_duration(st.get('remaining_s', 0))} "
            f"past_due={st.get('past_due')} snoozing={st.get('snoozing')}"
        )
    else:
        print(f"ok  remaining={format_duration(resp.get('remaining_s', 0))}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
