import sys
import time
from pathlib import Path

import pytest

# Make the repo root importable without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


class CapturingLogger:
    """Minimal logger that matches the .emit(event, **fields) contract."""
    def __init__(self):
        self.events = []

    def emit(self, event: str, **fields):
        self.events.append((event, fields))

    def names(self):
        return [e for e, _ in self.events]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def logger():
    return CapturingLogger()


@pytest.fixture
def clock(monkeypatch):
    """Replace time.monotonic (and therefore sitter.util.now_s) with a manual clock."""
    c = FakeClock()
    monkeypatch.setattr(time, "monotonic", c, raising=True)
    return c
