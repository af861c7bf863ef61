from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, asdict
from typing import Optional

try:
    import tomllib  # py3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib

from .constants import (
    DEFAULT_DURATION_MIN,
    DEFAULT_SNOOZE_MIN,
    DEFAULT_STATUS_INTERVAL_S,
    DEFAULT_TICK_INTERVAL_S,
    WAKE_MEMBER,
)

CONFIG_ENV = "SITTER_CONFIG"


def get_bool_env(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    val = val.lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def get_notifier_config():
    return {
        "enabled": get_bool_env("SITTER_NOTIFY", False),
        "pushover_token": os.getenv("PUSHOVER_TOKEN"),
        "pushover_user": os.getenv("PUSHOVER_USER"),
    }


def default_socket_path() -> str:
    runtime = os.getenv("XDG_RUNTIME_DIR")
    if runtime:
        return os.path.join(runtime, "sitter.sock")
    return os.path.join(tempfile.gettempdir(), f"sitter-{os.getuid()}.sock")


def load_toml_config(path: str) -> dict:
    """Load TOML configuration from path."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _get_cfg(cfg: dict, section: str, key: str, default=None):
    sec = cfg.get(section, {})
    if not isinstance(sec, dict):
        return default
    return sec.get(key, default)


def config_defaults_from(cfg: dict) -> dict:
    """Flatten the TOML sections into config keys (missing keys get defaults)."""
    return {
        "duration_min": _get_cfg(cfg, "timer", "duration_min", DEFAULT_DURATION_MIN),
        "snooze_min": _get_cfg(cfg, "timer", "snooze_min", DEFAULT_SNOOZE_MIN),
        "tick_interval": _get_cfg(cfg, "timer", "tick_interval", DEFAULT_TICK_INTERVAL_S),
        "wake_member": _get_cfg(cfg, "timer", "wake_member", WAKE_MEMBER),
        "json": _get_cfg(cfg, "logging", "json", False),
        "verbose": _get_cfg(cfg, "logging", "verbose", False),
        "status_interval": _get_cfg(cfg, "logging", "status_interval", DEFAULT_STATUS_INTERVAL_S),
        "control_socket": _get_cfg(cfg, "control", "socket", None),
    }


def minutes_to_seconds(value, key: str) -> int:
    """Convert a minutes value (int, float or numeric string) to whole seconds."""
    try:
        mins = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"invalid {key}: {value!r}") from None
    secs = round(mins * 60.0)
    if secs <= 0:
        raise ValueError(f"invalid {key}: {value!r} (must be positive)")
    return secs


def seconds_value(value, key: str) -> float:
    """Convert a seconds value (int, float or numeric string) to float."""
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"invalid {key}: {value!r}") from None


@dataclass
class SitterConfig:
    """Resolved runtime configuration."""
    timer_duration_s: int
    snooze_duration_s: int
    tick_interval_s: float = DEFAULT_TICK_INTERVAL_S
    wake_member: str = WAKE_MEMBER
    json: bool = False
    verbose: bool = False
    status_interval_s: float = DEFAULT_STATUS_INTERVAL_S
    control_socket: Optional[str] = None

    @classmethod
    def from_dict(cls, cfg: dict) -> "SitterConfig":
        d = config_defaults_from(cfg)
        tick = seconds_value(d["tick_interval"], "tick_interval")
        if tick <= 0:
            raise ValueError(f"invalid tick_interval: {d['tick_interval']!r} (must be positive)")
        return cls(
            timer_duration_s=minutes_to_seconds(d["duration_min"], "duration_min"),
            snooze_duration_s=minutes_to_seconds(d["snooze_min"], "snooze_min"),
            tick_interval_s=tick,
            wake_member=str(d["wake_member"]),
            json=bool(d["json"]),
            verbose=bool(d["verbose"]),
            status_interval_s=seconds_value(d["status_interval"], "status_interval"),
            control_socket=d["control_socket"] or default_socket_path(),
        )

    def as_dict(self) -> dict:
        return asdict(self)


def load_config(path: Optional[str] = None) -> SitterConfig:
    """Load configuration from path, $SITTER_CONFIG, or built-in defaults."""
    path = path or os.getenv(CONFIG_ENV)
    cfg = load_toml_config(path) if path else {}
    return SitterConfig.from_dict(cfg)
