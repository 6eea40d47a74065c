from __future__ import annotations

import argparse
import math
import os
from dataclasses import dataclass
from typing import Mapping

from . import paths


DEFAULT_DEBOUNCE = 3.0
DEFAULT_POLL_INTERVAL = 0.5


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class LauncherConfig:
    debounce_window: float = DEFAULT_DEBOUNCE
    verbose: bool = False
    daemonize: bool = False
    display: str | None = None
    pidfile: str | None = None
    poll_interval: float = DEFAULT_POLL_INTERVAL


def _parse_seconds(raw: object, source: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{source}: expected a number of seconds, got {raw!r}")
    if value < 0 or not math.isfinite(value):
        raise ConfigError(f"{source}: must be a non-negative number, got {raw!r}")
    return value


def load_config(args: argparse.Namespace, env: Mapping[str, str] | None = None) -> LauncherConfig:
    env = os.environ if env is None else env

    debounce = getattr(args, "debounce", None)
    if debounce is not None:
        window = _parse_seconds(debounce, "--debounce")
    elif env.get("AUTORANDR_LAUNCHER_DEBOUNCE"):
        window = _parse_seconds(env["AUTORANDR_LAUNCHER_DEBOUNCE"], "AUTORANDR_LAUNCHER_DEBOUNCE")
    else:
        window = DEFAULT_DEBOUNCE

    display = getattr(args, "display", None) or env.get("DISPLAY") or None
    pidfile = getattr(args, "pidfile", None)
    pidfile = os.path.abspath(pidfile) if pidfile else paths.default_pidfile(env)

    return LauncherConfig(
        debounce_window=window,
        verbose=bool(getattr(args, "verbose", False)),
        daemonize=bool(getattr(args, "daemonize", False) or getattr(args, "daemon_child", False)),
        display=display,
        pidfile=pidfile,
    )
