from __future__ import annotations

import os
from typing import Mapping


PIDFILE_NAME = "autorandr-launcher.pid"


def runtime_dir(env: Mapping[str, str] | None = None) -> str:
    env = os.environ if env is None else env
    override = env.get("XDG_RUNTIME_DIR")
    if override:
        return os.path.abspath(override)
    return os.path.join(os.path.expanduser("~"), ".cache")


def default_pidfile(env: Mapping[str, str] | None = None) -> str:
    env = os.environ if env is None else env
    override = env.get("AUTORANDR_LAUNCHER_PIDFILE")
    if override:
        return os.path.abspath(override)
    return os.path.join(runtime_dir(env), PIDFILE_NAME)
