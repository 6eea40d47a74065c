from __future__ import annotations

import subprocess
from typing import Sequence


DEFAULT_COMMAND = ("autorandr", "--change", "--force", "--default", "default")


class SpawnError(RuntimeError):
    """Raised when the reconfiguration command could not be started."""


def spawn(argv: Sequence[str] = DEFAULT_COMMAND) -> int:
    """Start ``argv`` in its own session and forget about it.

    The child gets /dev/null for stdio and is never waited on, so its exit
    status and later failures never reach the caller.

    Returns:
        int: Process ID of the spawned command

    Raises:
        SpawnError: If the process could not be created
    """
    try:
        proc = subprocess.Popen(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            close_fds=True,
            start_new_session=True,
        )
    except OSError as e:
        raise SpawnError(f"failed to launch {argv[0]}: {e}")
    return proc.pid
