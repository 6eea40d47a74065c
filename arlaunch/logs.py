"""
Logging setup for the launcher.

Foreground runs log to stderr. The daemon logs to syslog when verbose and
stays silent otherwise.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys


SYSLOG_IDENT = "autorandr-service"
SYSLOG_SOCKET = "/dev/log"


def _syslog_handler() -> logging.Handler:
    address = SYSLOG_SOCKET if os.path.exists(SYSLOG_SOCKET) else ("localhost", logging.handlers.SYSLOG_UDP_PORT)
    handler = logging.handlers.SysLogHandler(
        address=address, facility=logging.handlers.SysLogHandler.LOG_USER
    )
    handler.ident = f"{SYSLOG_IDENT}[{os.getpid()}]: "
    return handler


def setup_logging(verbose: bool = False, daemon: bool = False) -> logging.Handler:
    """Attach a single handler to the package logger and return it."""
    logger = logging.getLogger("arlaunch")
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.propagate = False

    if daemon and not verbose:
        handler: logging.Handler = logging.NullHandler()
    elif daemon:
        handler = _syslog_handler()
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))

    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(handler)
    return handler
