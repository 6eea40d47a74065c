from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from typing import Sequence

from arlaunch import __version__
from arlaunch import watcher
from arlaunch.core.config import ConfigError, LauncherConfig, load_config
from arlaunch.core.launcher import SpawnError
from arlaunch.logs import setup_logging


log = logging.getLogger(__name__)

DESCRIPTION = (
    "Listens to X server screen change events and launches autorandr after an event occurs."
)


def _die(msg: str) -> None:
    print(msg)
    sys.exit(1)


def _print_kv(title: str, value: str) -> None:
    print(f"{title}: {value}")


def cmd_watch(config: LauncherConfig, child: bool = False) -> None:
    setup_logging(config.verbose, daemon=child)
    stop = threading.Event()
    watcher.install_signal_handlers(stop)
    if child:
        log.info("Running as daemon")

    try:
        watcher.start_watching(config, stop=stop)
    except watcher.DisplayConnectionError as exc:
        log.error("%s", exc)
        sys.exit(1)
    finally:
        if child:
            watcher.remove_pidfile(config.pidfile, os.getpid())


def cmd_daemonize(config: LauncherConfig) -> None:
    pid = watcher.read_pidfile(config.pidfile)
    if pid is not None:
        if watcher.is_watcher_running(pid):
            _die(f"autorandr-launcher already running (pid {pid}), use --stop first")
        watcher.remove_pidfile(config.pidfile)

    try:
        child = watcher.start_background_watcher(config)
    except SpawnError as exc:
        _die(str(exc))
        return

    _print_kv("started", f"pid {child}")
    _print_kv("pidfile", config.pidfile)


def cmd_stop(config: LauncherConfig) -> None:
    pid = watcher.read_pidfile(config.pidfile)
    if pid is None or not watcher.is_watcher_running(pid):
        watcher.remove_pidfile(config.pidfile)
        _die("autorandr-launcher not running")
        return

    stopped = watcher.stop_background_watcher(pid)
    watcher.remove_pidfile(config.pidfile)
    if not stopped:
        _die(f"failed to stop pid {pid}")
    _print_kv("stopped", f"pid {pid}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autorandr-launcher", description=DESCRIPTION)
    parser.add_argument(
        "--version", action="version", version=f"autorandr-launcher {__version__}"
    )
    parser.add_argument("-d", "--daemonize", action="store_true", help="Daemonize program")
    parser.add_argument("--verbose", action="store_true", help="Output debugging information")
    parser.add_argument(
        "--debounce",
        metavar="SECONDS",
        help="Delay before accepting a new screen change event (default: 3)",
    )
    parser.add_argument("--display", help="X display to connect to (default: $DISPLAY)")
    parser.add_argument("--pidfile", help="Pid file used by --daemonize and --stop")
    parser.add_argument("--stop", action="store_true", help="Stop the running daemon")
    parser.add_argument("--daemon-child", action="store_true", help=argparse.SUPPRESS)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args)
    except ConfigError as exc:
        parser.error(str(exc))
        return

    if args.stop:
        cmd_stop(config)
    elif args.daemon_child:
        cmd_watch(config, child=True)
    elif args.daemonize:
        cmd_daemonize(config)
    else:
        cmd_watch(config)


if __name__ == "__main__":
    main()
