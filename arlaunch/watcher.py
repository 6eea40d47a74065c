"""
Watcher Layer - X display monitoring and background process control.

Connects to the X server, subscribes to RandR screen change notifications
and feeds them to the debounce loop, which launches autorandr. Also manages
the detached background instance and its pid file.
"""

from __future__ import annotations

import logging
import os
import select
import signal
import subprocess
import sys
import threading
from typing import Callable, Iterator, Optional

from Xlib import error as xerror
from Xlib.display import Display
from Xlib.ext import randr

from .core import debounce
from .core.config import LauncherConfig
from .core.events import OTHER, SCREEN_CHANGE, Notification
from .core.launcher import SpawnError, spawn


log = logging.getLogger(__name__)


class DisplayConnectionError(ConnectionError):
    """Raised when the X display cannot be opened or the connection is lost."""
    pass


class XRandrEventSource:
    """Blocking source of RandR screen change notifications.

    The source waits on the display socket in slices of ``poll_interval``
    seconds so that setting ``stop`` ends the event sequence promptly.
    """

    def __init__(
        self,
        display_name: Optional[str] = None,
        stop: Optional[threading.Event] = None,
        poll_interval: float = 0.5,
        display_factory: Callable[[Optional[str]], Display] = Display,
    ):
        self.display_name = display_name
        self.stop = stop if stop is not None else threading.Event()
        self.poll_interval = poll_interval
        self.connection_lost = False
        self._display_factory = display_factory
        self._display: Optional[Display] = None
        self._screen_change_code: Optional[int] = None

    def __enter__(self) -> "XRandrEventSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def connect(self) -> Display:
        """Open the display connection.

        Returns:
            Display: The python-xlib display object

        Raises:
            DisplayConnectionError: If the display cannot be opened or has no RandR
        """
        try:
            display = self._display_factory(self.display_name)
        except (xerror.DisplayError, OSError) as e:
            raise DisplayConnectionError(f"Connection error: {e}")

        if not display.has_extension("RANDR"):
            display.close()
            raise DisplayConnectionError("X server does not support the RandR extension")

        self._display = display
        self._screen_change_code = display.extension_event.ScreenChangeNotify
        log.info("Connected to server")
        return display

    def subscribe(self, mask: int = randr.RRScreenChangeNotifyMask) -> None:
        """Select RandR input on the root window of the default screen."""
        if self._display is None:
            raise DisplayConnectionError("not connected")
        root = self._display.screen().root
        root.xrandr_select_input(mask)
        self._display.flush()

    def next_event(self) -> Optional[Notification]:
        """Wait for the next notification.

        Returns:
            Optional[Notification]: The next notification, or None once the
            connection is closed or a stop has been requested
        """
        if self._display is None:
            return None

        log.debug("Waiting for event...")
        while not self.stop.is_set():
            try:
                if not self._display.pending_events():
                    readable, _, _ = select.select([self._display], [], [], self.poll_interval)
                    if not readable or not self._display.pending_events():
                        continue
                evt = self._display.next_event()
            except xerror.ConnectionClosedError as e:
                log.debug("Display connection closed: %s", e)
                self.connection_lost = True
                return None
            return self._to_notification(evt)

        return None

    def events(self) -> Iterator[Notification]:
        while True:
            notification = self.next_event()
            if notification is None:
                return
            yield notification

    def close(self) -> None:
        """Flush and disconnect. Safe to call more than once."""
        display, self._display = self._display, None
        if display is None:
            return
        try:
            display.close()
        except xerror.ConnectionClosedError:
            pass

    def _to_notification(self, evt) -> Notification:
        if getattr(evt, "type", None) == self._screen_change_code:
            return Notification(kind=SCREEN_CHANGE, server_timestamp=evt.timestamp)
        return Notification(kind=OTHER, server_timestamp=getattr(evt, "timestamp", 0) or 0)


def install_signal_handlers(stop: threading.Event) -> None:
    """Turn termination signals into a stop request for the watcher loop."""

    def _request_stop(signum, frame) -> None:
        log.info("Received signal %s, stopping", signum)
        stop.set()

    for signum in (signal.SIGTERM, signal.SIGINT, signal.SIGQUIT):
        signal.signal(signum, _request_stop)
    signal.signal(signal.SIGHUP, signal.SIG_IGN)


def start_watching(
    config: LauncherConfig,
    stop: Optional[threading.Event] = None,
    launch: Optional[Callable[[], object]] = None,
    source: Optional[XRandrEventSource] = None,
) -> debounce.DebounceState:
    """Watch the display and launch autorandr on screen changes.

    Args:
        config: Launcher configuration
        stop: Event that ends the watch when set
        launch: Callable run for each accepted change, defaults to spawning autorandr
        source: Event source to read from, defaults to the configured X display

    Returns:
        DebounceState: Final debounce state after a requested stop

    Raises:
        DisplayConnectionError: If the display cannot be opened or the connection closes
    """
    if source is None:
        source = XRandrEventSource(config.display, stop=stop, poll_interval=config.poll_interval)
    if launch is None:
        launch = spawn

    with source:
        source.connect()
        source.subscribe()
        state = debounce.run(source.events(), config.debounce_window, launch)

    if source.connection_lost:
        raise DisplayConnectionError("Connection closed!")
    return state


def read_pidfile(path: str) -> Optional[int]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return int(f.read().strip()) or None
    except (OSError, ValueError):
        return None


def write_pidfile(path: str, pid: int) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(str(pid))


def remove_pidfile(path: str, pid: Optional[int] = None) -> None:
    """Remove the pid file, only if it still names ``pid`` when one is given."""
    if pid is not None and read_pidfile(path) != pid:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def is_watcher_running(pid: int) -> bool:
    """Check if watcher process is still running.

    Args:
        pid: Process ID to check

    Returns:
        bool: True if process is running
    """
    try:
        os.kill(pid, 0)  # Signal 0 just checks if process exists
        return True
    except ProcessLookupError:
        return False
    except PermissionError:
        return True


def start_background_watcher(config: LauncherConfig) -> int:
    """Start the watcher as a detached background subprocess.

    Args:
        config: Launcher configuration passed on to the child

    Returns:
        int: Process ID of the background watcher

    Raises:
        SpawnError: If the child process could not be started
    """
    cmd = [
        sys.executable,
        "-m",
        "arlaunch",
        "--daemon-child",
        "--debounce",
        str(config.debounce_window),
        "--pidfile",
        config.pidfile,
    ]
    if config.display:
        cmd += ["--display", config.display]
    if config.verbose:
        cmd.append("--verbose")

    try:
        os.makedirs(os.path.dirname(config.pidfile), exist_ok=True)
    except OSError as e:
        raise SpawnError(f"cannot create pid file directory: {e}")

    try:
        proc = subprocess.Popen(
            cmd,
            cwd="/",
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,  # Detach from parent process
        )
    except OSError as e:
        raise SpawnError(f"failed to start background watcher: {e}")

    try:
        write_pidfile(config.pidfile, proc.pid)
    except OSError as e:
        # An unrecorded child could not be stopped later
        stop_background_watcher(proc.pid)
        raise SpawnError(f"cannot write pid file {config.pidfile}: {e}")
    return proc.pid


def stop_background_watcher(pid: int) -> bool:
    """Stop background watcher process.

    Args:
        pid: Process ID of the watcher to stop

    Returns:
        bool: True if successfully stopped
    """
    try:
        os.kill(pid, signal.SIGTERM)
        return True
    except OSError:
        return False
