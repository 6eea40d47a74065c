from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from .events import Notification
from .launcher import SpawnError


log = logging.getLogger(__name__)


@dataclass
class DebounceState:
    """What the loop remembers about the last accepted screen change."""

    last_timestamp: int | None = None
    last_accept_wall_time: float = field(default_factory=time.time)

    def accepts(self, ts: int, now: float, window: float) -> bool:
        # The first event can happen as early as possible.
        if self.last_timestamp is None:
            return True
        return ts != self.last_timestamp and now > self.last_accept_wall_time + window

    def record(self, ts: int, now: float) -> None:
        self.last_timestamp = ts
        self.last_accept_wall_time = now


def run(
    events: Iterable[Notification],
    debounce_window: float,
    launch: Callable[[], object],
    clock: Callable[[], float] = time.time,
    state: DebounceState | None = None,
) -> DebounceState:
    """Launch once per distinct screen change until ``events`` is exhausted."""
    if state is None:
        state = DebounceState(last_accept_wall_time=clock())

    for evt in events:
        if not evt.is_screen_change:
            continue

        now = clock()
        ts = evt.server_timestamp
        log.debug("Screen change event (timestamp %s)", ts)
        if not state.accepts(ts, now, debounce_window):
            log.debug("Ignoring repeated screen change (timestamp %s)", ts)
            continue

        log.info("Launch autorandr!")
        try:
            launch()
        except SpawnError as exc:
            log.error("%s", exc)
        state.record(ts, now)

    return state
