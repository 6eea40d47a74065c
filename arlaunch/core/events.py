from __future__ import annotations

from dataclasses import dataclass


SCREEN_CHANGE = "screen_change"
OTHER = "other"


@dataclass(frozen=True)
class Notification:
    kind: str
    server_timestamp: int

    @property
    def is_screen_change(self) -> bool:
        return self.kind == SCREEN_CHANGE
