"""Structured event records for the presentation layer.

The engine never formats user-facing text. Every notable effect is recorded
as an ``Event(kind, params)`` and a renderer/localizer turns it into prose.
Params hold only plain JSON values (strings, ints, lists, None).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class EventKind(str, Enum):
    LEVEL_START = "level_start"
    PIECE_CARRIED_OVER = "piece_carried_over"
    MOVE = "move"
    CAPTURE = "capture"
    PROMOTION = "promotion"
    COSMETIC_FOUND = "cosmetic_found"
    ALLY_JOINED = "ally_joined"
    NO_MOVES = "no_moves"
    CHECK = "check"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


@dataclass
class Event:
    kind: EventKind
    params: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "params": dict(self.params)}

    @classmethod
    def from_dict(cls, d: dict) -> Event:
        return cls(EventKind(d["kind"]), dict(d.get("params", {})))
