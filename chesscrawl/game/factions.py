"""Enemy faction selection per level."""

from __future__ import annotations

import random
from typing import Optional

from chesscrawl.game.board import ENEMY_FACTION_COLORS


def factions_for_level(level: int, count: Optional[int] = None,
                       rng: Optional[random.Random] = None) -> list[str]:
    """Enemy faction colors present on a level.

    An explicit count wins. Otherwise level 1 has one faction and each block
    of four levels adds another, with a 40% chance of one extra.
    """
    if count:
        return ENEMY_FACTION_COLORS[:min(count, len(ENEMY_FACTION_COLORS))]

    if level == 1:
        return ENEMY_FACTION_COLORS[:1]

    rng = rng or random.Random()
    base = 1 + (level - 1) // 4
    extra = 1 if rng.random() > 0.6 else 0
    return ENEMY_FACTION_COLORS[:min(len(ENEMY_FACTION_COLORS), base + extra)]
