"""Random display names for player pieces.

Names are stored on pieces as index pairs so a localizer can supply its own
tables. The English tables here are the defaults used by the text CLI.
"""

from __future__ import annotations

import random
from typing import Optional, Union

from chesscrawl.game.state import PieceName

FIRST_NAMES = [
    "Alex", "Bobbie", "Casey", "Drew", "Eddie", "Frankie", "Gray", "Harley",
    "Jamie", "Jordan", "Kai", "Leslie", "Morgan", "Pat", "Quinn", "Riley",
    "Rowan", "Sam", "Taylor", "Vic", "Ash", "Blair", "Cameron", "Dakota",
    "Emerson", "Finley", "Hayden", "Indigo", "Jesse", "Kendall", "Logan",
    "Marlowe", "Noel", "Parker", "Reagan", "Sawyer", "Skyler", "Tatum", "Winter",
]

LAST_NAMES = [
    "the Valiant", "the Bold", "the Swift", "the Clever", "the Mighty",
    "the Steadfast", "the Wise", "the Just", "the Fearless", "the Gentle",
    "the Bright", "the Grim", "the Silent", "of the Hills", "of the River",
    "of the Forest", "of the Mountain", "of the Sky", "of the Stars", "of the Depths",
    "Ironheart", "Shadowend", "Stormcaller", "Sunstrider", "Moonwhisper",
    "Stonehand", "Lightbringer", "Voidgazer", "Firebrand", "Winterborn",
]


def generate_random_name(rng: Optional[random.Random] = None) -> PieceName:
    rng = rng or random.Random()
    return PieceName(rng.randrange(len(FIRST_NAMES)), rng.randrange(len(LAST_NAMES)))


def display_name(name: Union[PieceName, str, None]) -> Optional[str]:
    """English rendering of a stored name; legacy plain strings pass through."""
    if name is None or isinstance(name, str):
        return name
    return f"{FIRST_NAMES[name.first_index]} {LAST_NAMES[name.last_index]}"
