"""Pydantic models for engine request schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from chesscrawl.game.board import ENEMY_FACTION_COLORS, MAX_DIMENSION, MIN_DIMENSION


class LevelOverrides(BaseModel):
    """Optional fixed dimensions and faction count for level generation."""
    width: Optional[int] = Field(None, ge=MIN_DIMENSION, le=MAX_DIMENSION,
                                 description="Board width in cells")
    height: Optional[int] = Field(None, ge=MIN_DIMENSION, le=MAX_DIMENSION,
                                  description="Board height in cells")
    faction_count: Optional[int] = Field(None, ge=1, le=len(ENEMY_FACTION_COLORS),
                                         description="Number of enemy factions")


class MoveRequest(BaseModel):
    """Move the piece at (from_x, from_y) to (to_x, to_y)."""
    from_x: int
    from_y: int
    to_x: int
    to_y: int

    @property
    def from_pos(self) -> tuple[int, int]:
        return (self.from_x, self.from_y)

    @property
    def to_pos(self) -> tuple[int, int]:
        return (self.to_x, self.to_y)
