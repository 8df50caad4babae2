"""Engine configuration loaded from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

from chesscrawl.game.board import DEFAULT_HEIGHT, DEFAULT_WIDTH, MAX_DIMENSION, MIN_DIMENSION
from chesscrawl.game.state import HISTORY_LIMIT

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "default.yaml"


class BoardConfig(BaseModel):
    width: int = Field(DEFAULT_WIDTH, ge=MIN_DIMENSION, le=MAX_DIMENSION)
    height: int = Field(DEFAULT_HEIGHT, ge=MIN_DIMENSION, le=MAX_DIMENSION)
    scale_with_level: bool = Field(False, description="Grow the board as levels rise")


class AIConfig(BaseModel):
    strategy: Literal["heuristic", "capture_first"] = "heuristic"
    player_capture_multiplier: float = Field(1.5, ge=0)
    king_approach_bonus: float = 5.0
    piece_approach_bonus: float = 2.0
    king_caution_penalty: float = 5.0
    jitter: float = Field(2.0, ge=0, description="Width of the tie-break random term")

    def player_kwargs(self) -> dict:
        """Keyword arguments for the selected AI player."""
        if self.strategy != "heuristic":
            return {}
        return self.model_dump(exclude={"strategy"})


class SessionConfig(BaseModel):
    history_limit: int = Field(HISTORY_LIMIT, ge=1)
    seed: Optional[int] = Field(None, description="Seed for every random decision")


class EngineConfig(BaseModel):
    board: BoardConfig = Field(default_factory=BoardConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)


def load_config(path: Optional[str | Path] = None) -> EngineConfig:
    """Load and validate an engine config.

    Missing keys fall back to defaults; no path and no bundled
    configs/default.yaml gives the built-in defaults.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return EngineConfig()
        path = DEFAULT_CONFIG_PATH
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return EngineConfig.model_validate(data)
