"""Game state representation for Chess Crawl: tiles, pieces, board, snapshot."""

from __future__ import annotations

import dataclasses
import json
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from chesscrawl.game.board import (
    DEFAULT_HEIGHT, DEFAULT_WIDTH, PLAYER_COLOR, PLAYER_TURN,
)
from chesscrawl.game.events import Event

HISTORY_LIMIT = 50


class PieceType(str, Enum):
    KING = "King"
    QUEEN = "Queen"
    ROOK = "Rook"
    BISHOP = "Bishop"
    KNIGHT = "Knight"
    PAWN = "Pawn"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vector(self) -> tuple[int, int]:
        return DIRECTION_VECTORS[self]


DIRECTION_VECTORS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


def direction_from_delta(dx: int, dy: int) -> Optional[Direction]:
    """Compass direction of a displacement; x takes precedence over y."""
    if dx > 0:
        return Direction.RIGHT
    if dx < 0:
        return Direction.LEFT
    if dy > 0:
        return Direction.DOWN
    if dy < 0:
        return Direction.UP
    return None


def default_direction(color: str) -> Direction:
    return Direction.UP if color == PLAYER_COLOR else Direction.DOWN


def new_piece_id(prefix: str, rng: random.Random) -> str:
    """Piece id drawn from rng so seeded runs stay reproducible."""
    return f"{prefix}-{rng.getrandbits(32):08x}"


@dataclass(frozen=True)
class PieceName:
    """Display name as indices into the first/last name tables."""
    first_index: int
    last_index: int


@dataclass
class Piece:
    id: str
    piece_type: PieceType
    color: str
    x: int
    y: int
    name: Union[PieceName, str, None] = None
    discovered_on_level: int = 1
    captures: int = 0
    cosmetic: Optional[str] = None
    direction: Optional[Direction] = None

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def is_player(self) -> bool:
        return self.color == PLAYER_COLOR

    @property
    def facing(self) -> Direction:
        """Pawn facing, falling back to the faction default."""
        return self.direction or default_direction(self.color)

    def copy(self) -> Piece:
        return dataclasses.replace(self)

    def to_dict(self) -> dict:
        if isinstance(self.name, PieceName):
            name = {"first": self.name.first_index, "last": self.name.last_index}
        else:
            name = self.name
        return {
            "type": "piece",
            "id": self.id,
            "piece": self.piece_type.value,
            "color": self.color,
            "x": self.x,
            "y": self.y,
            "name": name,
            "discovered_on_level": self.discovered_on_level,
            "captures": self.captures,
            "cosmetic": self.cosmetic,
            "direction": self.direction.value if self.direction else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Piece:
        name = d.get("name")
        if isinstance(name, dict):
            name = PieceName(name["first"], name["last"])
        direction = d.get("direction")
        return cls(
            id=d["id"],
            piece_type=PieceType(d["piece"]),
            color=d["color"],
            x=d["x"],
            y=d["y"],
            name=name,
            discovered_on_level=d.get("discovered_on_level", 1),
            captures=d.get("captures", 0),
            cosmetic=d.get("cosmetic"),
            direction=Direction(direction) if direction else None,
        )


@dataclass(frozen=True)
class Wall:
    """Opaque tile: nothing moves through or onto it."""


@dataclass(frozen=True)
class Chest:
    """One-shot loot tile, consumed by the first piece to land on it."""


@dataclass(frozen=True)
class SleepingAlly:
    """Latent player piece, woken when a player piece stands next to it."""
    piece_type: PieceType


# Empty cells are None
Tile = Union[Piece, Wall, Chest, SleepingAlly, None]


def tile_to_dict(tile: Tile) -> Optional[dict]:
    if tile is None:
        return None
    if isinstance(tile, Piece):
        return tile.to_dict()
    if isinstance(tile, Wall):
        return {"type": "wall"}
    if isinstance(tile, Chest):
        return {"type": "chest"}
    if isinstance(tile, SleepingAlly):
        return {"type": "sleeping_ally", "piece": tile.piece_type.value}
    raise ValueError(f"Unknown tile: {tile!r}")


def tile_from_dict(d: Optional[dict]) -> Tile:
    if d is None:
        return None
    kind = d["type"]
    if kind == "piece":
        return Piece.from_dict(d)
    if kind == "wall":
        return Wall()
    if kind == "chest":
        return Chest()
    if kind == "sleeping_ally":
        return SleepingAlly(PieceType(d["piece"]))
    raise ValueError(f"Unknown tile type: {kind!r}")


class Board:
    """Rectangular grid of tiles indexed by (x, y), origin top-left."""

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT):
        self.width = width
        self.height = height
        self.cells: list[list[Tile]] = [[None] * width for _ in range(height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Tile:
        """Get the tile at (x, y), or None when empty or off-board."""
        if self.in_bounds(x, y):
            return self.cells[y][x]
        return None

    def set(self, x: int, y: int, tile: Tile):
        """Place a tile; a piece's coordinates follow the cell it is put in."""
        if isinstance(tile, Piece):
            tile.x = x
            tile.y = y
        self.cells[y][x] = tile

    def clear(self, x: int, y: int):
        self.cells[y][x] = None

    def piece_at(self, x: int, y: int) -> Optional[Piece]:
        tile = self.get(x, y)
        return tile if isinstance(tile, Piece) else None

    def pieces(self, color: Optional[str] = None) -> list[Piece]:
        """All pieces in row-major order, optionally filtered by faction."""
        found = []
        for row in self.cells:
            for tile in row:
                if isinstance(tile, Piece) and (color is None or tile.color == color):
                    found.append(tile)
        return found

    def enemy_factions(self) -> list[str]:
        """Distinct non-player factions present, ascending."""
        return sorted({p.color for p in self.pieces() if p.color != PLAYER_COLOR})

    def find_king(self, color: str) -> Optional[Piece]:
        for piece in self.pieces(color):
            if piece.piece_type == PieceType.KING:
                return piece
        return None

    def empty_cells(self) -> list[tuple[int, int]]:
        return [(x, y) for y in range(self.height) for x in range(self.width)
                if self.cells[y][x] is None]

    def clone(self) -> Board:
        """Return a copy; pieces are copied, immutable tiles are shared."""
        new = Board.__new__(Board)
        new.width = self.width
        new.height = self.height
        new.cells = [[tile.copy() if isinstance(tile, Piece) else tile for tile in row]
                     for row in self.cells]
        return new

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and self.cells == other.cells)

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "cells": [[tile_to_dict(tile) for tile in row] for row in self.cells],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Board:
        board = cls(d["width"], d["height"])
        for y, row in enumerate(d["cells"]):
            for x, cell in enumerate(row):
                board.cells[y][x] = tile_from_dict(cell)
        return board

    def to_display_cells(self) -> list[list]:
        """Convert to the format expected by render_board."""
        display = []
        for row in self.cells:
            out = []
            for tile in row:
                if tile is None:
                    out.append(None)
                elif isinstance(tile, Piece):
                    out.append(("piece", tile.piece_type.value, tile.color))
                elif isinstance(tile, Wall):
                    out.append(("wall",))
                elif isinstance(tile, Chest):
                    out.append(("chest",))
                elif isinstance(tile, SleepingAlly):
                    out.append(("ally", tile.piece_type.value))
            display.append(out)
        return display


@dataclass
class Inventory:
    """Pieces carried between levels and cosmetics found (display only)."""
    pieces: list[Piece] = field(default_factory=list)
    cosmetics: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"pieces": [p.to_dict() for p in self.pieces],
                "cosmetics": list(self.cosmetics)}

    @classmethod
    def from_dict(cls, d: dict) -> Inventory:
        return cls([Piece.from_dict(p) for p in d.get("pieces", [])],
                   list(d.get("cosmetics", [])))


class GameState:
    """Complete engine state: board, level, active turn, history, flags."""

    def __init__(self, board: Optional[Board] = None, level: int = 1,
                 history_limit: int = HISTORY_LIMIT):
        self.board: Board = board if board is not None else Board()
        self.level: int = level
        self.current_turn: str = PLAYER_TURN
        self.history: deque[Event] = deque(maxlen=history_limit)
        self.inventory: Inventory = Inventory()
        self.level_complete: bool = False
        self.game_over: bool = False
        self.king_in_check: bool = False

    @property
    def done(self) -> bool:
        return self.level_complete or self.game_over

    def record(self, event: Event):
        self.history.append(event)

    def clone(self) -> GameState:
        """Return a deep copy of this state."""
        new = GameState.__new__(GameState)
        new.board = self.board.clone()
        new.level = self.level
        new.current_turn = self.current_turn
        new.history = deque(self.history, maxlen=self.history.maxlen)
        new.inventory = Inventory([p.copy() for p in self.inventory.pieces],
                                  list(self.inventory.cosmetics))
        new.level_complete = self.level_complete
        new.game_over = self.game_over
        new.king_in_check = self.king_in_check
        return new

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "board": self.board.to_dict(),
            "current_turn": self.current_turn,
            "history": [e.to_dict() for e in self.history],
            "history_limit": self.history.maxlen,
            "inventory": self.inventory.to_dict(),
            "level_complete": self.level_complete,
            "game_over": self.game_over,
            "king_in_check": self.king_in_check,
        }

    @classmethod
    def from_dict(cls, d: dict) -> GameState:
        state = cls(Board.from_dict(d["board"]), d["level"],
                    history_limit=d.get("history_limit", HISTORY_LIMIT))
        state.current_turn = d.get("current_turn", PLAYER_TURN)
        state.history.extend(Event.from_dict(e) for e in d.get("history", []))
        state.inventory = Inventory.from_dict(d.get("inventory", {}))
        state.level_complete = d.get("level_complete", False)
        state.game_over = d.get("game_over", False)
        state.king_in_check = d.get("king_in_check", False)
        return state

    def serialize(self) -> str:
        """Serialize game state to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def deserialize(cls, data: str) -> GameState:
        """Deserialize game state from JSON string."""
        return cls.from_dict(json.loads(data))
