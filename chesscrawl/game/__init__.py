"""Chess Crawl game engine: state, rules, interactions, turns, level generation."""

from chesscrawl.game.state import (
    Board, Chest, Direction, GameState, Piece, PieceName, PieceType, SleepingAlly, Wall,
)
from chesscrawl.game.rules import AvailableMove, available_moves, is_in_check, is_square_attacked, legal_moves
from chesscrawl.game.interactions import MoveOutcome, apply_move
from chesscrawl.game.turns import LevelStatus, level_status, next_turn, turn_order
from chesscrawl.game.generator import generate_level
from chesscrawl.game.events import Event, EventKind

__all__ = [
    "Board", "Chest", "Direction", "GameState", "Piece", "PieceName", "PieceType",
    "SleepingAlly", "Wall",
    "AvailableMove", "available_moves", "is_in_check", "is_square_attacked", "legal_moves",
    "MoveOutcome", "apply_move",
    "LevelStatus", "level_status", "next_turn", "turn_order",
    "generate_level",
    "Event", "EventKind",
]
