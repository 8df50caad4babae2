"""Turn scheduling and level status.

The turn order is never stored. It is recomputed from the board each time:
the player first, then every enemy faction still on the board in ascending
color order, so a faction drops out as soon as its last piece is captured.
"""

from __future__ import annotations

from enum import Enum

from chesscrawl.game.board import PLAYER_COLOR, PLAYER_TURN
from chesscrawl.game.state import Board, PieceType


class LevelStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


def turn_order(board: Board) -> list[str]:
    return [PLAYER_TURN, *board.enemy_factions()]


def next_turn(board: Board, current: str) -> str:
    """The turn after current in the freshly computed order.

    A turn missing from the order (its faction was just wiped out) counts as
    index -1, which hands the turn back to the player.
    """
    order = turn_order(board)
    index = order.index(current) if current in order else -1
    return order[(index + 1) % len(order)]


def turn_color(turn: str) -> str:
    """Faction color acting on a turn."""
    return PLAYER_COLOR if turn == PLAYER_TURN else turn


def piece_counts(board: Board) -> dict[str, int]:
    counts: dict[str, int] = {}
    for piece in board.pieces():
        counts[piece.color] = counts.get(piece.color, 0) + 1
    return counts


def level_status(board: Board) -> LevelStatus:
    """Level won when only player pieces remain; game over without a player King."""
    player_pieces = board.pieces(PLAYER_COLOR)
    if player_pieces and not board.enemy_factions():
        return LevelStatus.LEVEL_COMPLETE
    if not any(p.piece_type == PieceType.KING for p in player_pieces):
        return LevelStatus.GAME_OVER
    return LevelStatus.IN_PROGRESS
