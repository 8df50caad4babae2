"""Level generation: fixed anchors for kings and starters, shuffled scatter for the rest."""

from __future__ import annotations

import logging
import random
from typing import Optional

from chesscrawl.game.board import DEFAULT_HEIGHT, DEFAULT_WIDTH, MAX_DIMENSION, PLAYER_COLOR
from chesscrawl.game.factions import factions_for_level
from chesscrawl.game.names import generate_random_name
from chesscrawl.game.state import (
    Board, Chest, Direction, Piece, PieceType, SleepingAlly, Wall, new_piece_id,
)
from chesscrawl.game.models import LevelOverrides

logger = logging.getLogger("chesscrawl.generator")

# (kind, weight, first level it can appear on)
ALLY_POOL = [
    (PieceType.PAWN, 8, 1),
    (PieceType.KNIGHT, 4, 1),
    (PieceType.BISHOP, 3, 2),
    (PieceType.ROOK, 2, 4),
    (PieceType.QUEEN, 1, 6),
]

MAX_CARRIED_PIECES = 5


def random_ally_piece(level: int, rng: random.Random) -> PieceType:
    """Weighted draw from the ally kinds unlocked at this level."""
    available = [(kind, weight) for kind, weight, min_level in ALLY_POOL if level >= min_level]
    if not available:
        return PieceType.PAWN

    roll = rng.random() * sum(weight for _, weight in available)
    for kind, weight in available:
        if roll < weight:
            return kind
        roll -= weight
    return available[-1][0]


def board_dimensions(level: int, rng: random.Random, scale_with_level: bool = False,
                     width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> tuple[int, int]:
    """Board size for a level: fixed, or growing with the level plus jitter."""
    if not scale_with_level:
        return width, height
    w_jitter = rng.randint(-1, 1) if level > 2 else 0
    h_jitter = rng.randint(-1, 1) if level > 3 else 0
    return (min(MAX_DIMENSION, 7 + level // 2 + w_jitter),
            min(MAX_DIMENSION, 7 + level // 3 + h_jitter))


def _place_if_free(board: Board, x: int, y: int, piece: Piece) -> bool:
    if board.in_bounds(x, y) and board.get(x, y) is None:
        board.set(x, y, piece)
        return True
    return False


def _enemy(kind: PieceType, color: str, rng: random.Random, level: int) -> Piece:
    return Piece(
        id=new_piece_id(f"{color}-{kind.value.lower()}", rng),
        piece_type=kind,
        color=color,
        x=0,
        y=0,
        discovered_on_level=level,
        direction=Direction.DOWN if kind == PieceType.PAWN else None,
    )


def _player_starter(kind: PieceType, rng: random.Random) -> Piece:
    return Piece(
        id=new_piece_id(f"white-{kind.value.lower()}", rng),
        piece_type=kind,
        color=PLAYER_COLOR,
        x=0,
        y=0,
        name=generate_random_name(rng),
        discovered_on_level=1,
        direction=Direction.UP if kind == PieceType.PAWN else None,
    )


def _place_player_side(board: Board, level: int, carry_over: list[Piece],
                       rng: random.Random):
    kx, ky = board.width // 2, board.height - 1

    king = next((p for p in carry_over if p.piece_type == PieceType.KING), None)
    board.set(kx, ky, king.copy() if king else _player_starter(PieceType.KING, rng))

    slots = [(kx - 1, ky), (kx + 1, ky), (kx, ky - 1), (kx - 1, ky - 1), (kx + 1, ky - 1)]
    others = [p for p in carry_over if p.piece_type != PieceType.KING]
    placed = 0
    for piece, (x, y) in zip(others, slots):
        if _place_if_free(board, x, y, piece.copy()):
            placed += 1
    if len(others) > MAX_CARRIED_PIECES:
        logger.warning(f"Dropped {len(others) - MAX_CARRIED_PIECES} carried pieces: "
                       f"only {MAX_CARRIED_PIECES} start slots")

    if placed == 0 and level == 1:
        _place_if_free(board, kx - 1, ky - 1, _player_starter(PieceType.PAWN, rng))
        _place_if_free(board, kx, ky - 1, _player_starter(PieceType.PAWN, rng))


def _place_main_faction(board: Board, level: int, color: str, rng: random.Random):
    ex = board.width // 2
    _place_if_free(board, ex, 0, _enemy(PieceType.KING, color, rng, level))
    _place_if_free(board, ex - 1, 1, _enemy(PieceType.PAWN, color, rng, level))
    if level > 1:
        _place_if_free(board, ex + 1, 1, _enemy(PieceType.PAWN, color, rng, level))
    if level > 2:
        _place_if_free(board, ex - 1, 0, _enemy(PieceType.KNIGHT, color, rng, level))
    if level > 3:
        _place_if_free(board, ex + 1, 0, _enemy(PieceType.KNIGHT, color, rng, level))


def _place_extra_faction(board: Board, level: int, color: str, rng: random.Random):
    """King plus one Pawn on random free cells in the top half."""
    cells = [(x, y) for x, y in board.empty_cells() if y < board.height // 2]
    rng.shuffle(cells)
    for kind in (PieceType.KING, PieceType.PAWN):
        if not cells:
            logger.warning(f"No room for {color} {kind.value}")
            return
        x, y = cells.pop()
        board.set(x, y, _enemy(kind, color, rng, level))


def generate_level(level: int, carry_over: Optional[list[Piece]] = None,
                   overrides: Optional[LevelOverrides] = None,
                   rng: Optional[random.Random] = None,
                   scale_with_level: bool = False,
                   default_width: int = DEFAULT_WIDTH,
                   default_height: int = DEFAULT_HEIGHT) -> tuple[Board, list[str]]:
    """Build a fresh board for a level.

    Args:
        level: Level number, starting at 1.
        carry_over: Player pieces kept from the previous level.
        overrides: Optional fixed width, height and faction count.
        rng: Random source; pass a seeded one for reproducible boards.
        scale_with_level: Grow the board with the level when no override is given.

    Returns:
        (board, enemy factions present on it)
    """
    rng = rng or random.Random()
    carry_over = carry_over or []
    overrides = overrides or LevelOverrides()

    width, height = board_dimensions(level, rng, scale_with_level,
                                     default_width, default_height)
    board = Board(overrides.width or width, overrides.height or height)

    _place_player_side(board, level, carry_over, rng)

    factions = factions_for_level(level, overrides.faction_count, rng)
    _place_main_faction(board, level, factions[0], rng)
    for color in factions[1:]:
        _place_extra_faction(board, level, color, rng)

    empty = board.empty_cells()
    rng.shuffle(empty)

    num_walls = min(len(empty), max(0, board.width * board.height // 16 + rng.randint(-1, 1)))
    num_chests = min(len(empty) - num_walls, max(0, 1 + level // 3 + rng.randint(0, 1)))
    num_allies = min(len(empty) - num_walls - num_chests, max(0, 1 + level // 2))

    for _ in range(num_walls):
        board.set(*empty.pop(), Wall())
    for _ in range(num_chests):
        board.set(*empty.pop(), Chest())
    for _ in range(num_allies):
        board.set(*empty.pop(), SleepingAlly(random_ally_piece(level, rng)))

    present = board.enemy_factions()
    logger.info(f"Generated level {level}: {board.width}x{board.height}, "
                f"{num_walls} walls, {num_chests} chests, {num_allies} allies, "
                f"factions={present}")
    return board, present
