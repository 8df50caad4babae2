"""Legal move generation and threat detection.

Movement rules follow chess with three changes:
  - Walls and sleeping allies block everything; nobody captures them.
  - Chests can be landed on by any piece and stop sliding pieces.
  - Pawns face a direction and may "bump": if an orthogonal neighbour is
    blocked (edge or occupant), the pawn may step to the empty cell on the
    opposite side. Non-forward bumps turn the pawn to face its new heading.

Attack semantics are move semantics: a square is attacked by a faction if
one of its pieces could move there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from chesscrawl.game.board import ALL_DIRS, DIAGONAL, KNIGHT_OFFSETS, ORTHOGONAL
from chesscrawl.game.state import (
    Board, Chest, Piece, PieceType, SleepingAlly, Wall,
)

Position = tuple[int, int]


@dataclass(frozen=True)
class AvailableMove:
    """A destination offered to the player, flagged if the King would be attacked."""
    x: int
    y: int
    is_threatened: bool = False

    @property
    def position(self) -> Position:
        return (self.x, self.y)


def _gen_sliding_moves(board: Board, piece: Piece, directions: list[Position]) -> list[Position]:
    """Ray-cast along each direction until the edge or the first occupant."""
    moves = []
    for dx, dy in directions:
        x, y = piece.x + dx, piece.y + dy
        while board.in_bounds(x, y):
            target = board.get(x, y)
            if target is None:
                moves.append((x, y))
            elif isinstance(target, (Wall, SleepingAlly)):
                break
            elif isinstance(target, Piece):
                if target.color != piece.color:
                    moves.append((x, y))
                break
            elif isinstance(target, Chest):
                moves.append((x, y))
                break
            x += dx
            y += dy
    return moves


def _gen_step_moves(board: Board, piece: Piece, offsets: list[Position]) -> list[Position]:
    """Single-step moves to each offset (King neighbours, Knight jumps)."""
    moves = []
    for dx, dy in offsets:
        x, y = piece.x + dx, piece.y + dy
        if not board.in_bounds(x, y):
            continue
        target = board.get(x, y)
        if target is None or isinstance(target, Chest):
            moves.append((x, y))
        elif isinstance(target, Piece):
            if target.color != piece.color:
                moves.append((x, y))
        # Wall and SleepingAlly: never a destination
    return moves


def _forward_diagonals(dx: int, dy: int) -> list[Position]:
    if dx == 0:
        return [(-1, dy), (1, dy)]
    return [(dx, -1), (dx, 1)]


def _gen_pawn_moves(board: Board, piece: Piece) -> list[Position]:
    """Pawn: forward step, diagonal capture/loot, and bump moves."""
    moves: list[Position] = []
    x, y = piece.x, piece.y
    fdx, fdy = piece.facing.vector

    # Forward step onto an empty cell only
    fx, fy = x + fdx, y + fdy
    if board.in_bounds(fx, fy) and board.get(fx, fy) is None:
        moves.append((fx, fy))

    # Forward diagonals: enemy piece or chest
    for ddx, ddy in _forward_diagonals(fdx, fdy):
        cx, cy = x + ddx, y + ddy
        if not board.in_bounds(cx, cy):
            continue
        target = board.get(cx, cy)
        if isinstance(target, Piece) and target.color != piece.color:
            moves.append((cx, cy))
        elif isinstance(target, Chest):
            moves.append((cx, cy))

    # Bump: a blocked side pushes the pawn to the empty opposite side
    for dx, dy in ORTHOGONAL:
        ox, oy = x + dx, y + dy
        blocked = not board.in_bounds(ox, oy) or board.get(ox, oy) is not None
        if not blocked:
            continue
        mx, my = x - dx, y - dy
        if board.in_bounds(mx, my) and board.get(mx, my) is None and (mx, my) not in moves:
            moves.append((mx, my))

    return moves


def _gen_knight_moves(board: Board, piece: Piece) -> list[Position]:
    return _gen_step_moves(board, piece, KNIGHT_OFFSETS)


def _gen_king_moves(board: Board, piece: Piece) -> list[Position]:
    return _gen_step_moves(board, piece, ALL_DIRS)


def _gen_bishop_moves(board: Board, piece: Piece) -> list[Position]:
    return _gen_sliding_moves(board, piece, DIAGONAL)


def _gen_rook_moves(board: Board, piece: Piece) -> list[Position]:
    return _gen_sliding_moves(board, piece, ORTHOGONAL)


def _gen_queen_moves(board: Board, piece: Piece) -> list[Position]:
    return _gen_sliding_moves(board, piece, DIAGONAL + ORTHOGONAL)


MOVE_GENERATORS: dict[PieceType, Callable[[Board, Piece], list[Position]]] = {
    PieceType.KING: _gen_king_moves,
    PieceType.QUEEN: _gen_queen_moves,
    PieceType.ROOK: _gen_rook_moves,
    PieceType.BISHOP: _gen_bishop_moves,
    PieceType.KNIGHT: _gen_knight_moves,
    PieceType.PAWN: _gen_pawn_moves,
}


def legal_moves(board: Board, position: Position) -> list[Position]:
    """Legal destinations for the piece at position.

    Returns an empty list when the cell is off-board or holds no piece.
    """
    piece = board.piece_at(*position)
    if piece is None:
        return []
    return MOVE_GENERATORS[piece.piece_type](board, piece)


def is_legal_move(board: Board, from_pos: Position, to_pos: Position) -> bool:
    return tuple(to_pos) in legal_moves(board, from_pos)


def is_square_attacked(board: Board, square: Position, factions: Iterable[str]) -> bool:
    """Check if any piece of the given factions could move onto square."""
    factions = set(factions)
    square = tuple(square)
    for piece in board.pieces():
        if piece.color in factions and square in legal_moves(board, piece.position):
            return True
    return False


def hostile_factions(board: Board, color: str) -> list[str]:
    """Every faction on the board other than color."""
    return sorted({p.color for p in board.pieces() if p.color != color})


def is_in_check(board: Board, color: str) -> bool:
    """Check if the given faction's King is attacked by any other faction."""
    king = board.find_king(color)
    if king is None:
        return False  # King already captured
    return is_square_attacked(board, king.position, hostile_factions(board, color))


def available_moves(board: Board, position: Position,
                    hostile: Optional[Iterable[str]] = None) -> list[AvailableMove]:
    """Legal destinations annotated with threat flags.

    For a King each destination is tested with the King moved there; the
    flagged moves stay selectable. Other pieces are never flagged.
    """
    piece = board.piece_at(*position)
    if piece is None:
        return []
    moves = legal_moves(board, position)
    if piece.piece_type != PieceType.KING:
        return [AvailableMove(x, y) for x, y in moves]

    if hostile is None:
        hostile = hostile_factions(board, piece.color)
    hostile = list(hostile)
    result = []
    for x, y in moves:
        test_board = board.clone()
        king = test_board.piece_at(*position)
        test_board.clear(*position)
        test_board.set(x, y, king)
        result.append(AvailableMove(x, y, is_square_attacked(test_board, (x, y), hostile)))
    return result
