"""Move application and post-move effects.

apply_move performs the paired board write (clear source, occupy
destination) and then resolves, in order:
  1. capture bookkeeping,
  2. chest loot (pawn promotion or a cosmetic),
  3. pawn reorientation after a bump move,
  4. chained rescue of sleeping allies next to a player piece.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from chesscrawl.game.board import ALL_DIRS, COSMETICS, PLAYER_COLOR
from chesscrawl.game.events import Event, EventKind
from chesscrawl.game.names import generate_random_name
from chesscrawl.game.state import (
    Board, Chest, Piece, PieceName, PieceType, SleepingAlly,
    direction_from_delta, new_piece_id,
)

logger = logging.getLogger("chesscrawl.interactions")

Position = tuple[int, int]

# Base promotion weights; owning more of a kind makes it rarer
PROMOTION_WEIGHTS = {
    PieceType.KNIGHT: 4,
    PieceType.BISHOP: 4,
    PieceType.ROOK: 2,
    PieceType.QUEEN: 1,
}
MIN_PROMOTION_WEIGHT = 0.1


@dataclass
class MoveOutcome:
    """Everything one resolved move did to the board."""
    piece: Piece
    from_pos: Position
    to_pos: Position
    captured: Optional[Piece] = None
    promoted_from: Optional[Piece] = None
    cosmetic: Optional[str] = None
    replaced_cosmetic: Optional[str] = None
    rescued: list[Piece] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)


def name_param(name) -> object:
    """Plain JSON form of a piece name for event params."""
    if isinstance(name, PieceName):
        return {"first": name.first_index, "last": name.last_index}
    return name


def piece_params(piece: Piece, prefix: str = "") -> dict:
    return {
        f"{prefix}piece_id": piece.id,
        f"{prefix}piece": piece.piece_type.value,
        f"{prefix}color": piece.color,
        f"{prefix}name": name_param(piece.name),
    }


def promotion_candidates(level: int) -> list[PieceType]:
    if level < 3:
        return [PieceType.KNIGHT, PieceType.BISHOP]
    if level < 5:
        return [PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK]
    return [PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN]


def promotion_weights(level: int, player_pieces: list[Piece]) -> dict[PieceType, float]:
    """Weight per candidate kind: max(0.1, base / (1 + 2 * owned))."""
    counts: dict[PieceType, int] = {}
    for p in player_pieces:
        if p.piece_type not in (PieceType.KING, PieceType.PAWN):
            counts[p.piece_type] = counts.get(p.piece_type, 0) + 1
    return {
        kind: max(MIN_PROMOTION_WEIGHT, PROMOTION_WEIGHTS[kind] / (1 + counts.get(kind, 0) * 2))
        for kind in promotion_candidates(level)
    }


def choose_promotion(level: int, player_pieces: list[Piece],
                     rng: Optional[random.Random] = None) -> PieceType:
    """Weighted random draw of the kind a pawn promotes to."""
    rng = rng or random.Random()
    weights = promotion_weights(level, player_pieces)
    total = sum(weights.values())
    if total == 0:
        return PieceType.KNIGHT

    roll = rng.random() * total
    for kind, weight in weights.items():
        if roll < weight:
            return kind
        roll -= weight
    # Float rounding can leave roll just past the last bucket
    return list(weights)[-1]


def choose_cosmetic(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return rng.choice(COSMETICS)


def is_bump_move(piece: Piece, from_pos: Position, to_pos: Position) -> bool:
    """Orthogonal pawn move that is not its forward step."""
    if piece.piece_type != PieceType.PAWN:
        return False
    fx, fy = from_pos
    tx, ty = to_pos
    if fx != tx and fy != ty:
        return False
    dx, dy = piece.facing.vector
    return (tx, ty) != (fx + dx, fy + dy)


def rescue_allies(board: Board, origin: Position, level: int,
                  rng: Optional[random.Random] = None) -> list[Piece]:
    """Wake every sleeping ally chained to origin through 8-neighbourhoods.

    Uses a FIFO queue of newly woken pieces' cells so long chains never
    recurse. Modifies board in place and returns the new pieces in wake order.
    """
    rng = rng or random.Random()
    rescued: list[Piece] = []
    queue = deque([tuple(origin)])
    while queue:
        x, y = queue.popleft()
        for dx, dy in ALL_DIRS:
            nx, ny = x + dx, y + dy
            tile = board.get(nx, ny)
            if not isinstance(tile, SleepingAlly):
                continue
            piece = Piece(
                id=new_piece_id(f"{nx}-{ny}", rng),
                piece_type=tile.piece_type,
                color=PLAYER_COLOR,
                x=nx,
                y=ny,
                name=generate_random_name(rng),
                discovered_on_level=level,
                captures=0,
            )
            board.set(nx, ny, piece)
            rescued.append(piece)
            queue.append((nx, ny))
    return rescued


def rescue_allies_on_setup(board: Board, level: int,
                           rng: Optional[random.Random] = None) -> list[Piece]:
    """Run the rescue scan from every player piece on a fresh board."""
    rescued: list[Piece] = []
    for piece in board.pieces(PLAYER_COLOR):
        rescued.extend(rescue_allies(board, piece.position, level, rng))
    return rescued


def ally_joined_event(piece: Piece) -> Event:
    params = piece_params(piece)
    params["at"] = [piece.x, piece.y]
    return Event(EventKind.ALLY_JOINED, params)


def apply_move(board: Board, from_pos: Position, to_pos: Position, level: int,
               rng: Optional[random.Random] = None) -> MoveOutcome:
    """Move the piece at from_pos to to_pos and resolve every effect.

    Modifies board in place; callers hand in a copy and swap it in after.
    Legality is the caller's concern.
    """
    rng = rng or random.Random()
    from_pos = tuple(from_pos)
    to_pos = tuple(to_pos)
    mover = board.piece_at(*from_pos)
    if mover is None:
        raise ValueError(f"No piece at {from_pos}")

    prior = board.get(*to_pos)
    bump = is_bump_move(mover, from_pos, to_pos)

    board.clear(*from_pos)
    board.set(to_pos[0], to_pos[1], mover)
    outcome = MoveOutcome(piece=mover, from_pos=from_pos, to_pos=to_pos)

    move_params = piece_params(mover)
    move_params.update({"from": list(from_pos), "to": list(to_pos)})

    # 1. Capture
    if isinstance(prior, Piece) and prior.color != mover.color:
        mover.captures += 1
        outcome.captured = prior
        move_params.update(piece_params(prior, prefix="target_"))
        move_params.update({
            "target_captures": prior.captures,
            "target_discovered_on_level": prior.discovered_on_level,
            "target_cosmetic": prior.cosmetic,
        })
        outcome.events.append(Event(EventKind.CAPTURE, move_params))
        logger.debug(f"{mover.color} {mover.piece_type.value} captured "
                     f"{prior.color} {prior.piece_type.value} at {to_pos}")
    else:
        outcome.events.append(Event(EventKind.MOVE, move_params))

    # 2. Chest
    if isinstance(prior, Chest):
        if mover.piece_type == PieceType.PAWN:
            new_type = choose_promotion(level, board.pieces(PLAYER_COLOR), rng)
            promoted = Piece(
                id=new_piece_id(new_type.value.lower(), rng),
                piece_type=new_type,
                color=mover.color,
                x=to_pos[0],
                y=to_pos[1],
                name=generate_random_name(rng) if mover.is_player else None,
                discovered_on_level=level,
                captures=0,
            )
            board.set(to_pos[0], to_pos[1], promoted)
            outcome.promoted_from = mover
            outcome.piece = promoted
            params = piece_params(mover)
            params.update(piece_params(promoted, prefix="new_"))
            outcome.events.append(Event(EventKind.PROMOTION, params))
            logger.debug(f"Pawn {mover.id} promoted to {new_type.value}")
        else:
            cosmetic = choose_cosmetic(rng)
            outcome.replaced_cosmetic = mover.cosmetic
            mover.cosmetic = cosmetic
            outcome.cosmetic = cosmetic
            params = piece_params(mover)
            params["cosmetic"] = cosmetic
            outcome.events.append(Event(EventKind.COSMETIC_FOUND, params))

    # 3. Pawn reorientation
    if bump and outcome.piece is mover:
        mover.direction = direction_from_delta(to_pos[0] - from_pos[0],
                                               to_pos[1] - from_pos[1])

    # 4. Ally rescue
    if outcome.piece.is_player:
        outcome.rescued = rescue_allies(board, to_pos, level, rng)
        outcome.events.extend(ally_joined_event(p) for p in outcome.rescued)
        if outcome.rescued:
            logger.debug(f"{len(outcome.rescued)} allies joined near {to_pos}")

    return outcome
