"""Heuristic move selection for AI factions.

Each candidate (piece, destination) is scored once, a small random jitter
is added, and the best score wins. There is no lookahead.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from chesscrawl.game.board import PLAYER_COLOR
from chesscrawl.game.rules import legal_moves
from chesscrawl.game.state import Board, Chest, Piece, PieceType

logger = logging.getLogger("chesscrawl.ai")

Position = tuple[int, int]


@dataclass
class ScoredMove:
    """A candidate move for an AI faction."""
    piece: Piece
    to_pos: Position
    score: float

    @property
    def from_pos(self) -> Position:
        return self.piece.position


def _manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def candidate_moves(board: Board, color: str) -> list[tuple[Piece, Position]]:
    """Every (piece, destination) pair available to a faction."""
    return [(piece, dest) for piece in board.pieces(color)
            for dest in legal_moves(board, piece.position)]


class HeuristicPlayer:
    """Scores every legal move for a faction and plays the best one."""

    CAPTURE_VALUES = {
        PieceType.PAWN: 10,
        PieceType.KNIGHT: 30,
        PieceType.BISHOP: 30,
        PieceType.ROOK: 50,
        PieceType.QUEEN: 90,
        PieceType.KING: 1000,
    }

    def __init__(self, rng: Optional[random.Random] = None,
                 player_capture_multiplier: float = 1.5,
                 king_approach_bonus: float = 5.0,
                 piece_approach_bonus: float = 2.0,
                 king_caution_penalty: float = 5.0,
                 jitter: float = 2.0):
        """
        Args:
            rng: Random source for the tie-break jitter.
            player_capture_multiplier: Weight on capturing player pieces
                relative to other AI factions.
            king_approach_bonus: Bonus for closing in on the player King.
            piece_approach_bonus: Bonus for closing in on the nearest player
                piece when the King is gone.
            king_caution_penalty: Penalty on every move of the faction's own King.
            jitter: Width of the uniform random term added to each score.
        """
        self.rng = rng or random.Random()
        self.player_capture_multiplier = player_capture_multiplier
        self.king_approach_bonus = king_approach_bonus
        self.piece_approach_bonus = piece_approach_bonus
        self.king_caution_penalty = king_caution_penalty
        self.jitter = jitter

    def score_move(self, board: Board, piece: Piece, dest: Position) -> Optional[float]:
        """Deterministic part of a move's score, or None if the move is excluded.

        Chest destinations are excluded outright.
        """
        target = board.get(*dest)
        if isinstance(target, Chest):
            return None

        score = 0.0
        if isinstance(target, Piece) and target.color != piece.color:
            value = self.CAPTURE_VALUES[target.piece_type]
            if target.color == PLAYER_COLOR:
                value *= self.player_capture_multiplier
            score += value

        player_king = board.find_king(PLAYER_COLOR)
        if player_king is not None:
            if _manhattan(dest, player_king.position) < _manhattan(piece.position, player_king.position):
                score += self.king_approach_bonus
        else:
            player_pieces = board.pieces(PLAYER_COLOR)
            if player_pieces:
                closest = min(player_pieces, key=lambda p: _manhattan(piece.position, p.position))
                if _manhattan(dest, closest.position) < _manhattan(piece.position, closest.position):
                    score += self.piece_approach_bonus

        # Favor central squares
        width_center = (board.width - 1) / 2
        height_center = (board.height - 1) / 2
        centrality_x = board.width / 2 - abs(dest[0] - width_center)
        centrality_y = board.height / 2 - abs(dest[1] - height_center)
        score += (centrality_x + centrality_y) / 4

        if piece.piece_type == PieceType.KING:
            score -= self.king_caution_penalty

        return score

    def score_moves(self, board: Board, color: str) -> list[ScoredMove]:
        """Score all non-excluded candidates, jitter included."""
        scored = []
        for piece, dest in candidate_moves(board, color):
            score = self.score_move(board, piece, dest)
            if score is None:
                continue
            score += self.rng.random() * self.jitter
            scored.append(ScoredMove(piece, dest, score))
        return scored

    def get_move(self, board: Board, color: str) -> Optional[ScoredMove]:
        """Select a move for a faction, or None if it has nothing playable."""
        scored = self.score_moves(board, color)
        if not scored:
            return None
        # max keeps the first of equal scores, so ties follow the jitter
        best = max(scored, key=lambda m: m.score)
        logger.debug(f"{color}: {len(scored)} candidates, best {best.piece.piece_type.value} "
                     f"{best.from_pos}->{best.to_pos} ({best.score:.2f})")
        return best


class CaptureFirstPlayer:
    """Legacy fallback: take the most valuable capture, otherwise move at random.

    Chests are excluded the same way as in HeuristicPlayer.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def get_move(self, board: Board, color: str) -> Optional[ScoredMove]:
        moves = []
        for piece, dest in candidate_moves(board, color):
            target = board.get(*dest)
            if isinstance(target, Chest):
                continue
            value = 0.0
            if isinstance(target, Piece) and target.color != piece.color:
                value = HeuristicPlayer.CAPTURE_VALUES[target.piece_type]
            moves.append(ScoredMove(piece, dest, value))
        if not moves:
            return None

        captures = [m for m in moves if m.score > 0]
        if captures:
            return max(captures, key=lambda m: m.score)
        return self.rng.choice(moves)


def create_player(strategy: str = "heuristic", rng: Optional[random.Random] = None, **kwargs):
    """Create an AI player by strategy name ('heuristic' or 'capture_first')."""
    if strategy == "heuristic":
        return HeuristicPlayer(rng=rng, **kwargs)
    elif strategy == "capture_first":
        return CaptureFirstPlayer(rng=rng)
    raise ValueError(f"Unknown AI strategy: {strategy!r}")
