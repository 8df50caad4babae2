"""Tests for AI move selection."""

import random

import pytest

from chesscrawl.engine.heuristic_player import (
    CaptureFirstPlayer, HeuristicPlayer, create_player,
)
from chesscrawl.game.state import Chest, Piece, PieceType, Wall


def _place(board, kind, color, x, y):
    piece = Piece(id=f"{color}-{kind.value}-{x}-{y}", piece_type=kind, color=color, x=x, y=y)
    board.set(x, y, piece)
    return piece


class TestHeuristicPlayer:
    def test_never_picks_chest(self, board):
        _place(board, PieceType.ROOK, "black", 0, 0)
        _place(board, PieceType.KING, "black", 7, 0)
        _place(board, PieceType.KING, "white", 7, 7)
        board.set(1, 0, Chest())
        board.set(0, 1, Chest())
        for seed in range(30):
            move = HeuristicPlayer(rng=random.Random(seed), jitter=50.0).get_move(board, "black")
            assert not isinstance(board.get(*move.to_pos), Chest)

    def test_chest_score_excluded(self, board):
        rook = _place(board, PieceType.ROOK, "black", 0, 0)
        board.set(0, 3, Chest())
        assert HeuristicPlayer().score_move(board, rook, (0, 3)) is None

    def test_only_chest_moves_means_no_move(self, board):
        _place(board, PieceType.KNIGHT, "black", 0, 0)
        board.set(1, 2, Chest())
        board.set(2, 1, Wall())
        assert HeuristicPlayer(rng=random.Random(0)).get_move(board, "black") is None

    def test_prefers_capture(self, board):
        _place(board, PieceType.ROOK, "black", 0, 0)
        _place(board, PieceType.QUEEN, "white", 0, 5)
        _place(board, PieceType.KING, "white", 7, 7)
        move = HeuristicPlayer(rng=random.Random(0)).get_move(board, "black")
        assert move.to_pos == (0, 5)
        assert move.from_pos == (0, 0)

    def test_player_capture_multiplier(self, board):
        player = HeuristicPlayer(jitter=0.0)
        rook = _place(board, PieceType.ROOK, "black", 0, 0)
        _place(board, PieceType.KING, "white", 7, 7)
        _place(board, PieceType.PAWN, "white", 0, 5)
        white_score = player.score_move(board, rook, (0, 5))
        _place(board, PieceType.PAWN, "orange", 0, 5)
        orange_score = player.score_move(board, rook, (0, 5))
        assert white_score - orange_score == pytest.approx(5.0)

    def test_king_approach_and_centrality(self, board):
        rook = _place(board, PieceType.ROOK, "black", 0, 0)
        _place(board, PieceType.KING, "white", 0, 7)
        player = HeuristicPlayer(jitter=0.0)
        assert player.score_move(board, rook, (0, 3)) == pytest.approx(6.0)

    def test_piece_approach_without_king(self, board):
        rook = _place(board, PieceType.ROOK, "black", 0, 0)
        _place(board, PieceType.PAWN, "white", 0, 7)
        player = HeuristicPlayer(jitter=0.0)
        assert player.score_move(board, rook, (0, 3)) == pytest.approx(3.0)

    def test_king_caution(self, board):
        player = HeuristicPlayer(jitter=0.0)
        king = _place(board, PieceType.KING, "black", 3, 3)
        king_score = player.score_move(board, king, (3, 4))
        board.clear(3, 3)
        queen = _place(board, PieceType.QUEEN, "black", 3, 3)
        assert player.score_move(board, queen, (3, 4)) - king_score == pytest.approx(5.0)

    def test_seeded_choice_is_reproducible(self, board):
        _place(board, PieceType.QUEEN, "black", 3, 3)
        _place(board, PieceType.KING, "white", 4, 7)
        a = HeuristicPlayer(rng=random.Random(11)).get_move(board, "black")
        b = HeuristicPlayer(rng=random.Random(11)).get_move(board, "black")
        assert (a.from_pos, a.to_pos) == (b.from_pos, b.to_pos)

    def test_no_pieces(self, board):
        assert HeuristicPlayer().get_move(board, "black") is None


class TestCaptureFirstPlayer:
    def test_most_valuable_capture(self, board):
        _place(board, PieceType.QUEEN, "black", 3, 3)
        _place(board, PieceType.ROOK, "white", 3, 0)
        _place(board, PieceType.PAWN, "white", 3, 6)
        move = CaptureFirstPlayer(rng=random.Random(0)).get_move(board, "black")
        assert move.to_pos == (3, 0)

    def test_random_non_chest_move(self, board):
        _place(board, PieceType.KNIGHT, "black", 0, 0)
        board.set(1, 2, Chest())
        move = CaptureFirstPlayer(rng=random.Random(0)).get_move(board, "black")
        assert move.to_pos == (2, 1)


class TestCreatePlayer:
    def test_strategies(self):
        assert isinstance(create_player("heuristic"), HeuristicPlayer)
        assert isinstance(create_player("capture_first"), CaptureFirstPlayer)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            create_player("minimax")
