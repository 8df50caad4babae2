"""Unit tests for the board model, move generation and threat detection."""

import json

import pytest

from chesscrawl.game.board import (
    DEFAULT_HEIGHT, DEFAULT_WIDTH, render_board, xy_to_notation, notation_to_xy,
)
from chesscrawl.game.events import Event, EventKind
from chesscrawl.game.rules import (
    available_moves, is_in_check, is_legal_move, is_square_attacked, legal_moves,
)
from chesscrawl.game.state import (
    Board, Chest, Direction, GameState, Piece, PieceName, PieceType, SleepingAlly, Wall,
    direction_from_delta, tile_from_dict,
)


def _place(board, kind, color, x, y, **kwargs):
    piece = Piece(id=f"{color}-{kind.value}-{x}-{y}", piece_type=kind, color=color,
                  x=0, y=0, **kwargs)
    board.set(x, y, piece)
    return piece


class TestBoard:
    def test_default_size(self):
        board = Board()
        assert (board.width, board.height) == (DEFAULT_WIDTH, DEFAULT_HEIGHT) == (8, 8)

    def test_get_off_board_is_none(self, board):
        assert board.get(-1, 0) is None
        assert board.get(8, 8) is None
        assert not board.in_bounds(0, 8)

    def test_set_updates_piece_position(self, board):
        piece = _place(board, PieceType.ROOK, "white", 2, 5)
        assert piece.position == (2, 5)
        assert board.piece_at(2, 5) is piece

    def test_enemy_factions_sorted(self, board):
        _place(board, PieceType.KING, "white", 4, 7)
        _place(board, PieceType.KING, "orange", 0, 0)
        _place(board, PieceType.KING, "black", 7, 0)
        _place(board, PieceType.PAWN, "black", 6, 1)
        assert board.enemy_factions() == ["black", "orange"]

    def test_clone_is_independent(self, board):
        piece = _place(board, PieceType.PAWN, "white", 3, 6)
        clone = board.clone()
        piece.captures = 5
        board.clear(3, 6)
        assert clone.piece_at(3, 6).captures == 0

    def test_notation_roundtrip(self):
        for y in range(8):
            for x in range(8):
                assert notation_to_xy(xy_to_notation(x, y, 8), 8) == (x, y)
        assert xy_to_notation(0, 7, 8) == "a1"

    def test_invalid_notation(self):
        with pytest.raises(ValueError):
            notation_to_xy("z9", 8)

    def test_render_board(self, board):
        _place(board, PieceType.KING, "white", 4, 7)
        _place(board, PieceType.KING, "black", 4, 0)
        board.set(0, 0, Wall())
        board.set(1, 0, Chest())
        text = render_board(board.to_display_cells(), turn="player", level=1)
        assert " K |" in text
        assert " kb|" in text
        assert "###" in text
        assert "Level 1" in text

    def test_direction_from_delta(self):
        assert direction_from_delta(1, 0) == Direction.RIGHT
        assert direction_from_delta(-1, 0) == Direction.LEFT
        assert direction_from_delta(0, 1) == Direction.DOWN
        assert direction_from_delta(0, -1) == Direction.UP


class TestGameState:
    def _populated_state(self):
        board = Board(8, 8)
        _place(board, PieceType.KING, "white", 4, 7, name=PieceName(3, 7), captures=2,
               cosmetic="tophat")
        _place(board, PieceType.PAWN, "white", 3, 6, direction=Direction.RIGHT,
               name="Old Timer")
        _place(board, PieceType.KING, "black", 4, 0, discovered_on_level=2)
        board.set(0, 0, Wall())
        board.set(1, 1, Chest())
        board.set(2, 2, SleepingAlly(PieceType.BISHOP))
        state = GameState(board, level=2)
        state.current_turn = "black"
        state.record(Event(EventKind.LEVEL_START, {"level": 2, "factions": ["black"]}))
        state.inventory.cosmetics.append("tophat")
        return state

    def test_serialize_roundtrip(self):
        state = self._populated_state()
        restored = GameState.deserialize(state.serialize())
        assert restored.board == state.board
        assert restored.to_dict() == state.to_dict()
        assert restored.current_turn == "black"
        assert restored.board.piece_at(4, 7).name == PieceName(3, 7)
        assert restored.board.piece_at(3, 6).name == "Old Timer"
        assert isinstance(restored.board.get(2, 2), SleepingAlly)

    def test_snapshot_is_plain_json(self):
        state = self._populated_state()
        data = state.to_dict()
        assert json.loads(json.dumps(data)) == data

    def test_clone(self):
        state = self._populated_state()
        clone = state.clone()
        state.board.clear(4, 7)
        state.level = 9
        assert clone.board.piece_at(4, 7) is not None
        assert clone.level == 2

    def test_history_is_bounded(self):
        state = GameState(history_limit=3)
        for i in range(5):
            state.record(Event(EventKind.MOVE, {"i": i}))
        assert [e.params["i"] for e in state.history] == [2, 3, 4]

    def test_unknown_tile_type(self):
        with pytest.raises(ValueError):
            tile_from_dict({"type": "lava"})


class TestSlidingMoves:
    def test_rook_corner_empty_board(self, board):
        _place(board, PieceType.ROOK, "white", 0, 0)
        moves = legal_moves(board, (0, 0))
        assert len(moves) == 14
        assert set(moves) == {(x, 0) for x in range(1, 8)} | {(0, y) for y in range(1, 8)}

    def test_bishop_and_queen_counts(self, board):
        _place(board, PieceType.BISHOP, "white", 3, 3)
        assert len(legal_moves(board, (3, 3))) == 13
        board.clear(3, 3)
        _place(board, PieceType.QUEEN, "white", 3, 3)
        assert len(legal_moves(board, (3, 3))) == 27

    def test_wall_blocks_ray(self, board):
        _place(board, PieceType.ROOK, "white", 0, 0)
        board.set(0, 3, Wall())
        moves = legal_moves(board, (0, 0))
        assert (0, 1) in moves and (0, 2) in moves
        assert (0, 3) not in moves
        assert (0, 4) not in moves

    def test_sleeping_ally_blocks_ray(self, board):
        _place(board, PieceType.ROOK, "white", 0, 0)
        board.set(2, 0, SleepingAlly(PieceType.PAWN))
        moves = legal_moves(board, (0, 0))
        assert (1, 0) in moves
        assert (2, 0) not in moves

    def test_friendly_blocks_enemy_captured(self, board):
        _place(board, PieceType.ROOK, "white", 0, 0)
        _place(board, PieceType.PAWN, "white", 0, 2)
        _place(board, PieceType.PAWN, "black", 3, 0)
        moves = legal_moves(board, (0, 0))
        assert (0, 2) not in moves
        assert (3, 0) in moves
        assert (4, 0) not in moves

    def test_chest_is_destination_and_stops_ray(self, board):
        _place(board, PieceType.BISHOP, "white", 0, 0)
        board.set(2, 2, Chest())
        moves = legal_moves(board, (0, 0))
        assert moves == [(1, 1), (2, 2)]


class TestStepMoves:
    def test_knight_corner(self, board):
        _place(board, PieceType.KNIGHT, "white", 0, 0)
        assert set(legal_moves(board, (0, 0))) == {(1, 2), (2, 1)}

    def test_knight_targets(self, board):
        _place(board, PieceType.KNIGHT, "white", 3, 3)
        board.set(4, 5, Wall())
        board.set(2, 5, SleepingAlly(PieceType.ROOK))
        board.set(5, 4, Chest())
        _place(board, PieceType.PAWN, "white", 5, 2)
        _place(board, PieceType.PAWN, "black", 1, 2)
        moves = set(legal_moves(board, (3, 3)))
        assert (4, 5) not in moves
        assert (2, 5) not in moves
        assert (5, 4) in moves
        assert (5, 2) not in moves
        assert (1, 2) in moves

    def test_king_center(self, board):
        _place(board, PieceType.KING, "white", 3, 3)
        board.set(3, 2, Wall())
        moves = set(legal_moves(board, (3, 3)))
        assert len(moves) == 7
        assert (3, 2) not in moves


class TestPawnMoves:
    def test_forward_step(self, board):
        _place(board, PieceType.PAWN, "white", 3, 6)
        assert legal_moves(board, (3, 6)) == [(3, 5)]

    @pytest.mark.parametrize("blocker", [Wall(), Chest(), SleepingAlly(PieceType.PAWN), "enemy"])
    def test_forward_blocked_by_anything(self, board, blocker):
        _place(board, PieceType.PAWN, "white", 3, 6)
        if blocker == "enemy":
            _place(board, PieceType.PAWN, "black", 3, 5)
        else:
            board.set(3, 5, blocker)
        moves = legal_moves(board, (3, 6))
        assert (3, 5) not in moves
        # Blocked front bumps the pawn backwards
        assert (3, 7) in moves

    def test_default_facing(self, board):
        _place(board, PieceType.PAWN, "black", 3, 1)
        assert (3, 2) in legal_moves(board, (3, 1))

    def test_diagonals(self, board):
        _place(board, PieceType.PAWN, "white", 3, 6)
        _place(board, PieceType.KNIGHT, "black", 2, 5)
        board.set(4, 5, Chest())
        moves = legal_moves(board, (3, 6))
        assert (2, 5) in moves
        assert (4, 5) in moves

    @pytest.mark.parametrize("blocker", [Wall(), SleepingAlly(PieceType.KNIGHT), "friend", None])
    def test_diagonal_never_on_other_tiles(self, board, blocker):
        _place(board, PieceType.PAWN, "white", 3, 6)
        if blocker == "friend":
            _place(board, PieceType.ROOK, "white", 2, 5)
        elif blocker is not None:
            board.set(2, 5, blocker)
        assert (2, 5) not in legal_moves(board, (3, 6))

    def test_bump_off_board_edge(self, board):
        _place(board, PieceType.PAWN, "white", 0, 3, direction=Direction.UP)
        moves = legal_moves(board, (0, 3))
        assert (1, 3) in moves
        assert (0, 2) in moves

    def test_bump_needs_empty_landing(self, board):
        _place(board, PieceType.PAWN, "white", 0, 3)
        board.set(1, 3, Chest())
        assert (1, 3) not in legal_moves(board, (0, 3))

    def test_bump_and_forward_not_duplicated(self, board):
        _place(board, PieceType.PAWN, "white", 3, 7)
        moves = legal_moves(board, (3, 7))
        assert moves.count((3, 6)) == 1

    def test_sideways_facing(self, board):
        _place(board, PieceType.PAWN, "white", 3, 3, direction=Direction.RIGHT)
        _place(board, PieceType.PAWN, "black", 4, 2)
        _place(board, PieceType.PAWN, "black", 2, 2)
        moves = legal_moves(board, (3, 3))
        assert (4, 3) in moves
        assert (4, 2) in moves
        # Left-facing diagonal is not a capture for a right-facing pawn
        assert (2, 2) not in moves


class TestLegalMovesGeneral:
    def test_empty_or_off_board_source(self, board):
        assert legal_moves(board, (3, 3)) == []
        assert legal_moves(board, (-1, 3)) == []
        board.set(3, 3, Wall())
        assert legal_moves(board, (3, 3)) == []

    @pytest.mark.parametrize("width,height", [(3, 3), (5, 8), (8, 8), (14, 14)])
    def test_moves_stay_in_bounds(self, width, height):
        for kind in PieceType:
            for y in range(height):
                for x in range(width):
                    board = Board(width, height)
                    _place(board, kind, "white", x, y)
                    for mx, my in legal_moves(board, (x, y)):
                        assert board.in_bounds(mx, my), (kind, x, y, mx, my)

    def test_is_legal_move(self, board):
        _place(board, PieceType.KNIGHT, "white", 0, 0)
        assert is_legal_move(board, (0, 0), (1, 2))
        assert is_legal_move(board, (0, 0), [2, 1])
        assert not is_legal_move(board, (0, 0), (1, 1))
        assert not is_legal_move(board, (5, 5), (5, 4))

    def test_level_one_enemy_pawn_step(self, board):
        _place(board, PieceType.KING, "white", 4, 7)
        _place(board, PieceType.KING, "black", 4, 0)
        _place(board, PieceType.PAWN, "black", 3, 1, direction=Direction.DOWN)
        assert (3, 2) in legal_moves(board, (3, 1))


class TestThreats:
    def test_rook_attacks_column(self, board):
        _place(board, PieceType.ROOK, "black", 0, 0)
        assert is_square_attacked(board, (0, 5), {"black"})
        assert not is_square_attacked(board, (0, 5), {"orange"})
        assert not is_square_attacked(board, (1, 5), {"black"})

    def test_pawn_diagonal_needs_target(self, board):
        _place(board, PieceType.PAWN, "black", 3, 1, direction=Direction.DOWN)
        # Move semantics: the empty forward cell counts, the empty diagonal does not
        assert is_square_attacked(board, (3, 2), {"black"})
        assert not is_square_attacked(board, (2, 2), {"black"})

    def test_king_moves_flagged(self, board):
        _place(board, PieceType.KING, "white", 4, 7)
        _place(board, PieceType.ROOK, "black", 0, 6)
        moves = {m.position: m.is_threatened for m in available_moves(board, (4, 7))}
        assert moves == {
            (3, 6): True, (4, 6): True, (5, 6): True,
            (3, 7): False, (5, 7): False,
        }

    def test_non_king_never_flagged(self, board):
        _place(board, PieceType.ROOK, "white", 4, 7)
        _place(board, PieceType.ROOK, "black", 0, 6)
        assert not any(m.is_threatened for m in available_moves(board, (4, 7)))

    def test_is_in_check(self, board):
        _place(board, PieceType.KING, "white", 4, 7)
        _place(board, PieceType.ROOK, "black", 4, 0)
        assert is_in_check(board, "white")
        board.set(4, 3, Wall())
        assert not is_in_check(board, "white")

    def test_no_king_no_check(self, board):
        _place(board, PieceType.ROOK, "black", 4, 0)
        assert not is_in_check(board, "white")
