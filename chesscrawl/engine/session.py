"""Game session: the single owner of engine state.

GameSession is the pure-Python core with no I/O. It holds one GameState and
mutates it only through two entry points: move application (player
requests and AI turns both go through _apply_move) and turn advance.
Everything else reads.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Union

from chesscrawl.config import EngineConfig
from chesscrawl.engine.heuristic_player import ScoredMove, create_player
from chesscrawl.game.board import PLAYER_COLOR, PLAYER_TURN, COSMETICS
from chesscrawl.game.events import Event, EventKind
from chesscrawl.game.generator import generate_level
from chesscrawl.game.interactions import (
    apply_move, choose_promotion, piece_params, rescue_allies_on_setup, ally_joined_event,
)
from chesscrawl.game.models import LevelOverrides, MoveRequest
from chesscrawl.game.names import generate_random_name
from chesscrawl.game.rules import AvailableMove, available_moves, is_in_check, is_legal_move
from chesscrawl.game.state import (
    Direction, GameState, Piece, PieceType, new_piece_id,
)
from chesscrawl.game.turns import (
    LevelStatus, level_status, next_turn, piece_counts, turn_color, turn_order,
)

logger = logging.getLogger("chesscrawl.session")

Position = tuple[int, int]

# Cheat spawn preference: orthogonal neighbours of the King, then diagonals
SPAWN_OFFSETS = [(-1, 0), (1, 0), (0, -1), (0, 1), (-1, -1), (1, -1), (-1, 1), (1, 1)]


class CheatError(Exception):
    """Raised when a debug/cheat action cannot be carried out."""


class GameSession:
    """One running game: level setup, move requests, AI turns, carry-over."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 rng: Optional[random.Random] = None,
                 state: Optional[GameState] = None):
        self.config = config or EngineConfig()
        self.rng = rng or random.Random(self.config.session.seed)
        self.ai = create_player(self.config.ai.strategy, rng=self.rng,
                                **self.config.ai.player_kwargs())
        self.state: Optional[GameState] = state
        self._resolving = False

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    @classmethod
    def from_snapshot(cls, snapshot: Union[str, dict],
                      config: Optional[EngineConfig] = None,
                      rng: Optional[random.Random] = None) -> GameSession:
        """Resume from a dict or JSON string produced by snapshot()."""
        if isinstance(snapshot, str):
            state = GameState.deserialize(snapshot)
        else:
            state = GameState.from_dict(snapshot)
        return cls(config=config, rng=rng, state=state)

    def snapshot(self) -> dict:
        return self.state.to_dict()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def board(self):
        return self.state.board

    @property
    def level(self) -> int:
        return self.state.level

    @property
    def current_turn(self) -> str:
        return self.state.current_turn

    @property
    def turn_order(self) -> list[str]:
        return turn_order(self.state.board)

    @property
    def history(self) -> list[Event]:
        return list(self.state.history)

    @property
    def is_player_turn(self) -> bool:
        return self.state.current_turn == PLAYER_TURN

    @property
    def status(self) -> LevelStatus:
        return level_status(self.state.board)

    def piece_counts(self) -> dict[str, int]:
        return piece_counts(self.state.board)

    def available_moves(self, position: Position) -> list[AvailableMove]:
        """Destinations for a player piece, King moves flagged when threatened."""
        piece = self.state.board.piece_at(*position)
        if piece is None or not piece.is_player:
            return []
        return available_moves(self.state.board, position,
                               hostile=self.state.board.enemy_factions())

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------

    def new_game(self):
        """Start over at level 1 with fresh history and inventory."""
        self.state = GameState(level=1, history_limit=self.config.session.history_limit)
        self.setup_level(1, [])

    def setup_level(self, level: int, carry_over: list[Piece],
                    overrides: Optional[LevelOverrides] = None):
        """Replace the board with a freshly generated one for level."""
        if self.state is None:
            self.state = GameState(level=level, history_limit=self.config.session.history_limit)

        board_cfg = self.config.board
        board, factions = generate_level(
            level, carry_over, overrides=overrides, rng=self.rng,
            scale_with_level=board_cfg.scale_with_level,
            default_width=board_cfg.width, default_height=board_cfg.height,
        )

        state = self.state
        state.level = level
        state.board = board
        state.current_turn = PLAYER_TURN
        state.level_complete = False
        state.game_over = False
        state.king_in_check = False

        state.record(Event(EventKind.LEVEL_START, {
            "level": level, "width": board.width, "height": board.height,
            "factions": factions,
        }))
        for piece in carry_over:
            if piece.piece_type != PieceType.KING:
                state.record(Event(EventKind.PIECE_CARRIED_OVER, piece_params(piece)))

        for piece in rescue_allies_on_setup(board, level, self.rng):
            state.record(ally_joined_event(piece))

        self._refresh_status()
        logger.info(f"Level {level} ready: {len(board.pieces(PLAYER_COLOR))} player pieces, "
                    f"factions {factions}")

    def carry_over(self, selected: list[Piece]):
        """Advance to the next level keeping the King and the selected pieces.

        Carried pieces keep their state under new ids. When at most one piece
        would make the trip a fresh pawn joins.
        """
        level = self.state.level
        carried = [p.copy() for p in selected if p.piece_type != PieceType.KING]
        for p in carried:
            p.id = new_piece_id(p.piece_type.value.lower(), self.rng)

        king = self.state.board.find_king(PLAYER_COLOR)
        if king is not None:
            king = king.copy()
            king.id = new_piece_id("wk", self.rng)
            carried.append(king)

        if len(carried) <= 1:
            carried.append(Piece(
                id=new_piece_id(f"wp-new-{level + 1}", self.rng),
                piece_type=PieceType.PAWN,
                color=PLAYER_COLOR,
                x=0,
                y=0,
                name=generate_random_name(self.rng),
                discovered_on_level=level + 1,
                direction=Direction.UP,
            ))

        self.state.inventory.pieces = [p.copy() for p in carried]
        self.setup_level(level + 1, carried)

    # ------------------------------------------------------------------
    # Moves and turns
    # ------------------------------------------------------------------

    def request_move(self, from_pos: Position, to_pos: Position) -> bool:
        """Apply a player move if it is legal right now.

        Returns False and changes nothing when the move is not accepted.
        """
        if self._resolving:
            logger.warning("Move requested while another move is resolving")
            return False
        state = self.state
        if state is None or state.done or not self.is_player_turn:
            return False
        piece = state.board.piece_at(*from_pos)
        if piece is None or not piece.is_player:
            return False
        if not is_legal_move(state.board, from_pos, to_pos):
            logger.debug(f"Rejected illegal move {from_pos}->{to_pos}")
            return False
        self._apply_move(tuple(from_pos), tuple(to_pos))
        return True

    def submit(self, request: MoveRequest) -> bool:
        return self.request_move(request.from_pos, request.to_pos)

    def run_ai_turn(self) -> Optional[ScoredMove]:
        """Let the active AI faction move. Returns the move played, if any."""
        if self._resolving:
            logger.warning("AI turn requested while another move is resolving")
            return None
        state = self.state
        if state is None or state.done or self.is_player_turn:
            return None

        color = turn_color(state.current_turn)
        if color not in state.board.enemy_factions():
            self.advance_turn()
            return None

        move = self.ai.get_move(state.board, color)
        if move is None:
            state.record(Event(EventKind.NO_MOVES, {"color": color}))
            logger.info(f"{color} has no moves")
            self.advance_turn()
            return None

        self._apply_move(move.from_pos, move.to_pos)
        return move

    def play_ai_turns(self) -> list[ScoredMove]:
        """Run AI turns until it is the player's turn again or the level ends."""
        played = []
        for _ in range(len(self.turn_order) + 1):
            if self.state.done or self.is_player_turn:
                break
            move = self.run_ai_turn()
            if move is not None:
                played.append(move)
        return played

    def advance_turn(self):
        self.state.current_turn = next_turn(self.state.board, self.state.current_turn)

    def _apply_move(self, from_pos: Position, to_pos: Position):
        self._resolving = True
        try:
            state = self.state
            board = state.board.clone()
            outcome = apply_move(board, from_pos, to_pos, state.level, self.rng)
            state.board = board

            for event in outcome.events:
                state.record(event)
            if outcome.cosmetic is not None and outcome.piece.is_player:
                self._add_cosmetic(outcome.cosmetic, outcome.replaced_cosmetic)

            logger.debug(f"{outcome.piece.color} {from_pos}->{to_pos}"
                         + (" capture" if outcome.captured else ""))
            self._refresh_status()
            self.advance_turn()
        finally:
            self._resolving = False

    def _add_cosmetic(self, cosmetic: str, replaced: Optional[str] = None):
        cosmetics = self.state.inventory.cosmetics
        if replaced in cosmetics:
            cosmetics.remove(replaced)
        cosmetics.append(cosmetic)

    def _refresh_status(self):
        state = self.state
        in_check = is_in_check(state.board, PLAYER_COLOR)
        if in_check and not state.king_in_check:
            state.record(Event(EventKind.CHECK, {"color": PLAYER_COLOR}))
        state.king_in_check = in_check

        status = level_status(state.board)
        if status == LevelStatus.LEVEL_COMPLETE and not state.level_complete:
            state.level_complete = True
            state.record(Event(EventKind.LEVEL_COMPLETE, {"level": state.level}))
            logger.info(f"Level {state.level} complete")
        elif status == LevelStatus.GAME_OVER and not state.game_over:
            state.game_over = True
            state.record(Event(EventKind.GAME_OVER, {"level": state.level}))
            logger.info(f"Game over on level {state.level}")

    # ------------------------------------------------------------------
    # Debug / cheats
    # ------------------------------------------------------------------

    def win_level(self):
        self.state.level_complete = True
        self.state.record(Event(EventKind.LEVEL_COMPLETE, {"level": self.state.level}))

    def regenerate_level(self, width: int, height: int, faction_count: int) -> list[str]:
        """Rebuild the current level with new dimensions, keeping only the King."""
        king = self.state.board.find_king(PLAYER_COLOR)
        overrides = LevelOverrides(width=width, height=height, faction_count=faction_count)
        self.state.history.clear()
        self.setup_level(self.state.level, [king] if king else [], overrides=overrides)
        return self.state.board.enemy_factions()

    def create_piece(self, piece_type: PieceType) -> Piece:
        """Spawn a player piece on the first free cell next to the King."""
        board = self.state.board.clone()
        king = board.find_king(PLAYER_COLOR)
        if king is None:
            raise CheatError("No King on the board")
        spawns = [(king.x + dx, king.y + dy) for dx, dy in SPAWN_OFFSETS]
        spawns = [(x, y) for x, y in spawns if board.in_bounds(x, y) and board.get(x, y) is None]
        if not spawns:
            raise CheatError("No free cell next to the King")

        x, y = spawns[0]
        piece = Piece(
            id=new_piece_id(piece_type.value.lower(), self.rng),
            piece_type=piece_type,
            color=PLAYER_COLOR,
            x=x,
            y=y,
            name=generate_random_name(self.rng),
            discovered_on_level=self.state.level,
        )
        board.set(x, y, piece)
        self.state.board = board
        self._refresh_status()
        return piece

    def promote_random_pawn(self) -> Piece:
        """Turn a random player pawn into a promotion-drawn piece in place."""
        board = self.state.board.clone()
        player_pieces = board.pieces(PLAYER_COLOR)
        pawns = [p for p in player_pieces if p.piece_type == PieceType.PAWN]
        if not pawns:
            raise CheatError("No pawns to promote")

        pawn = self.rng.choice(pawns)
        params = piece_params(pawn)
        pawn.piece_type = choose_promotion(self.state.level, player_pieces, self.rng)
        pawn.direction = None
        params.update(piece_params(pawn, prefix="new_"))
        self.state.board = board
        self.state.record(Event(EventKind.PROMOTION, params))
        self._refresh_status()
        return pawn

    def award_cosmetic(self) -> Piece:
        """Give a random non-pawn player piece a random cosmetic."""
        board = self.state.board.clone()
        candidates = [p for p in board.pieces(PLAYER_COLOR) if p.piece_type != PieceType.PAWN]
        if not candidates:
            raise CheatError("No pieces to decorate")

        piece = self.rng.choice(candidates)
        cosmetic = self.rng.choice(COSMETICS)
        replaced = piece.cosmetic
        piece.cosmetic = cosmetic
        self.state.board = board
        params = piece_params(piece)
        params["cosmetic"] = cosmetic
        self.state.record(Event(EventKind.COSMETIC_FOUND, params))
        self._add_cosmetic(cosmetic, replaced)
        return piece
