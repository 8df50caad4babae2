#!/usr/bin/env python3
"""Interactive CLI for playing Chess Crawl.

Usage:
    python scripts/play.py                          # Play as white
    python scripts/play.py --autoplay --seed 7      # Watch a bot play white
    python scripts/play.py --config configs/default.yaml
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chesscrawl.config import load_config
from chesscrawl.engine.heuristic_player import CaptureFirstPlayer
from chesscrawl.engine.session import GameSession
from chesscrawl.game.board import PLAYER_COLOR, render_board, xy_to_notation, notation_to_xy
from chesscrawl.game.events import Event, EventKind
from chesscrawl.game.generator import MAX_CARRIED_PIECES
from chesscrawl.game.names import display_name
from chesscrawl.game.state import PieceName, PieceType

logger = logging.getLogger("chesscrawl.play")


def display_state(session: GameSession):
    """Print the current board."""
    board = session.board
    print(render_board(board.to_display_cells(), turn=session.current_turn, level=session.level))
    counts = session.piece_counts()
    print("Pieces: " + ", ".join(f"{color}={n}" for color, n in sorted(counts.items())))
    if session.state.king_in_check:
        print("Your King is in check!")
    print()


def _who(params: dict, prefix: str = "") -> str:
    name = display_name(_name(params.get(f"{prefix}name")))
    label = f"{params[f'{prefix}color']} {params[f'{prefix}piece']}"
    return f"{label} '{name}'" if name else label


def _name(raw):
    if isinstance(raw, dict):
        return PieceName(raw["first"], raw["last"])
    return raw


def describe_event(event: Event, height: int) -> str:
    """English one-liner for an event."""
    p = event.params
    kind = event.kind
    if kind == EventKind.LEVEL_START:
        return f"--- Level {p['level']} ({p['width']}x{p['height']}) vs {', '.join(p['factions'])} ---"
    if kind == EventKind.PIECE_CARRIED_OVER:
        return f"{_who(p)} carried over"
    if kind == EventKind.MOVE:
        return f"{_who(p)} moves to {xy_to_notation(*p['to'], height)}"
    if kind == EventKind.CAPTURE:
        return f"{_who(p)} captures {_who(p, 'target_')} at {xy_to_notation(*p['to'], height)}"
    if kind == EventKind.PROMOTION:
        return f"{_who(p)} opens a chest and becomes a {p['new_piece']}"
    if kind == EventKind.COSMETIC_FOUND:
        return f"{_who(p)} finds a {p['cosmetic']}"
    if kind == EventKind.ALLY_JOINED:
        return f"{_who(p)} wakes up and joins you"
    if kind == EventKind.NO_MOVES:
        return f"{p['color']} has no moves"
    if kind == EventKind.CHECK:
        return "Check!"
    if kind == EventKind.LEVEL_COMPLETE:
        return f"Level {p['level']} complete!"
    if kind == EventKind.GAME_OVER:
        return f"Game over on level {p['level']}"
    return f"{kind.value}: {p}"


def print_new_events(session: GameSession, last_seen):
    """Print events newer than last_seen and return the newest one."""
    history = session.history
    height = session.board.height
    start = 0
    # History is bounded, so find the last printed event by identity
    for i in range(len(history) - 1, -1, -1):
        if history[i] is last_seen:
            start = i + 1
            break
    for event in history[start:]:
        print(f"  * {describe_event(event, height)}")
    return history[-1] if history else last_seen


def human_turn(session: GameSession) -> bool:
    """Read a move like 'e2 e3'. Returns False to quit."""
    height = session.board.height
    while True:
        inp = input("Move (e.g. 'e2 e3'), 'moves e2', or 'q': ").strip().lower()
        if inp == "q":
            return False
        parts = inp.split()
        try:
            if len(parts) == 2 and parts[0] == "moves":
                pos = notation_to_xy(parts[1], height)
                moves = session.available_moves(pos)
                if not moves:
                    print("No moves for that square.")
                for m in moves:
                    flag = " (threatened)" if m.is_threatened else ""
                    print(f"  {xy_to_notation(m.x, m.y, height)}{flag}")
                continue
            if len(parts) == 2:
                from_pos = notation_to_xy(parts[0], height)
                to_pos = notation_to_xy(parts[1], height)
                if session.request_move(from_pos, to_pos):
                    return True
                print("That move is not legal.")
                continue
        except ValueError:
            pass
        print("Invalid input.")


def bot_turn(session: GameSession, bot: CaptureFirstPlayer) -> bool:
    move = bot.get_move(session.board, PLAYER_COLOR)
    if move is None:
        # The player cannot pass; a stuck player loses
        print("White has no moves.")
        return False
    return session.request_move(move.from_pos, move.to_pos)


def choose_carry_over(session: GameSession, autoplay: bool) -> list:
    candidates = [p for p in session.board.pieces(PLAYER_COLOR) if p.piece_type != PieceType.KING]
    candidates.sort(key=lambda p: -p.captures)
    if autoplay or not candidates:
        return candidates[:MAX_CARRIED_PIECES]

    print(f"Choose up to {MAX_CARRIED_PIECES} pieces to carry over:")
    for i, p in enumerate(candidates):
        print(f"  {i + 1}. {p.piece_type.value} {display_name(p.name) or ''} ({p.captures} captures)")
    inp = input("Numbers separated by spaces: ").split()
    chosen = []
    for tok in inp:
        if tok.isdigit() and 1 <= int(tok) <= len(candidates):
            chosen.append(candidates[int(tok) - 1])
    return chosen[:MAX_CARRIED_PIECES]


def play_game(session: GameSession, autoplay: bool = False, max_levels: int = 10,
              max_moves: int = 500, quiet: bool = False):
    """Play until game over, the level cap, or the move cap."""
    bot = CaptureFirstPlayer(rng=session.rng) if autoplay else None
    session.new_game()
    seen = None
    moves = 0

    while moves < max_moves:
        if not quiet:
            seen = print_new_events(session, seen)

        if session.state.game_over:
            break
        if session.state.level_complete:
            if session.level >= max_levels:
                break
            session.carry_over(choose_carry_over(session, autoplay))
            continue

        if session.is_player_turn:
            if not quiet:
                display_state(session)
            ok = bot_turn(session, bot) if autoplay else human_turn(session)
            if not ok:
                break
            moves += 1
        else:
            session.play_ai_turns()

    if not quiet:
        print_new_events(session, seen)
        display_state(session)
    return session.level, session.state.game_over, moves


def main():
    parser = argparse.ArgumentParser(description="Play Chess Crawl")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML engine config (default: configs/default.yaml)")
    parser.add_argument("--seed", type=int, default=None, help="Override the config seed")
    parser.add_argument("--autoplay", action="store_true", help="Let a bot play white")
    parser.add_argument("--max-levels", type=int, default=10)
    parser.add_argument("--max-moves", type=int, default=500)
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper()),
                        format="%(asctime)s [%(name)s] %(message)s")

    config = load_config(args.config)
    if args.seed is not None:
        config.session.seed = args.seed

    session = GameSession(config)
    level, lost, moves = play_game(session, autoplay=args.autoplay,
                                   max_levels=args.max_levels, max_moves=args.max_moves)
    print(f"Reached level {level} after {moves} player moves" + (" (game over)" if lost else ""))


if __name__ == "__main__":
    main()
