#!/usr/bin/env python3
"""Quick balance check for Chess Crawl: bot-vs-AI games over many seeds."""

import argparse
import logging
import os
import sys
import time
from collections import Counter

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chesscrawl.config import load_config
from chesscrawl.engine.session import GameSession
from scripts.play import play_game

logger = logging.getLogger("chesscrawl.simulate")


def run_simulation(num_games: int, config, max_levels: int, max_moves: int) -> dict:
    """Play num_games seeded autoplay games and collect outcomes."""
    levels = Counter()
    losses = 0
    lengths = []
    base_seed = config.session.seed or 0

    for i in range(num_games):
        game_config = config.model_copy(deep=True)
        game_config.session.seed = base_seed + i
        session = GameSession(game_config)
        level, lost, moves = play_game(session, autoplay=True, max_levels=max_levels,
                                       max_moves=max_moves, quiet=True)
        levels[level] += 1
        losses += int(lost)
        lengths.append(moves)
        if (i + 1) % 10 == 0:
            logger.info(f"  Game {i + 1}/{num_games}...")

    return {
        "num_games": num_games,
        "levels": dict(sorted(levels.items())),
        "losses": losses,
        "avg_moves": sum(lengths) / len(lengths) if lengths else 0.0,
    }


def main():
    parser = argparse.ArgumentParser(description="Simulate Chess Crawl games")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--num-games", type=int, default=50)
    parser.add_argument("--max-levels", type=int, default=10)
    parser.add_argument("--max-moves", type=int, default=500)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s [%(name)s] %(message)s")
    # Level setup chatter drowns the progress lines
    logging.getLogger("chesscrawl.generator").setLevel(logging.WARNING)
    logging.getLogger("chesscrawl.session").setLevel(logging.WARNING)

    config = load_config(args.config)
    start = time.time()
    results = run_simulation(args.num_games, config, args.max_levels, args.max_moves)
    elapsed = time.time() - start

    n = results["num_games"]
    print(f"\nResults ({n} games, max level {args.max_levels}):")
    for level, count in results["levels"].items():
        print(f"  Level {level}: {count} ({100 * count / n:.1f}%)")
    print(f"  Game overs: {results['losses']} ({100 * results['losses'] / n:.1f}%)")
    print(f"  Avg player moves: {results['avg_moves']:.1f}")
    print(f"  Time: {elapsed:.1f}s ({elapsed / n:.2f}s per game)")


if __name__ == "__main__":
    main()
