import argparse
import random
import time

import numpy as np
from loguru import logger

from ludo_race.config import config
from ludo_race.constants import Difficulty
from ludo_race.dice import Dice
from ludo_race.game import GameState, PlayerSpec
from ludo_race.logging_setup import configure_logging
from ludo_race.strategies.registry import AIController, available
from ludo_race.turn_manager import Pacing, TurnManager


def seed_environ(seed_value: int = None):
    random.seed(seed_value)
    np.random.seed(seed_value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate computer-only race games")
    parser.add_argument(
        "--players",
        nargs="+",
        default=["easy", "medium", "hard", "hard"],
        choices=available(),
        help="Difficulty of each seat, in turn order (2 to 4 seats)",
    )
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--max-turns", type=int, default=config.MAX_TURNS, help="Turn limit per game"
    )
    parser.add_argument("--log-level", type=str, default="INFO")
    return parser.parse_args()


def play_game(
    difficulties: list[str], rng: random.Random, max_turns: int
) -> TurnManager:
    specs = [
        PlayerSpec(
            name=f"{level.title()} {seat + 1}",
            is_ai=True,
            ai_difficulty=Difficulty.from_name(level),
        )
        for seat, level in enumerate(difficulties)
    ]
    state = GameState.new_game(specs)
    manager = TurnManager(
        state,
        dice=Dice(rng=rng),
        ai=AIController(rng=rng),
        pacing=Pacing(scale=0.0),
    )
    manager.run(max_turns=max_turns)
    return manager


def main() -> None:
    args = parse_args()
    configure_logging(args.log_level)
    seed_environ(args.seed)
    rng = random.Random(args.seed)

    if not 2 <= len(args.players) <= 4:
        raise SystemExit("between 2 and 4 seats are required")

    wins = {seat: 0 for seat in range(len(args.players))}
    start_time = time.time()
    for game_index in range(args.games):
        manager = play_game(args.players, rng, args.max_turns)
        state = manager.state
        if state.winner is None:
            logger.warning(f"game {game_index + 1}: no winner after {state.turn_number} turns")
            continue
        wins[state.winner.index] += 1
        logger.info(
            f"game {game_index + 1}: {state.winner.name} wins in {state.turn_number + 1} "
            f"turns ({len(state.move_history)} moves)"
        )
        stats = manager.dice.stats()
        logger.debug(f"dice average {stats['average']} over {stats['total']} rolls")

    elapsed = time.time() - start_time
    for seat, count in wins.items():
        logger.info(f"seat {seat + 1} ({args.players[seat]}): {count} wins")
    logger.info(f"{args.games} games in {elapsed:.2f}s")


if __name__ == "__main__":
    main()
