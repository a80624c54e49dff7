from __future__ import annotations

import argparse
import random
import sys
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from loguru import logger

from .config import config
from .game import Game, GameSetup, Participant
from .scheduler import ManualScheduler
from .strategy import available
from .types import Color, GameMode, ParticipantKind


@dataclass(slots=True)
class GameRecord:
    winner: Optional[Color]
    draw: bool
    turns: int
    truncated: bool


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play headless AI-only Ludo games")
    parser.add_argument("--games", type=int, default=100)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--mode", choices=[m.value for m in GameMode], default=GameMode.CLASSIC.value
    )
    parser.add_argument(
        "--strategies",
        type=str,
        default="aggressive,aggressive,aggressive,aggressive",
        help="Comma separated strategy per color in red,green,yellow,blue order",
    )
    parser.add_argument("--no-secondary-safe", action="store_true")
    parser.add_argument("--max-turns", type=int, default=config.MAX_TURNS)
    parser.add_argument("--log-level", type=str, default=config.LOG_LEVEL)
    return parser.parse_args(argv)


def build_setup(args: argparse.Namespace) -> GameSetup:
    names = [s.strip() for s in args.strategies.split(",") if s.strip()]
    unknown = [n for n in names if n.lower() not in available()]
    if unknown:
        raise SystemExit(f"Unknown strategies: {', '.join(unknown)}")
    participants = [
        Participant(color, ParticipantKind.AI, strategy=name)
        for color, name in zip(Color, names)
    ]
    return GameSetup(
        mode=GameMode(args.mode),
        participants=participants,
        turn_order=[p.color for p in participants],
        secondary_safe_points=not args.no_secondary_safe,
        turn_timer_seconds=0,
        ai_think_delay=0,
        require_human=False,
    )


def play_game(setup: GameSetup, rng: random.Random, max_turns: int) -> GameRecord:
    scheduler = ManualScheduler()
    game = Game(setup, scheduler=scheduler, rng=rng)
    game.start()
    turns = 0
    while not game.game_over and turns < max_turns:
        if not scheduler.run_next():
            break
        turns += 1
    truncated = not game.game_over
    summary = game.end_game()
    return GameRecord(
        winner=summary.winner, draw=summary.draw, turns=turns, truncated=truncated
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    rng = random.Random(args.seed)
    setup = build_setup(args)
    records: List[GameRecord] = []
    for idx in range(args.games):
        records.append(play_game(setup, rng, args.max_turns))
        logger.debug(f"Game {idx + 1}: {records[-1]}")

    colors = [p.color for p in setup.participants]
    winners = np.array(
        [int(r.winner) for r in records if r.winner is not None], dtype=np.int64
    )
    wins = np.bincount(winners, minlength=len(Color))
    turns = np.array([r.turns for r in records], dtype=np.float64)

    logger.info(f"Played {len(records)} {setup.mode.value} games")
    for color in colors:
        strategy = setup.participant(color).strategy
        rate = wins[int(color)] / max(len(records), 1)
        logger.info(f"{color.display_name:<7} ({strategy}): {wins[int(color)]} wins ({rate:.1%})")
    logger.info(f"Draws: {sum(r.draw for r in records)}, truncated: {sum(r.truncated for r in records)}")
    if turns.size:
        logger.info(f"Steps per game: mean {turns.mean():.1f}, std {turns.std():.1f}")


if __name__ == "__main__":
    main()
