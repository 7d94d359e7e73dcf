"""Run a demo fight between two generated brutes and print it turn by turn.

    python main.py --level-a 10 --level-b 8 --seed 42
"""
import argparse
import logging
from typing import List, Optional

from brute_arena.config import Settings
from brute_arena.utils.brute import generate_brute
from brute_arena.utils.fight_engine import simulate_fight
from brute_arena.utils.fight_logs import append_fight_log
from brute_arena.utils.fight_renderer import render_fight_frames
from brute_arena.utils.game_data import load_game_data
from brute_arena.utils.logger import get_logger
from brute_arena.utils.models import FightModifier, FightOutcome
from brute_arena.utils.rng import SeededRandom

logger = get_logger("brute_arena.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate a brute fight")
    parser.add_argument("--seed", type=int, default=42, help="fight seed")
    parser.add_argument("--name-a", default="Bruto")
    parser.add_argument("--name-b", default="Gorgo")
    parser.add_argument("--level-a", type=int, default=5)
    parser.add_argument("--level-b", type=int, default=5)
    parser.add_argument("--max-turns", type=int, default=None)
    parser.add_argument(
        "--modifier", action="append", default=[],
        choices=[m.value for m in FightModifier], help="enable a fight modifier (repeatable)",
    )
    parser.add_argument("--save", action="store_true", help="append the fight to the archive")
    parser.add_argument("--debug", action="store_true")
    return parser


def run_demo(args: argparse.Namespace) -> FightOutcome:
    gd = load_game_data()
    # brutes are generated from their own streams so the fight seed only drives the fight
    brute_a = generate_brute(args.name_a, args.level_a, SeededRandom(args.seed + 1), "a", gd)
    brute_b = generate_brute(args.name_b, args.level_b, SeededRandom(args.seed + 2), "b", gd)
    return simulate_fight(
        brute_a, brute_b, args.seed, {m: True for m in args.modifier},
        game_data=gd, max_turns=args.max_turns,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("brute_arena"):
                logging.getLogger(name).setLevel(logging.DEBUG)

    problems = Settings().validate()
    if problems:
        for p in problems:
            logger.error("Invalid setting: %s", p)
        return 2

    outcome = run_demo(args)
    for frame in render_fight_frames(outcome):
        print(frame)
    if args.save:
        fid = append_fight_log(outcome)
        logger.info("Saved fight %s", fid)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
