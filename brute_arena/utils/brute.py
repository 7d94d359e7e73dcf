"""Brute rules around the simulator: starting stats, NPC generation, XP and
the daily fight allowance.

None of these decide when a fight happens; they only derive numbers the
request layer needs.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from brute_arena.config import Settings
from brute_arena.utils.effects import STAT_NAMES
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.game_data import GameData, load_game_data
from brute_arena.utils.level_up import apply_level_up, get_level_up_choices
from brute_arena.utils.models import BruteSnapshot, FightModifier, FightOutcome
from brute_arena.utils.rng import SeededRandom
from brute_arena.utils.stats import parse_modifiers

BASE_STAT = 2
RANDOM_STAT_POINTS = 3
XP_BASE = 5
WIN_XP = 2
LOSS_XP = 1


def create_random_stats(rng: SeededRandom, points: int = RANDOM_STAT_POINTS) -> Dict[str, int]:
    """Starting stats: every stat at BASE_STAT plus `points` random +1s."""
    stats = {name: BASE_STAT for name in STAT_NAMES}
    for _ in range(points):
        stats[STAT_NAMES[rng.next(len(STAT_NAMES))]] += 1
    return stats


def generate_brute(
    name: str,
    level: int,
    rng: SeededRandom,
    brute_id: Optional[str] = None,
    game_data: Optional[GameData] = None,
) -> BruteSnapshot:
    """Build a brute of the given level by replaying random level-ups.

    Each level draws a choice set and picks one entry at random; the same rng
    seed always yields the same brute.
    """
    if level < 1:
        raise ConfigurationError("Level must be at least 1")
    gd = game_data or load_game_data()

    snapshot = BruteSnapshot(id=brute_id or name, name=name, level=1, **create_random_stats(rng))
    for _ in range(1, level):
        choices = get_level_up_choices(snapshot, rng, gd, required=True)
        snapshot = apply_level_up(snapshot, choices[rng.next(len(choices))], gd)
    return snapshot


def max_fights_per_day(
    snapshot: BruteSnapshot,
    modifiers: Optional[Mapping[Any, Any]] = None,
    fights_per_day: Optional[int] = None,
    event_fights_per_day: Optional[int] = None,
) -> int:
    if snapshot.event_id:
        base = Settings.EVENT_FIGHTS_PER_DAY if event_fights_per_day is None else event_fights_per_day
    else:
        base = Settings.FIGHTS_PER_DAY if fights_per_day is None else fights_per_day

    if FightModifier.DOUBLE_FIGHTS in parse_modifiers(modifiers):
        base *= 2

    return base + 2 if "regeneration" in snapshot.skills else base


def xp_for_level(level: int, base: int = XP_BASE) -> int:
    """Total XP needed to reach `level`. Formula: xp = base * (level - 1)^2"""
    if level <= 1:
        return 0
    return base * ((level - 1) ** 2)


def level_from_xp(xp: int, base: int = XP_BASE) -> int:
    if xp <= 0:
        return 1
    return int(math.floor(math.sqrt(xp / base))) + 1


def fight_xp(outcome: FightOutcome, slot: int) -> int:
    if slot not in (0, 1):
        raise ConfigurationError(f"invalid fighter slot {slot}")
    return WIN_XP if slot == outcome.winner else LOSS_XP
