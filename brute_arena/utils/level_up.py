"""Level-up choice generation and the pure "apply one choice" transition.

Choices are drawn without replacement from the brute's eligible pool using
the static `odds` of each upgrade, so rare perks show up less often. The pool
is built in table order (skills, weapons, pets, stat boosts), which keeps the
draw sequence reproducible for a given seed.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from brute_arena.config import Settings
from brute_arena.utils.errors import ConfigurationError, ExhaustedOptionsError
from brute_arena.utils.game_data import GameData, load_game_data
from brute_arena.utils.logger import get_logger
from brute_arena.utils.models import BruteSnapshot, LevelUpChoice, LevelUpChoiceSet
from brute_arena.utils.rng import SeededRandom
from brute_arena.utils.stats import validate_snapshot

logger = get_logger("brute_arena.level_up")


def _perk_allowed(name: str, requires, excludes, owned: set, owned_excludes: set) -> bool:
    if name in owned:
        return False
    if any(r not in owned for r in requires):
        return False
    if any(e in owned for e in excludes):
        return False
    # exclusions hold in both directions
    return name not in owned_excludes


def eligible_upgrades(snapshot: BruteSnapshot, game_data: Optional[GameData] = None) -> List[Tuple[LevelUpChoice, int]]:
    """Return (choice, odds) pairs the brute may be offered, in table order."""
    gd = game_data or load_game_data()
    limits = gd.limits
    pool: List[Tuple[LevelUpChoice, int]] = []

    skills = set(snapshot.skills)
    skill_excludes = {e for n in skills if gd.skill(n) for e in gd.skill(n).excludes}
    for s in gd.skills:
        if s.odds > 0 and _perk_allowed(s.name, s.requires, s.excludes, skills, skill_excludes):
            pool.append((LevelUpChoice(kind="skill", name=s.name), s.odds))

    if len(snapshot.weapons) < limits.max_weapons:
        weapons = set(snapshot.weapons)
        for w in gd.weapons:
            if w.odds > 0 and w.name not in weapons:
                pool.append((LevelUpChoice(kind="weapon", name=w.name), w.odds))

    if len(snapshot.pets) < limits.max_pets:
        pets = set(snapshot.pets)
        pet_excludes = {e for n in pets if gd.pet(n) for e in gd.pet(n).excludes}
        for p in gd.pets:
            if p.odds > 0 and _perk_allowed(p.name, p.requires, p.excludes, pets, pet_excludes):
                pool.append((LevelUpChoice(kind="pet", name=p.name), p.odds))

    for boost in gd.stat_boosts:
        if boost.odds > 0:
            pool.append((LevelUpChoice(kind="stats", stats=boost.stats), boost.odds))

    # identical entries in the table collapse to the first one
    seen: Dict[tuple, bool] = {}
    unique: List[Tuple[LevelUpChoice, int]] = []
    for choice, odds in pool:
        if choice.key() in seen:
            continue
        seen[choice.key()] = True
        unique.append((choice, odds))
    return unique


def get_level_up_choices(
    snapshot: BruteSnapshot,
    rng: SeededRandom,
    game_data: Optional[GameData] = None,
    size: Optional[int] = None,
    required: bool = False,
) -> LevelUpChoiceSet:
    """Propose up to `size` mutually exclusive upgrades.

    A pool smaller than `size` yields every eligible upgrade. An empty pool
    raises ExhaustedOptionsError only when `required` is set.
    """
    gd = game_data or load_game_data()
    size = Settings.LEVEL_UP_CHOICES if size is None else size
    if size < 1:
        raise ConfigurationError("level-up choice set size must be >= 1")
    validate_snapshot(snapshot, gd)

    remaining = eligible_upgrades(snapshot, gd)
    if not remaining:
        if required:
            raise ExhaustedOptionsError(f"{snapshot.name} has no eligible upgrade at level {snapshot.level}")
        logger.debug("No eligible upgrades for %s", snapshot.name)
        return ()

    chosen: List[LevelUpChoice] = []
    while remaining and len(chosen) < size:
        idx = rng.weighted_pick(range(len(remaining)), [odds for _, odds in remaining])
        choice, _ = remaining.pop(idx)
        chosen.append(choice)
    return tuple(chosen)


def apply_level_up(
    snapshot: BruteSnapshot,
    choice: LevelUpChoice,
    game_data: Optional[GameData] = None,
) -> BruteSnapshot:
    """Return a new snapshot one level higher with `choice` applied."""
    gd = game_data or load_game_data()
    validate_snapshot(snapshot, gd)
    eligible = {c.key() for c, _ in eligible_upgrades(snapshot, gd)}
    if choice.key() not in eligible:
        raise ConfigurationError(f"upgrade {choice.key()} is not available to {snapshot.name}")

    update: Dict[str, object] = {"level": snapshot.level + 1}
    if choice.kind == "skill":
        update["skills"] = snapshot.skills + (choice.name,)
    elif choice.kind == "weapon":
        update["weapons"] = snapshot.weapons + (choice.name,)
    elif choice.kind == "pet":
        update["pets"] = snapshot.pets + (choice.name,)
    else:
        for stat, amount in choice.stats:
            update[stat] = int(update.get(stat, getattr(snapshot, stat))) + amount
    return snapshot.model_copy(update=update)
