"""Stat calculator: BruteSnapshot + modifiers -> EffectiveCombatant.

Order of application, per stat:
    1. base value (or the derived base for hp and probabilities)
    2. + flat bonuses (skills in snapshot order, then weapons, then pets)
    3. * (1 + sum of percent bonuses / 100), global modifiers included
    4. floor (integer stats) and clamp to [0, ceiling]

Percent bonuses are summed before being applied once, so the result does not
depend on the order in which perks were acquired.
"""
from __future__ import annotations

import math
from collections import defaultdict
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from brute_arena.utils.effects import ActiveSkill, DamageCap, StatBonus, Survive
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.game_data import GameData, load_game_data
from brute_arena.utils.models import (
    BruteSnapshot,
    EffectiveCombatant,
    FightModifier,
    PetProfile,
    WeaponProfile,
)

BASE_EVASION = 0.05
EVASION_PER_AGILITY = 0.01
BASE_COMBO = 0.05
COMBO_PER_AGILITY = 0.005


def parse_modifiers(modifiers: Optional[Mapping[Any, Any]]) -> FrozenSet[FightModifier]:
    """Return the set of active modifiers; falsy values count as absent."""
    if not modifiers:
        return frozenset()
    active = set()
    for key, value in modifiers.items():
        try:
            mod = FightModifier(key)
        except ValueError:
            raise ConfigurationError(f"unknown fight modifier {key!r}") from None
        if value:
            active.add(mod)
    return frozenset(active)


def max_hp_for(level: int, endurance: int) -> int:
    return int(math.floor(50 + (endurance + level * 0.25) * 6))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _check_unique(label: str, names) -> None:
    seen = set()
    for n in names:
        if n in seen:
            raise ConfigurationError(f"duplicate {label} {n!r}")
        seen.add(n)


def validate_snapshot(snapshot: BruteSnapshot, game_data: GameData) -> None:
    """Raise ConfigurationError when the snapshot breaks a brute invariant."""
    if snapshot.level < 1:
        raise ConfigurationError(f"{snapshot.name}: level must be >= 1")
    for stat in ("endurance", "strength", "agility", "speed"):
        if getattr(snapshot, stat) < 0:
            raise ConfigurationError(f"{snapshot.name}: {stat} must be non-negative")

    _check_unique("skill", snapshot.skills)
    _check_unique("weapon", snapshot.weapons)
    _check_unique("pet", snapshot.pets)

    limits = game_data.limits
    if len(snapshot.weapons) > limits.max_weapons:
        raise ConfigurationError(
            f"{snapshot.name}: {len(snapshot.weapons)} weapons exceeds capacity {limits.max_weapons}"
        )
    if len(snapshot.pets) > limits.max_pets:
        raise ConfigurationError(
            f"{snapshot.name}: {len(snapshot.pets)} pets exceeds capacity {limits.max_pets}"
        )

    for name in snapshot.weapons:
        if game_data.weapon(name) is None:
            raise ConfigurationError(f"unknown weapon {name!r}")

    for label, owned, lookup in (
        ("skill", snapshot.skills, game_data.skill),
        ("pet", snapshot.pets, game_data.pet),
    ):
        owned_set = set(owned)
        for name in owned:
            d = lookup(name)
            if d is None:
                raise ConfigurationError(f"unknown {label} {name!r}")
            missing = [r for r in d.requires if r not in owned_set]
            if missing:
                raise ConfigurationError(f"{label} {name!r} requires {missing}")
            clash = [e for e in d.excludes if e in owned_set]
            if clash:
                raise ConfigurationError(f"{label} {name!r} cannot be combined with {clash}")


def calculate_combatant(
    snapshot: BruteSnapshot,
    modifiers: Optional[Mapping[Any, Any]] = None,
    game_data: Optional[GameData] = None,
    slot: int = 0,
) -> EffectiveCombatant:
    """Resolve the effective combat stats of one brute."""
    gd = game_data or load_game_data()
    active_mods = parse_modifiers(modifiers)
    validate_snapshot(snapshot, gd)

    flat: Dict[str, float] = defaultdict(float)
    pct: Dict[str, float] = defaultdict(float)
    survival = 0
    damage_cap = 1.0
    actives: List[ActiveSkill] = []

    def collect(effects, owner: str) -> None:
        nonlocal survival, damage_cap
        for eff in effects:
            if isinstance(eff, StatBonus):
                flat[eff.stat] += eff.flat
                pct[eff.stat] += eff.percent
            elif isinstance(eff, Survive):
                survival += eff.charges
            elif isinstance(eff, DamageCap):
                damage_cap = min(damage_cap, eff.max_pct)
            else:
                actives.append(ActiveSkill(name=owner, effect=eff))

    for name in snapshot.skills:
        collect(gd.skill(name).effects, name)
    weapons = []
    for name in snapshot.weapons:
        w = gd.weapon(name)
        collect(w.effects, name)
        weapons.append(WeaponProfile(
            name=w.name, damage=w.damage, accuracy=w.accuracy,
            combo=w.combo, disarm=w.disarm, types=w.types,
        ))
    pets = []
    for name in snapshot.pets:
        p = gd.pet(name)
        collect(p.effects, name)
        pets.append(PetProfile(
            name=p.name, min_damage=min(p.min_damage, p.max_damage),
            max_damage=max(p.min_damage, p.max_damage), accuracy=p.accuracy, weight=p.weight,
        ))

    if FightModifier.DOUBLE_AGILITY in active_mods:
        pct["agility"] += 100

    def resolve(stat: str, base: float) -> float:
        return (base + flat[stat]) * (1 + pct[stat] / 100)

    def resolve_int(stat: str, base: float) -> int:
        return max(0, int(math.floor(resolve(stat, base))))

    endurance = resolve_int("endurance", snapshot.endurance)
    strength = resolve_int("strength", snapshot.strength)
    agility = resolve_int("agility", snapshot.agility)
    speed = resolve_int("speed", snapshot.speed)

    limits = gd.limits

    def resolve_prob(stat: str, base: float, ceiling: float) -> float:
        return round(_clamp(resolve(stat, base), 0.0, ceiling), 6)

    return EffectiveCombatant(
        brute_id=snapshot.id,
        name=snapshot.name,
        level=snapshot.level,
        slot=slot,
        max_hp=resolve_int("hp", max_hp_for(snapshot.level, endurance)),
        endurance=endurance,
        strength=strength,
        agility=agility,
        speed=speed,
        initiative=resolve_int("initiative", speed),
        accuracy=resolve_prob("accuracy", 0.0, limits.max_accuracy),
        evasion=resolve_prob("evasion", BASE_EVASION + agility * EVASION_PER_AGILITY, limits.max_evasion),
        block=resolve_prob("block", 0.0, limits.max_block),
        counter=resolve_prob("counter", 0.0, limits.max_counter),
        combo=resolve_prob("combo", BASE_COMBO + agility * COMBO_PER_AGILITY, limits.max_combo),
        armor=resolve_prob("armor", 0.0, limits.max_armor),
        damage_cap=damage_cap,
        survival=survival,
        weapons=tuple(weapons),
        pets=tuple(pets),
        actives=tuple(actives),
    )
