"""Skill, weapon and pet effect catalog.

Every effect is one variant of a closed, pydantic-discriminated union keyed
on `kind`. Passive variants (`stat`, `survive`, `damage_cap`) are folded into
the combatant by the stat calculator; active variants (`heal`, `strike`,
`barrage`, `afflict`) are resolved during a fight by the function registered
for their kind:

    @resolver("heal")
    def _resolve_heal(sim, actor, target, skill) -> None:
        ...

    resolve_active(sim, actor, target, skill)
"""
from __future__ import annotations

from typing import Annotated, Callable, Dict, Literal, Tuple, Union, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from brute_arena.utils.fight_engine import FightSimulation, Fighter


STAT_NAMES: Tuple[str, ...] = (
    "endurance",
    "strength",
    "agility",
    "speed",
)

# Integer stats are floored after modifiers; the rest are probabilities.
DERIVED_STATS: Tuple[str, ...] = (
    "hp",
    "initiative",
    "accuracy",
    "evasion",
    "block",
    "counter",
    "combo",
    "armor",
)

StatName = Literal[
    "endurance", "strength", "agility", "speed",
    "hp", "initiative", "accuracy", "evasion", "block", "counter", "combo", "armor",
]

StatusName = Literal["trapped", "poisoned"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Passive variants
# ---------------------------------------------------------------------------
class StatBonus(_Frozen):
    """Flat bonus added first, percent bonus multiplied afterwards."""

    kind: Literal["stat"] = "stat"
    stat: StatName
    flat: float = 0
    percent: float = 0


class Survive(_Frozen):
    """Leave the owner at 1 HP instead of dying, `charges` times per fight."""

    kind: Literal["survive"] = "survive"
    charges: int = Field(1, ge=1)


class DamageCap(_Frozen):
    """No single hit can remove more than `max_pct` of max HP."""

    kind: Literal["damage_cap"] = "damage_cap"
    max_pct: float = Field(..., gt=0, le=1)


# ---------------------------------------------------------------------------
# Active variants ("supers")
# ---------------------------------------------------------------------------
class _Active(_Frozen):
    uses: int = Field(1, ge=1)
    weight: int = Field(10, ge=0)
    # eligible while current_hp / max_hp <= hp_below
    hp_below: float = Field(1.0, gt=0, le=1)


class Heal(_Active):
    kind: Literal["heal"] = "heal"
    min_pct: float = Field(..., ge=0, le=1)
    max_pct: float = Field(..., ge=0, le=1)
    cure: bool = False


class Strike(_Active):
    kind: Literal["strike"] = "strike"
    multiplier: float = Field(2.0, gt=0)
    unavoidable: bool = False


class Barrage(_Active):
    kind: Literal["barrage"] = "barrage"
    min_damage: int = Field(..., ge=0)
    max_damage: int = Field(..., ge=0)


class Afflict(_Active):
    kind: Literal["afflict"] = "afflict"
    status: StatusName
    turns: int = Field(1, ge=1)
    damage: int = Field(0, ge=0)


ActiveEffect = Annotated[Union[Heal, Strike, Barrage, Afflict], Field(discriminator="kind")]
Effect = Annotated[
    Union[StatBonus, Survive, DamageCap, Heal, Strike, Barrage, Afflict],
    Field(discriminator="kind"),
]

ACTIVE_KINDS = ("heal", "strike", "barrage", "afflict")


class ActiveSkill(_Frozen):
    """An active effect bound to the skill that grants it."""

    name: str
    effect: ActiveEffect


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------
Resolver = Callable[["FightSimulation", "Fighter", "Fighter", ActiveSkill], None]
RESOLVERS: Dict[str, Resolver] = {}


def resolver(kind: str) -> Callable[[Resolver], Resolver]:
    def decorator(func: Resolver) -> Resolver:
        if kind in RESOLVERS:
            raise ValueError(f"resolver already registered for {kind!r}")
        RESOLVERS[kind] = func
        return func
    return decorator


def resolve_active(sim: "FightSimulation", actor: "Fighter", target: "Fighter", skill: ActiveSkill) -> None:
    RESOLVERS[skill.effect.kind](sim, actor, target, skill)


@resolver("heal")
def _resolve_heal(sim: "FightSimulation", actor: "Fighter", target: "Fighter", skill: ActiveSkill) -> None:
    eff = skill.effect
    low, high = min(eff.min_pct, eff.max_pct), max(eff.min_pct, eff.max_pct)
    pct = low + sim.rng.next_float() * (high - low)
    sim.heal(actor, int(actor.max_hp * pct), skill.name)
    if eff.cure:
        sim.clear_statuses(actor)


@resolver("strike")
def _resolve_strike(sim: "FightSimulation", actor: "Fighter", target: "Fighter", skill: ActiveSkill) -> None:
    eff = skill.effect
    sim.strike(actor, target, multiplier=eff.multiplier, unavoidable=eff.unavoidable,
               ref=skill.name, combo=False)


@resolver("barrage")
def _resolve_barrage(sim: "FightSimulation", actor: "Fighter", target: "Fighter", skill: ActiveSkill) -> None:
    eff = skill.effect
    low, high = min(eff.min_damage, eff.max_damage), max(eff.min_damage, eff.max_damage)
    raw = sim.rng.next_range(low, high)
    sim.deal_damage(actor, target, sim.mitigate(target, raw), skill.name)


@resolver("afflict")
def _resolve_afflict(sim: "FightSimulation", actor: "Fighter", target: "Fighter", skill: ActiveSkill) -> None:
    eff = skill.effect
    sim.apply_status(actor, target, eff.status, eff.turns, eff.damage)
