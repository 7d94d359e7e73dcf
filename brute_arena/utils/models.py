"""Pydantic models for brute_arena domain objects.

All models are frozen: a snapshot, a resolved combatant or a finished fight
never changes after construction. Collections are tuples so that equality
and hashing stay structural, which the replay and round-trip checks rely on.
"""
from __future__ import annotations

from enum import Enum, IntEnum
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from brute_arena.utils.effects import ActiveSkill


class FightModifier(str, Enum):
    """Global game modifiers. A missing key in a modifier mapping means "off"."""

    DOUBLE_FIGHTS = "double_fights"
    DOUBLE_AGILITY = "double_agility"
    ALWAYS_USE_SUPERS = "always_use_supers"
    START_WITH_WEAPON = "start_with_weapon"
    BARE_HANDS_FIRST_HIT = "bare_hands_first_hit"


class StepKind(IntEnum):
    """Kinds of fight steps. Values are part of the binary encoding."""

    EQUIP = 0
    HIT = 1
    EVADE = 2
    BLOCK = 3
    COUNTER = 4
    SKILL = 5
    HEAL = 6
    STATUS_APPLY = 7
    STATUS_TICK = 8
    STATUS_EXPIRE = 9
    TRAPPED = 10
    PET_ATTACK = 11
    DISARM = 12
    SURVIVE = 13
    DEATH = 14
    TIMEOUT = 15


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class BruteSnapshot(_Frozen):
    """Immutable fight input loaded by the caller from its own storage.

    `skills` order is the activation priority. Invariants (non-negative
    stats, no duplicates, capacity) are checked by the stat calculator.
    """

    id: str
    name: str
    level: int = 1
    endurance: int = 2
    strength: int = 2
    agility: int = 2
    speed: int = 2
    skills: Tuple[str, ...] = ()
    weapons: Tuple[str, ...] = ()
    pets: Tuple[str, ...] = ()
    event_id: Optional[str] = None


class WeaponProfile(_Frozen):
    name: str
    damage: int = Field(..., ge=0)
    accuracy: float = 0.0
    combo: float = 0.0
    disarm: float = Field(0.0, ge=0, le=1)
    types: Tuple[str, ...] = ()


class PetProfile(_Frozen):
    name: str
    min_damage: int = Field(..., ge=0)
    max_damage: int = Field(..., ge=0)
    accuracy: float = 0.0
    weight: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _check_damage_range(self) -> "PetProfile":
        if self.min_damage > self.max_damage:
            raise ValueError(f"{self.name}: min_damage exceeds max_damage")
        return self


class EffectiveCombatant(_Frozen):
    """Fully resolved stats of one brute, as fed to the simulator."""

    brute_id: str
    name: str
    level: int
    slot: int = 0
    max_hp: int
    endurance: int
    strength: int
    agility: int
    speed: int
    initiative: int
    accuracy: float
    evasion: float
    block: float
    counter: float
    combo: float
    armor: float
    damage_cap: float = 1.0
    survival: int = 0
    weapons: Tuple[WeaponProfile, ...] = ()
    pets: Tuple[PetProfile, ...] = ()
    actives: Tuple[ActiveSkill, ...] = ()


class FightStep(_Frozen):
    turn: int
    kind: StepKind
    actor: int
    target: int = -1
    value: int = 0
    ref: str = ""
    # HP of the target (or of the actor when there is no target) after the step
    hp: int = 0
    # RNG draws consumed since the previous step
    draws: int = 0


class FightOutcome(_Frozen):
    seed: int
    winner: int = Field(..., ge=0, le=1)
    loser: int = Field(..., ge=0, le=1)
    turns: int
    max_turns: int
    timed_out: bool = False
    tournament: bool = False
    background: str = ""
    modifiers: Tuple[str, ...] = ()
    fighters: Tuple[EffectiveCombatant, EffectiveCombatant]
    steps: Tuple[FightStep, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_slots(self) -> "FightOutcome":
        if self.winner == self.loser:
            raise ValueError("winner and loser must be different slots")
        return self

    @property
    def winner_id(self) -> str:
        return self.fighters[self.winner].brute_id

    @property
    def loser_id(self) -> str:
        return self.fighters[self.loser].brute_id


ChoiceKind = Literal["skill", "weapon", "pet", "stats"]


class LevelUpChoice(_Frozen):
    """One proposed upgrade: a perk (`name`) or stat boosts (`stats`)."""

    kind: ChoiceKind
    name: Optional[str] = None
    stats: Tuple[Tuple[str, int], ...] = ()

    def key(self) -> tuple:
        return (self.kind, self.name, self.stats)


LevelUpChoiceSet = Tuple[LevelUpChoice, ...]
