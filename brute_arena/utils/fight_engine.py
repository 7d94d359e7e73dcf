"""Deterministic fight engine.

`simulate_fight` resolves two BruteSnapshots into EffectiveCombatants and runs
a `FightSimulation`: a small state machine (NOT_STARTED -> IN_PROGRESS ->
CONCLUDED) that plays discrete turns until one fighter drops to 0 HP or the
turn cap is reached. All randomness goes through the fight's own
`SeededRandom`, always in the same call order, so `replay(outcome)` rebuilds
the exact same step list from the stored seed.

Turn structure:
    1. status ticks (poison) for each fighter, in turn order
    2. turn order: initiative descending, ties go to slot 0
    3. each fighter acts: trapped fighters lose the action, everybody else
       picks one eligible action with a single weighted draw
    4. the fight ends on the first step that leaves a fighter at 0 HP

Turn cap: the winner is the fighter with the higher remaining HP fraction,
then higher absolute HP, then higher initiative, then slot 0.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Any, Dict, List, Mapping, Optional, Tuple

from brute_arena.config import Settings
from brute_arena.utils.effects import resolve_active
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.game_data import GameData, load_game_data
from brute_arena.utils.logger import get_logger
from brute_arena.utils.models import (
    BruteSnapshot,
    EffectiveCombatant,
    FightModifier,
    FightOutcome,
    FightStep,
    PetProfile,
    StepKind,
    WeaponProfile,
)
from brute_arena.utils.rng import MAX_SEED, SeededRandom
from brute_arena.utils.stats import calculate_combatant, parse_modifiers

logger = get_logger("brute_arena.fight_engine")


class FightState(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    CONCLUDED = "concluded"


@dataclass
class Status:
    turns: int
    damage: int = 0
    source: int = -1


@dataclass
class Fighter:
    """Mutable per-fight state of one combatant. Never outlives its fight."""

    profile: EffectiveCombatant
    hp: int
    sheathed: List[WeaponProfile]
    uses: List[int]
    survival: int
    weapon: Optional[WeaponProfile] = None
    statuses: Dict[str, Status] = field(default_factory=dict)

    @classmethod
    def from_profile(cls, profile: EffectiveCombatant) -> "Fighter":
        return cls(
            profile=profile,
            hp=profile.max_hp,
            sheathed=list(profile.weapons),
            uses=[a.effect.uses for a in profile.actives],
            survival=profile.survival,
        )

    @property
    def slot(self) -> int:
        return self.profile.slot

    @property
    def max_hp(self) -> int:
        return self.profile.max_hp

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def hp_ratio(self) -> Fraction:
        return Fraction(self.hp, self.max_hp)


class _FightOver(Exception):
    """Unwinds the turn loop as soon as a fighter drops to 0 HP."""


def _check_probability(c: EffectiveCombatant, name: str) -> None:
    value = getattr(c, name)
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{c.name}: {name} must be within [0, 1], got {value}")


class FightSimulation:
    """One fight between two EffectiveCombatants. Run it exactly once."""

    def __init__(
        self,
        combatant_a: EffectiveCombatant,
        combatant_b: EffectiveCombatant,
        seed: int,
        modifiers: Optional[Mapping[Any, Any]] = None,
        *,
        game_data: Optional[GameData] = None,
        max_turns: Optional[int] = None,
        tournament: bool = False,
    ):
        self.game_data = game_data or load_game_data()
        self.modifiers = parse_modifiers(modifiers)
        self.max_turns = Settings.FIGHT_MAX_TURNS if max_turns is None else max_turns
        self.tournament = tournament
        self.seed = seed
        self._validate(combatant_a, combatant_b)

        self.profiles: Tuple[EffectiveCombatant, EffectiveCombatant] = (
            combatant_a.model_copy(update={"slot": 0}),
            combatant_b.model_copy(update={"slot": 1}),
        )
        self.rng = SeededRandom(seed)
        self.state = FightState.NOT_STARTED
        self.fighters: Tuple[Fighter, ...] = ()
        self.steps: List[FightStep] = []
        self.turn = 0
        self.winner: Optional[int] = None
        self.loser: Optional[int] = None
        self.timed_out = False
        self.background = ""
        self._draw_mark = 0

    def _validate(self, a: EffectiveCombatant, b: EffectiveCombatant) -> None:
        if isinstance(self.seed, bool) or not isinstance(self.seed, int) or not 0 <= self.seed < MAX_SEED:
            raise ConfigurationError(f"seed must be an integer in [0, 2**64), got {self.seed!r}")
        if self.max_turns < 1:
            raise ConfigurationError("max_turns must be >= 1")
        if a.brute_id == b.brute_id:
            raise ConfigurationError(f"brute {a.brute_id!r} cannot fight itself")
        for c in (a, b):
            if c.max_hp <= 0:
                raise ConfigurationError(f"{c.name}: max HP must be positive")
            if c.initiative < 0 or c.strength < 0:
                raise ConfigurationError(f"{c.name}: stats must be non-negative")
            for name in ("accuracy", "evasion", "block", "counter", "combo", "armor"):
                _check_probability(c, name)
            if not 0.0 < c.damage_cap <= 1.0:
                raise ConfigurationError(f"{c.name}: damage_cap must be within (0, 1]")
            for w in c.weapons:
                if w.damage < 0 or not 0.0 <= w.disarm <= 1.0:
                    raise ConfigurationError(f"{c.name}: weapon {w.name!r} has invalid damage or disarm")
            for p in c.pets:
                if p.weight < 0 or not 0 <= p.min_damage <= p.max_damage:
                    raise ConfigurationError(f"{c.name}: pet {p.name!r} has invalid damage range or weight")

    # ------------------------------------------------------------------ #
    # Main loop
    # ------------------------------------------------------------------ #
    def run(self) -> FightOutcome:
        if self.state is not FightState.NOT_STARTED:
            raise ConfigurationError("a FightSimulation can only run once")
        self.state = FightState.IN_PROGRESS
        self.fighters = tuple(Fighter.from_profile(p) for p in self.profiles)
        logger.debug(
            "Fight start seed=%s %s vs %s (max_turns=%s, modifiers=%s)",
            self.seed, self.profiles[0].name, self.profiles[1].name,
            self.max_turns, sorted(m.value for m in self.modifiers),
        )

        self.background = self._pick_background()
        try:
            self._prepare()
            for turn in range(1, self.max_turns + 1):
                self.turn = turn
                self._play_turn()
            self._resolve_timeout()
        except _FightOver:
            pass
        self.state = FightState.CONCLUDED

        outcome = FightOutcome(
            seed=self.seed,
            winner=self.winner,
            loser=self.loser,
            turns=self.turn,
            max_turns=self.max_turns,
            timed_out=self.timed_out,
            tournament=self.tournament,
            background=self.background,
            modifiers=tuple(sorted(m.value for m in self.modifiers)),
            fighters=self.profiles,
            steps=tuple(self.steps),
        )
        logger.debug(
            "Fight seed=%s concluded: winner=%s turns=%s steps=%s timed_out=%s",
            self.seed, outcome.winner_id, outcome.turns, len(outcome.steps), outcome.timed_out,
        )
        return outcome

    def _pick_background(self) -> str:
        if self.tournament:
            return self.game_data.tournament_background
        backgrounds = [b for b in self.game_data.backgrounds if b.odds > 0]
        if not backgrounds:
            return ""
        return self.rng.weighted_pick([b.name for b in backgrounds], [b.odds for b in backgrounds])

    def _prepare(self) -> None:
        if FightModifier.START_WITH_WEAPON in self.modifiers:
            for f in self.fighters:
                if f.sheathed:
                    self._draw_weapon(f)

    def _play_turn(self) -> None:
        order = self.turn_order()
        for f in order:
            self._tick_statuses(f)
        for f in order:
            self._act(f, self.opponent(f))

    def turn_order(self) -> List[Fighter]:
        return sorted(self.fighters, key=lambda f: (-f.profile.initiative, f.slot))

    def opponent(self, f: Fighter) -> Fighter:
        return self.fighters[1 - f.slot]

    def _resolve_timeout(self) -> None:
        winner = max(
            self.fighters,
            key=lambda f: (f.hp_ratio, f.hp, f.profile.initiative, -f.slot),
        )
        loser = self.opponent(winner)
        self.timed_out = True
        self.winner, self.loser = winner.slot, loser.slot
        self.emit(StepKind.TIMEOUT, winner, loser, value=self.turn)

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #
    def _act(self, f: Fighter, opp: Fighter) -> None:
        trapped = f.statuses.get("trapped")
        if trapped is not None:
            self.emit(StepKind.TRAPPED, f, None, value=trapped.turns, ref="trapped")
            trapped.turns -= 1
            if trapped.turns <= 0:
                del f.statuses["trapped"]
                self.emit(StepKind.STATUS_EXPIRE, f, None, ref="trapped")
            return

        kind, payload = self._choose_action(f)
        if kind == "draw":
            self._draw_weapon(f)
            self.strike(f, opp)
        elif kind == "skill":
            skill = f.profile.actives[payload]
            f.uses[payload] -= 1
            target = f if skill.effect.kind == "heal" else opp
            self.emit(StepKind.SKILL, f, target, value=f.uses[payload], ref=skill.name)
            resolve_active(self, f, opp, skill)
        elif kind == "pet":
            self._pet_attack(f, opp, payload)
        else:
            self.strike(f, opp)

    def _choose_action(self, f: Fighter) -> Tuple[str, Any]:
        weights_cfg = self.game_data.actions
        supers = [
            i for i, a in enumerate(f.profile.actives)
            if f.uses[i] > 0 and a.effect.weight > 0 and f.hp_ratio <= Fraction(a.effect.hp_below)
        ]
        force_supers = bool(supers) and FightModifier.ALWAYS_USE_SUPERS in self.modifiers

        options: List[Tuple[str, Any]] = [("attack", None)]
        weights: List[int] = [0 if force_supers else weights_cfg.attack]

        first_turn_bare = FightModifier.BARE_HANDS_FIRST_HIT in self.modifiers and self.turn == 1
        if f.sheathed and not first_turn_bare:
            options.append(("draw", None))
            draw_weight = weights_cfg.draw_bare if f.weapon is None else weights_cfg.draw_armed
            weights.append(0 if force_supers else draw_weight)

        for i in supers:
            options.append(("skill", i))
            weights.append(f.profile.actives[i].effect.weight)

        for pet in f.profile.pets:
            if pet.weight > 0:
                options.append(("pet", pet))
                weights.append(pet.weight)

        return self.rng.weighted_pick(options, weights)

    def _draw_weapon(self, f: Fighter) -> None:
        weapon = f.sheathed.pop(self.rng.next(len(f.sheathed)))
        f.weapon = weapon
        self.emit(StepKind.EQUIP, f, None, value=weapon.damage, ref=weapon.name)

    def _wielded(self, f: Fighter) -> Optional[WeaponProfile]:
        if FightModifier.BARE_HANDS_FIRST_HIT in self.modifiers and self.turn <= 1:
            return None
        return f.weapon

    def strike(
        self,
        attacker: Fighter,
        defender: Fighter,
        multiplier: float = 1.0,
        unavoidable: bool = False,
        ref: Optional[str] = None,
        combo: bool = True,
        counter: bool = True,
    ) -> None:
        """One attack, followed by combo strikes while the combo rolls succeed."""
        limits = self.game_data.limits
        chain = 0
        while True:
            weapon = self._wielded(attacker)
            label = ref if ref is not None else (weapon.name if weapon else "")
            if not unavoidable:
                accuracy = attacker.profile.accuracy + (weapon.accuracy if weapon else 0.0)
                if self.rng.chance(defender.profile.evasion - accuracy):
                    self.emit(StepKind.EVADE, attacker, defender, ref=label)
                    self._maybe_counter(defender, attacker, counter)
                    return
                if defender.profile.block > 0 and self.rng.chance(defender.profile.block):
                    self.emit(StepKind.BLOCK, attacker, defender, ref=label)
                    self._maybe_counter(defender, attacker, counter)
                    return

            damage = self.compute_damage(attacker, defender, weapon, multiplier)
            self.deal_damage(attacker, defender, damage, label)

            if weapon is not None and weapon.disarm > 0 and defender.weapon is not None:
                if self.rng.chance(weapon.disarm):
                    lost = defender.weapon
                    defender.weapon = None
                    self.emit(StepKind.DISARM, attacker, defender, ref=lost.name)

            if not combo or chain >= limits.max_combo_chain:
                return
            combo_chance = min(limits.max_combo, attacker.profile.combo + (weapon.combo if weapon else 0.0))
            if not self.rng.chance(combo_chance):
                return
            chain += 1
            multiplier = 1.0

    def _maybe_counter(self, defender: Fighter, attacker: Fighter, allowed: bool) -> None:
        if not allowed or defender.profile.counter <= 0:
            return
        if self.rng.chance(defender.profile.counter):
            self.emit(StepKind.COUNTER, defender, attacker)
            self.strike(defender, attacker, combo=False, counter=False)

    def _pet_attack(self, owner: Fighter, opp: Fighter, pet: PetProfile) -> None:
        if self.rng.chance(opp.profile.evasion - pet.accuracy):
            self.emit(StepKind.EVADE, owner, opp, ref=pet.name)
            return
        if opp.profile.block > 0 and self.rng.chance(opp.profile.block):
            self.emit(StepKind.BLOCK, owner, opp, ref=pet.name)
            return
        raw = self.rng.next_range(pet.min_damage, pet.max_damage)
        self.deal_damage(owner, opp, self.mitigate(opp, raw), pet.name, kind=StepKind.PET_ATTACK)

    # ------------------------------------------------------------------ #
    # State changes (also used by the effect resolvers)
    # ------------------------------------------------------------------ #
    def compute_damage(self, attacker: Fighter, defender: Fighter,
                       weapon: Optional[WeaponProfile], multiplier: float = 1.0) -> int:
        base = weapon.damage if weapon is not None else self.game_data.bare_hands_damage
        strength = attacker.profile.strength
        spread = 0.8 + self.rng.next_float() * 0.4
        raw = (base + strength * (0.2 + base * 0.05)) * spread * multiplier
        return self.mitigate(defender, raw)

    def mitigate(self, defender: Fighter, raw: float) -> int:
        return max(1, int(math.floor(raw * (1 - defender.profile.armor))))

    def deal_damage(self, source: Fighter, target: Fighter, amount: int, ref: str,
                    kind: StepKind = StepKind.HIT) -> int:
        amount = max(0, int(amount))
        cap = max(1, int(target.max_hp * target.profile.damage_cap))
        amount = min(amount, cap)

        if amount >= target.hp and target.survival > 0 and target.hp > 1:
            target.survival -= 1
            amount = target.hp - 1
            target.hp = 1
            self.emit(kind, source, target, value=amount, ref=ref)
            self.emit(StepKind.SURVIVE, target, None, value=target.hp, ref="survival")
            return amount

        target.hp = max(0, target.hp - amount)
        self.emit(kind, source, target, value=amount, ref=ref)
        if target.hp == 0:
            self._conclude(self.opponent(target), target)
        return amount

    def heal(self, f: Fighter, amount: int, ref: str) -> int:
        healed = max(0, min(int(amount), f.max_hp - f.hp))
        f.hp += healed
        self.emit(StepKind.HEAL, f, f, value=healed, ref=ref)
        return healed

    def apply_status(self, source: Fighter, target: Fighter, status: str, turns: int, damage: int = 0) -> None:
        target.statuses[status] = Status(turns=turns, damage=damage, source=source.slot)
        self.emit(StepKind.STATUS_APPLY, source, target, value=turns, ref=status)

    def clear_statuses(self, f: Fighter) -> None:
        for name in sorted(f.statuses):
            del f.statuses[name]
            self.emit(StepKind.STATUS_EXPIRE, f, None, ref=name)

    def _tick_statuses(self, f: Fighter) -> None:
        status = f.statuses.get("poisoned")
        if status is None:
            return
        self.deal_damage(self.fighters[status.source], f, status.damage, "poisoned",
                         kind=StepKind.STATUS_TICK)
        status.turns -= 1
        if status.turns <= 0:
            del f.statuses["poisoned"]
            self.emit(StepKind.STATUS_EXPIRE, f, None, ref="poisoned")

    def _conclude(self, winner: Fighter, loser: Fighter) -> None:
        self.winner, self.loser = winner.slot, loser.slot
        self.emit(StepKind.DEATH, loser, None, value=0)
        raise _FightOver()

    def emit(self, kind: StepKind, actor: Fighter, target: Optional[Fighter],
             value: int = 0, ref: str = "") -> FightStep:
        subject = target if target is not None else actor
        draws = self.rng.draws - self._draw_mark
        self._draw_mark = self.rng.draws
        step = FightStep(
            turn=self.turn,
            kind=kind,
            actor=actor.slot,
            target=target.slot if target is not None else -1,
            value=int(value),
            ref=ref,
            hp=subject.hp,
            draws=draws,
        )
        self.steps.append(step)
        return step


def run_fight(
    combatant_a: EffectiveCombatant,
    combatant_b: EffectiveCombatant,
    seed: int,
    modifiers: Optional[Mapping[Any, Any]] = None,
    *,
    game_data: Optional[GameData] = None,
    max_turns: Optional[int] = None,
    tournament: bool = False,
) -> FightOutcome:
    """Run a fight between already calculated combatants."""
    sim = FightSimulation(
        combatant_a, combatant_b, seed, modifiers,
        game_data=game_data, max_turns=max_turns, tournament=tournament,
    )
    return sim.run()


def simulate_fight(
    brute_a: BruteSnapshot,
    brute_b: BruteSnapshot,
    seed: int,
    modifiers: Optional[Mapping[Any, Any]] = None,
    *,
    game_data: Optional[GameData] = None,
    max_turns: Optional[int] = None,
    tournament: bool = False,
) -> FightOutcome:
    """Compute the full fight between two brute snapshots."""
    gd = game_data or load_game_data()
    a = calculate_combatant(brute_a, modifiers, gd, slot=0)
    b = calculate_combatant(brute_b, modifiers, gd, slot=1)
    return run_fight(a, b, seed, modifiers, game_data=gd, max_turns=max_turns, tournament=tournament)


def replay(outcome: FightOutcome, game_data: Optional[GameData] = None) -> FightOutcome:
    """Recompute a stored fight from its seed and combatants."""
    return run_fight(
        outcome.fighters[0],
        outcome.fighters[1],
        outcome.seed,
        {m: True for m in outcome.modifiers},
        game_data=game_data,
        max_turns=outcome.max_turns,
        tournament=outcome.tournament,
    )


def verify_replay(outcome: FightOutcome, game_data: Optional[GameData] = None) -> bool:
    return replay(outcome, game_data) == outcome
