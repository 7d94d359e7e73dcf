"""Render a FightOutcome into sequential text frames for debugging.

The renderer is independent of any UI and returns a list of short English
strings, one per fight step, plus a closing summary line.
"""
from __future__ import annotations

from typing import Callable, Dict, List

from brute_arena.utils.models import FightOutcome, FightStep, StepKind

_Names = List[str]


def _with(ref: str) -> str:
    return f" with {ref}" if ref else ""


_FORMATS: Dict[StepKind, Callable[[FightStep, _Names], str]] = {
    StepKind.EQUIP: lambda s, n: f"{n[s.actor]} draws {s.ref}",
    StepKind.HIT: lambda s, n: f"{n[s.actor]} hits {n[s.target]}{_with(s.ref)} for {s.value} dmg ({n[s.target]} HP: {s.hp})",
    StepKind.EVADE: lambda s, n: f"{n[s.target]} evades {n[s.actor]}{_with(s.ref)}",
    StepKind.BLOCK: lambda s, n: f"{n[s.target]} blocks {n[s.actor]}{_with(s.ref)}",
    StepKind.COUNTER: lambda s, n: f"{n[s.actor]} counters {n[s.target]}",
    StepKind.SKILL: lambda s, n: f"{n[s.actor]} uses {s.ref} ({s.value} left)",
    StepKind.HEAL: lambda s, n: f"{n[s.actor]} heals {s.value} HP (HP: {s.hp})",
    StepKind.STATUS_APPLY: lambda s, n: f"{n[s.target]} is {s.ref} for {s.value} turns",
    StepKind.STATUS_TICK: lambda s, n: f"{n[s.target]} suffers {s.value} dmg from {s.ref} (HP: {s.hp})",
    StepKind.STATUS_EXPIRE: lambda s, n: f"{n[s.actor]} is no longer {s.ref}",
    StepKind.TRAPPED: lambda s, n: f"{n[s.actor]} is trapped and loses the turn",
    StepKind.PET_ATTACK: lambda s, n: f"{n[s.actor]}'s {s.ref} bites {n[s.target]} for {s.value} dmg ({n[s.target]} HP: {s.hp})",
    StepKind.DISARM: lambda s, n: f"{n[s.actor]} disarms {n[s.target]} of {s.ref}",
    StepKind.SURVIVE: lambda s, n: f"{n[s.actor]} refuses to fall (HP: {s.hp})",
    StepKind.DEATH: lambda s, n: f"{n[s.actor]} is knocked out",
    StepKind.TIMEOUT: lambda s, n: f"Time is up after {s.value} turns",
}


def render_fight_frames(outcome: FightOutcome) -> List[str]:
    names = [f.name for f in outcome.fighters]
    frames: List[str] = []
    for step in outcome.steps:
        frames.append(f"Turn {step.turn}: {_FORMATS[step.kind](step, names)}")
    if not frames:
        frames.append("No combat occurred.")
    frames.append(f"{names[outcome.winner]} wins against {names[outcome.loser]} in {outcome.turns} turns")
    return frames
