"""Compact binary and JSON encodings of a FightOutcome.

Binary layout (little endian):

    header   magic "BRF1", seed u64, winner u8, loser u8, turns u32,
             max_turns u32, flags u8, meta length u32, ref count u32
    meta     JSON document: background, modifiers, both fighters
    refs     ref count x (u16 length + utf-8 bytes); index 0 is ""
    steps    step count u32, then fixed 21-byte records:
             turn u32, kind u8, actor i8, target i8, value i32,
             ref index u16, hp i32, draws u32

Steps keep their order exactly; decode(encode(outcome)) == outcome.
"""
from __future__ import annotations

import struct
from typing import Dict, List, Tuple

from pydantic import BaseModel, ValidationError

from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.models import EffectiveCombatant, FightOutcome, FightStep, StepKind

MAGIC = b"BRF1"
HEADER = struct.Struct("<4sQBBIIBII")
REF_LEN = struct.Struct("<H")
COUNT = struct.Struct("<I")
STEP = struct.Struct("<IBbbiHiI")

FLAG_TIMED_OUT = 0x01
FLAG_TOURNAMENT = 0x02


class _Meta(BaseModel):
    background: str
    modifiers: Tuple[str, ...]
    fighters: Tuple[EffectiveCombatant, EffectiveCombatant]


def encode_outcome(outcome: FightOutcome) -> bytes:
    refs: List[str] = [""]
    ref_index: Dict[str, int] = {"": 0}
    for step in outcome.steps:
        if step.ref not in ref_index:
            ref_index[step.ref] = len(refs)
            refs.append(step.ref)
    if len(refs) > 0xFFFF:
        raise ConfigurationError("too many distinct step references to encode")

    meta = _Meta(
        background=outcome.background,
        modifiers=outcome.modifiers,
        fighters=outcome.fighters,
    ).model_dump_json().encode("utf-8")

    flags = 0
    if outcome.timed_out:
        flags |= FLAG_TIMED_OUT
    if outcome.tournament:
        flags |= FLAG_TOURNAMENT

    try:
        parts = [
            HEADER.pack(MAGIC, outcome.seed, outcome.winner, outcome.loser, outcome.turns,
                        outcome.max_turns, flags, len(meta), len(refs)),
            meta,
        ]
        for ref in refs:
            raw = ref.encode("utf-8")
            parts.append(REF_LEN.pack(len(raw)))
            parts.append(raw)
        parts.append(COUNT.pack(len(outcome.steps)))
        for step in outcome.steps:
            parts.append(STEP.pack(step.turn, int(step.kind), step.actor, step.target, step.value,
                                   ref_index[step.ref], step.hp, step.draws))
    except struct.error as exc:
        raise ConfigurationError(f"fight outcome cannot be encoded: {exc}") from exc
    return b"".join(parts)


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise ConfigurationError("truncated fight record")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def unpack(self, fmt: struct.Struct) -> tuple:
        return fmt.unpack(self.take(fmt.size))


def decode_outcome(data: bytes) -> FightOutcome:
    reader = _Reader(bytes(data))
    magic, seed, winner, loser, turns, max_turns, flags, meta_len, ref_count = reader.unpack(HEADER)
    if magic != MAGIC:
        raise ConfigurationError(f"not a fight record (magic {magic!r})")

    try:
        meta = _Meta.model_validate_json(reader.take(meta_len))
        refs = [reader.take(reader.unpack(REF_LEN)[0]).decode("utf-8") for _ in range(ref_count)]
        (count,) = reader.unpack(COUNT)
        steps = []
        for _ in range(count):
            turn, kind, actor, target, value, ref_idx, hp, draws = reader.unpack(STEP)
            steps.append(FightStep(
                turn=turn, kind=StepKind(kind), actor=actor, target=target,
                value=value, ref=refs[ref_idx], hp=hp, draws=draws,
            ))
        if reader.pos != len(reader.data):
            raise ConfigurationError("trailing bytes after fight record")
        return FightOutcome(
            seed=seed,
            winner=winner,
            loser=loser,
            turns=turns,
            max_turns=max_turns,
            timed_out=bool(flags & FLAG_TIMED_OUT),
            tournament=bool(flags & FLAG_TOURNAMENT),
            background=meta.background,
            modifiers=meta.modifiers,
            fighters=meta.fighters,
            steps=tuple(steps),
        )
    except (ValidationError, UnicodeDecodeError, ValueError, IndexError) as exc:
        raise ConfigurationError(f"corrupt fight record: {exc}") from exc


def outcome_to_json(outcome: FightOutcome) -> str:
    return outcome.model_dump_json()


def outcome_from_json(text: str) -> FightOutcome:
    try:
        return FightOutcome.model_validate_json(text)
    except ValidationError as exc:
        raise ConfigurationError(f"corrupt fight record: {exc}") from exc
