"""Static game data tables (skills, weapons, pets, upgrade weights, arenas).

The tables live in `brute_arena/data/game_data.yaml` (or the file named by
`GAME_DATA_PATH`). They are loaded once, validated with pydantic and cached;
after that they are read-only and safe to share between threads running
independent fights. `reload_game_data()` clears the cache for development.
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, model_validator

from brute_arena.config import Settings
from brute_arena.utils.effects import STAT_NAMES, Effect, StatBonus
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.logger import get_logger

logger = get_logger("brute_arena.game_data")

DEFAULT_PATH = Path(__file__).resolve().parents[1] / "data" / "game_data.yaml"

_lock = threading.Lock()
_CACHE: Dict[str, "GameData"] = {}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SkillDef(_Frozen):
    name: str
    odds: int = Field(0, ge=0)
    requires: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()
    effects: Tuple[Effect, ...] = ()


class WeaponDef(_Frozen):
    name: str
    odds: int = Field(0, ge=0)
    types: Tuple[str, ...] = ()
    damage: int = Field(..., ge=0)
    accuracy: float = 0.0
    combo: float = 0.0
    disarm: float = Field(0.0, ge=0, le=1)
    effects: Tuple[StatBonus, ...] = ()


class PetDef(_Frozen):
    name: str
    odds: int = Field(0, ge=0)
    min_damage: int = Field(..., ge=0)
    max_damage: int = Field(..., ge=0)
    accuracy: float = 0.0
    weight: int = Field(20, ge=0)
    requires: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()
    effects: Tuple[StatBonus, ...] = ()


class StatBoostDef(_Frozen):
    stats: Tuple[Tuple[str, int], ...]
    odds: int = Field(0, ge=0)


class Limits(_Frozen):
    max_weapons: int = Field(4, ge=0)
    max_pets: int = Field(3, ge=0)
    max_accuracy: float = 1.0
    max_evasion: float = 0.6
    max_block: float = 0.6
    max_counter: float = 0.6
    max_combo: float = 0.6
    max_armor: float = 0.75
    max_combo_chain: int = Field(3, ge=0)


class ActionWeights(_Frozen):
    attack: int = Field(50, ge=1)
    draw_bare: int = Field(40, ge=0)
    draw_armed: int = Field(10, ge=0)


class Background(_Frozen):
    name: str
    odds: int = Field(0, ge=0)


class GameData(_Frozen):
    """Validated, immutable game tables plus name indexes."""

    version: int
    bare_hands_damage: int = Field(5, ge=0)
    limits: Limits = Limits()
    actions: ActionWeights = ActionWeights()
    skills: Tuple[SkillDef, ...] = ()
    weapons: Tuple[WeaponDef, ...] = ()
    pets: Tuple[PetDef, ...] = ()
    stat_boosts: Tuple[StatBoostDef, ...] = ()
    backgrounds: Tuple[Background, ...] = ()
    tournament_background: str = ""

    _skills: Dict[str, SkillDef] = PrivateAttr(default_factory=dict)
    _weapons: Dict[str, WeaponDef] = PrivateAttr(default_factory=dict)
    _pets: Dict[str, PetDef] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_references(self) -> "GameData":
        _index("skill", self.skills)
        _index("weapon", self.weapons)
        _index("pet", self.pets)

        for coll in (self.skills, self.pets):
            known = {d.name for d in coll}
            for d in coll:
                for ref in d.requires + d.excludes:
                    if ref not in known:
                        raise ValueError(f"{d.name} references unknown perk {ref!r}")

        for boost in self.stat_boosts:
            if not boost.stats:
                raise ValueError("stat boost without stats")
            for stat, amount in boost.stats:
                if stat not in STAT_NAMES:
                    raise ValueError(f"stat boost targets unknown stat {stat!r}")
                if amount <= 0:
                    raise ValueError("stat boost amounts must be positive")
        return self

    def model_post_init(self, __context: Any) -> None:
        self._skills = {d.name: d for d in self.skills}
        self._weapons = {d.name: d for d in self.weapons}
        self._pets = {d.name: d for d in self.pets}

    def skill(self, name: str) -> Optional[SkillDef]:
        return self._skills.get(name)

    def weapon(self, name: str) -> Optional[WeaponDef]:
        return self._weapons.get(name)

    def pet(self, name: str) -> Optional[PetDef]:
        return self._pets.get(name)


def _index(label: str, defs) -> None:
    seen = set()
    for d in defs:
        if d.name in seen:
            raise ValueError(f"duplicate {label} {d.name!r}")
        seen.add(d.name)


def parse_game_data(raw: Any) -> GameData:
    """Validate a raw mapping (as loaded from YAML) into GameData."""
    if not isinstance(raw, dict) or not raw:
        raise ConfigurationError("game data must be a non-empty mapping")
    try:
        return GameData.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid game data: {exc}") from exc


def load_game_data(path: Optional[str] = None) -> GameData:
    """Load and cache game data.

    Resolution order: explicit `path`, then `Settings.GAME_DATA_PATH`, then
    the packaged default table.
    """
    target = Path(path or Settings.GAME_DATA_PATH or DEFAULT_PATH)
    key = str(target.resolve())
    cached = _CACHE.get(key)
    if cached is not None:
        return cached

    with _lock:
        cached = _CACHE.get(key)
        if cached is not None:
            return cached
        if not target.exists():
            raise ConfigurationError(f"game data file not found: {target}")
        try:
            raw = yaml.safe_load(target.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"game data file is not valid YAML: {target}") from exc
        data = parse_game_data(raw)
        _CACHE[key] = data
        logger.info(
            "Loaded game data v%s from %s (%d skills, %d weapons, %d pets)",
            data.version, target, len(data.skills), len(data.weapons), len(data.pets),
        )
        return data


def reload_game_data() -> None:
    """Clear cached tables so they will be reloaded on next access."""
    with _lock:
        _CACHE.clear()
