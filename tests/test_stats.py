import pytest

from brute_arena.utils import stats
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.game_data import load_game_data
from brute_arena.utils.models import BruteSnapshot, FightModifier


def _brute(**kw):
    kw.setdefault("id", "b1")
    kw.setdefault("name", "Bruto")
    return BruteSnapshot(**kw)


def test_base_combatant():
    c = stats.calculate_combatant(_brute())
    assert c.max_hp == 63  # floor(50 + (2 + 0.25) * 6)
    assert (c.endurance, c.strength, c.agility, c.speed) == (2, 2, 2, 2)
    assert c.initiative == 2
    assert c.evasion == pytest.approx(0.07)
    assert c.combo == pytest.approx(0.06)
    assert c.block == 0 and c.counter == 0 and c.armor == 0
    assert c.damage_cap == 1.0
    assert c.survival == 0
    assert c.actives == () and c.weapons == () and c.pets == ()


def test_flat_then_percent():
    c = stats.calculate_combatant(_brute(skills=("herculeanStrength",)))
    assert c.strength == 7  # floor((2 + 3) * 1.5)


def test_percent_bonuses_do_not_depend_on_order():
    a = stats.calculate_combatant(_brute(skills=("vitality", "immortality")))
    b = stats.calculate_combatant(_brute(skills=("immortality", "vitality")))
    assert a.endurance == b.endurance == 20  # (2 + 3) * (1 + 0.5 + 2.5)
    assert a.max_hp == b.max_hp


def test_immortality_penalties():
    c = stats.calculate_combatant(_brute(skills=("immortality",)))
    assert c.endurance == 7
    assert c.strength == 1
    assert c.speed == 1


def test_double_agility_modifier():
    c = stats.calculate_combatant(_brute(), {FightModifier.DOUBLE_AGILITY: True})
    assert c.agility == 4
    assert c.evasion == pytest.approx(0.09)
    off = stats.calculate_combatant(_brute(), {"double_agility": False})
    assert off.agility == 2


def test_weapon_penalty_never_negative():
    c = stats.calculate_combatant(_brute(weapons=("morningStar",)))
    assert c.initiative == 0
    assert c.weapons[0].name == "morningStar"
    assert c.weapons[0].damage == 20


def test_passive_and_active_effects():
    c = stats.calculate_combatant(_brute(skills=("resistant", "survival", "fierceBrute", "bomb")))
    assert c.damage_cap == pytest.approx(0.2)
    assert c.survival == 1
    assert [a.name for a in c.actives] == ["fierceBrute", "bomb"]
    assert c.actives[0].effect.kind == "strike"
    assert c.actives[1].effect.uses == 2


def test_pet_profiles():
    c = stats.calculate_combatant(_brute(pets=("dog1", "dog2")))
    assert [p.name for p in c.pets] == ["dog1", "dog2"]
    assert c.pets[0].min_damage <= c.pets[0].max_damage


def test_probability_ceiling():
    c = stats.calculate_combatant(_brute(agility=500))
    assert c.evasion == load_game_data().limits.max_evasion


def test_unknown_modifier():
    with pytest.raises(ConfigurationError):
        stats.parse_modifiers({"quadruple_damage": True})


def test_parse_modifiers_drops_falsy():
    mods = stats.parse_modifiers({"double_fights": True, "start_with_weapon": False})
    assert mods == frozenset({FightModifier.DOUBLE_FIGHTS})
    assert stats.parse_modifiers(None) == frozenset()


@pytest.mark.parametrize("kw", [
    {"strength": -1},
    {"level": 0},
    {"skills": ("shield", "shield")},
    {"skills": ("noSuchSkill",)},
    {"skills": ("counterAttack",)},
    {"skills": ("fierceBrute", "hammer")},
    {"weapons": ("knife", "fan", "leek", "sai", "axe")},
    {"weapons": ("banana",)},
    {"pets": ("dog2",)},
    {"pets": ("panther", "bear")},
])
def test_invalid_snapshots(kw):
    with pytest.raises(ConfigurationError):
        stats.calculate_combatant(_brute(**kw))


def test_max_hp_formula():
    assert stats.max_hp_for(1, 2) == 63
    assert stats.max_hp_for(10, 10) == 125
