import pytest

from brute_arena.utils import level_up
from brute_arena.utils.errors import ConfigurationError, ExhaustedOptionsError
from brute_arena.utils.game_data import load_game_data, parse_game_data
from brute_arena.utils.models import BruteSnapshot, LevelUpChoice
from brute_arena.utils.rng import SeededRandom


def _brute(**kw):
    return BruteSnapshot(id="b1", name="Bruto", **kw)


def _offered(snapshot, kind):
    return {c.name for c, _ in level_up.eligible_upgrades(snapshot) if c.kind == kind}


def test_choice_set_is_unique_and_unowned():
    owned = _brute(skills=("shield", "sixthSense"), weapons=("knife",), pets=("dog1",))
    for seed in range(200):
        choices = level_up.get_level_up_choices(owned, SeededRandom(seed), size=3)
        assert len(choices) == 3
        assert len({c.key() for c in choices}) == 3
        for c in choices:
            assert c.name not in owned.skills + owned.weapons + owned.pets


def test_default_size():
    choices = level_up.get_level_up_choices(_brute(), SeededRandom(1))
    assert len(choices) == 2


def test_deterministic_choices():
    a = level_up.get_level_up_choices(_brute(), SeededRandom(42), size=4)
    b = level_up.get_level_up_choices(_brute(), SeededRandom(42), size=4)
    assert a == b


def test_exclusions_hold_both_ways():
    assert "hammer" not in _offered(_brute(skills=("fierceBrute",)), "skill")
    assert "fierceBrute" not in _offered(_brute(skills=("hammer",)), "skill")
    assert "bear" not in _offered(_brute(pets=("panther",)), "pet")
    assert "panther" not in _offered(_brute(pets=("bear",)), "pet")


def test_requirements():
    assert "counterAttack" not in _offered(_brute(), "skill")
    assert "counterAttack" in _offered(_brute(skills=("sixthSense",)), "skill")
    assert _offered(_brute(), "pet") == {"dog1", "panther", "bear"}
    assert "dog2" in _offered(_brute(pets=("dog1",)), "pet")


def test_capacity():
    full = _brute(weapons=("knife", "fan", "leek", "sai"))
    assert _offered(full, "weapon") == set()
    assert _offered(_brute(pets=("dog1", "dog2", "dog3")), "pet") == set()


def _tiny_data(**extra):
    raw = {"version": 1, "skills": [{"name": "onlySkill", "odds": 3}]}
    raw.update(extra)
    return parse_game_data(raw)


def test_one_eligible_returns_one():
    gd = _tiny_data()
    choices = level_up.get_level_up_choices(_brute(), SeededRandom(3), gd, size=2)
    assert choices == (LevelUpChoice(kind="skill", name="onlySkill"),)


def test_empty_pool():
    gd = _tiny_data()
    owned = _brute(skills=("onlySkill",))
    assert level_up.get_level_up_choices(owned, SeededRandom(3), gd) == ()
    with pytest.raises(ExhaustedOptionsError):
        level_up.get_level_up_choices(owned, SeededRandom(3), gd, required=True)


def test_invalid_size():
    with pytest.raises(ConfigurationError):
        level_up.get_level_up_choices(_brute(), SeededRandom(1), size=0)


def test_apply_skill_and_stats():
    start = _brute()
    after = level_up.apply_level_up(start, LevelUpChoice(kind="skill", name="shield"))
    assert after.level == 2
    assert after.skills == ("shield",)
    assert start.skills == () and start.level == 1

    boost = LevelUpChoice(kind="stats", stats=(("strength", 2), ("agility", 1)))
    after = level_up.apply_level_up(after, boost)
    assert after.level == 3
    assert (after.strength, after.agility) == (4, 3)


def test_apply_weapon_and_pet():
    after = level_up.apply_level_up(_brute(), LevelUpChoice(kind="weapon", name="axe"))
    after = level_up.apply_level_up(after, LevelUpChoice(kind="pet", name="dog1"))
    assert after.weapons == ("axe",)
    assert after.pets == ("dog1",)


@pytest.mark.parametrize("choice", [
    LevelUpChoice(kind="skill", name="counterAttack"),
    LevelUpChoice(kind="skill", name="shield"),
    LevelUpChoice(kind="pet", name="dog3"),
    LevelUpChoice(kind="stats", stats=(("strength", 9),)),
])
def test_apply_ineligible(choice):
    with pytest.raises(ConfigurationError):
        level_up.apply_level_up(_brute(skills=("shield",)), choice)


def test_stat_boost_table_loaded():
    pool = level_up.eligible_upgrades(_brute(), load_game_data())
    boosts = [c for c, _ in pool if c.kind == "stats"]
    assert len(boosts) == 16
