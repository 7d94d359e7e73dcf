import pytest

from brute_arena.utils import brute
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.fight_engine import simulate_fight
from brute_arena.utils.models import BruteSnapshot
from brute_arena.utils.rng import SeededRandom
from brute_arena.utils.stats import calculate_combatant


def test_random_stats():
    for seed in range(50):
        stats = brute.create_random_stats(SeededRandom(seed))
        assert set(stats) == {"endurance", "strength", "agility", "speed"}
        assert sum(stats.values()) == 11
        assert min(stats.values()) >= 2


def test_generate_brute_is_deterministic():
    a = brute.generate_brute("Bruto", 12, SeededRandom(5))
    b = brute.generate_brute("Bruto", 12, SeededRandom(5))
    assert a == b
    assert a.level == 12
    assert a.id == "Bruto"
    # a generated brute is always a valid fighter
    calculate_combatant(a)


def test_generate_brute_level_one():
    b = brute.generate_brute("Bruto", 1, SeededRandom(5), brute_id="npc-1")
    assert b.level == 1
    assert b.id == "npc-1"
    assert b.skills == () and b.weapons == () and b.pets == ()


def test_generate_brute_rejects_level_zero():
    with pytest.raises(ConfigurationError):
        brute.generate_brute("Bruto", 0, SeededRandom(5))


def test_fights_per_day():
    plain = BruteSnapshot(id="a", name="A")
    assert brute.max_fights_per_day(plain) == 6
    assert brute.max_fights_per_day(plain, {"double_fights": True}) == 12
    assert brute.max_fights_per_day(plain, fights_per_day=3) == 3

    event = BruteSnapshot(id="e", name="E", event_id="winter")
    assert brute.max_fights_per_day(event) == 10
    assert brute.max_fights_per_day(event, event_fights_per_day=4) == 4

    regen = BruteSnapshot(id="r", name="R", skills=("regeneration",))
    assert brute.max_fights_per_day(regen) == 8
    assert brute.max_fights_per_day(regen, {"double_fights": True}) == 14


def test_level_math():
    assert brute.xp_for_level(1) == 0
    assert brute.xp_for_level(2) == 5
    assert brute.xp_for_level(3) == 20
    assert brute.level_from_xp(0) == 1
    assert brute.level_from_xp(4) == 1
    assert brute.level_from_xp(5) == 2
    assert brute.level_from_xp(19) == 2
    assert brute.level_from_xp(20) == 3


def test_fight_xp():
    out = simulate_fight(BruteSnapshot(id="a", name="A"), BruteSnapshot(id="b", name="B"), 42)
    assert brute.fight_xp(out, out.winner) == 2
    assert brute.fight_xp(out, out.loser) == 1
    with pytest.raises(ConfigurationError):
        brute.fight_xp(out, 2)
