import pytest

from brute_arena.utils.rng import MAX_SEED, SeededRandom


def test_same_seed_same_stream():
    a = SeededRandom(12345)
    b = SeededRandom(12345)
    assert [a.next(1000) for _ in range(50)] == [b.next(1000) for _ in range(50)]
    assert a.state() == b.state()


def test_different_seeds_diverge():
    a = SeededRandom(1)
    b = SeededRandom(2)
    assert [a.next(1 << 30) for _ in range(10)] != [b.next(1 << 30) for _ in range(10)]


def test_known_stream_for_seed_42():
    # fixed values: a stored seed must replay the same fight in any process
    rng = SeededRandom(42)
    assert rng._next_u64() == 3553440125194606449
    assert rng._next_u64() == 16596424120282300683
    rng.reseed(42)
    assert [rng.next(2**32) for _ in range(5)] == [
        827349751, 3864156110, 685650391, 691029595, 4092126221,
    ]


def test_seed_zero_stream():
    rng = SeededRandom(0)
    assert [rng.next(2**32) for _ in range(3)] == [684725110, 3911857787, 4087720742]


def test_seed_zero_is_usable():
    rng = SeededRandom(0)
    values = [rng.next(1 << 32) for _ in range(10)]
    assert len(set(values)) > 1


def test_reseed_restarts_stream():
    rng = SeededRandom(99)
    first = [rng.next_float() for _ in range(5)]
    rng.reseed(99)
    assert rng.draws == 0
    assert [rng.next_float() for _ in range(5)] == first


@pytest.mark.parametrize("seed", [-1, MAX_SEED, 1.5, "7", True])
def test_invalid_seed(seed):
    with pytest.raises(ValueError):
        SeededRandom(seed)


def test_every_helper_uses_one_draw():
    rng = SeededRandom(7)
    rng.next(10)
    rng.next_float()
    rng.next_range(3, 9)
    rng.chance(0.5)
    rng.chance(0.0)
    rng.weighted_pick(["a", "b"], [1, 3])
    assert rng.draws == 6


def test_ranges():
    rng = SeededRandom(2024)
    for _ in range(500):
        assert 0 <= rng.next(6) < 6
        assert 0.0 <= rng.next_float() < 1.0
        assert 3 <= rng.next_range(3, 5) <= 5
    assert rng.next_range(4, 4) == 4


def test_chance_bounds():
    rng = SeededRandom(5)
    assert not any(rng.chance(0.0) for _ in range(200))
    assert not any(rng.chance(-1.0) for _ in range(200))
    assert all(rng.chance(1.0) for _ in range(200))


def test_weighted_pick_skips_zero_weight():
    rng = SeededRandom(31337)
    picks = {rng.weighted_pick(["never", "a", "b"], [0, 1, 1]) for _ in range(300)}
    assert picks == {"a", "b"}


@pytest.mark.parametrize("items,weights", [
    ([], []),
    (["a"], [1, 2]),
    (["a", "b"], [0, 0]),
    (["a"], [-1]),
    (["a"], [0.5]),
])
def test_weighted_pick_rejects_bad_input(items, weights):
    with pytest.raises(ValueError):
        SeededRandom(1).weighted_pick(items, weights)


def test_next_rejects_bad_bounds():
    rng = SeededRandom(1)
    with pytest.raises(ValueError):
        rng.next(0)
    with pytest.raises(ValueError):
        rng.next_range(5, 4)
