import pytest

from brute_arena.utils import fight_pool
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.fight_engine import simulate_fight
from brute_arena.utils.models import BruteSnapshot


def _requests(n):
    a = BruteSnapshot(id="a", name="A", strength=4)
    b = BruteSnapshot(id="b", name="B", agility=4)
    return [fight_pool.FightRequest(a, b, seed) for seed in range(n)]


@pytest.mark.asyncio
async def test_results_keep_request_order():
    reqs = _requests(8)
    results = await fight_pool.simulate_many(reqs, max_concurrency=3)
    assert [r.seed for r in results] == list(range(8))
    for req, out in zip(reqs, results):
        assert out == simulate_fight(req.brute_a, req.brute_b, req.seed)


@pytest.mark.asyncio
async def test_tournament_and_modifiers_pass_through():
    a = BruteSnapshot(id="a", name="A", weapons=("knife",))
    b = BruteSnapshot(id="b", name="B")
    req = fight_pool.FightRequest(a, b, 11, {"start_with_weapon": True}, tournament=True)
    (out,) = await fight_pool.simulate_many([req])
    assert out.tournament
    assert out.modifiers == ("start_with_weapon",)


@pytest.mark.asyncio
async def test_empty_batch():
    assert await fight_pool.simulate_many([]) == []


@pytest.mark.asyncio
async def test_invalid_concurrency():
    with pytest.raises(ConfigurationError):
        await fight_pool.simulate_many(_requests(1), max_concurrency=0)


@pytest.mark.asyncio
async def test_errors_propagate():
    a = BruteSnapshot(id="a", name="A")
    with pytest.raises(ConfigurationError):
        await fight_pool.simulate_many([fight_pool.FightRequest(a, a, 1)])
