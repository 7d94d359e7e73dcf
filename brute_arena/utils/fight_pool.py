"""Run many independent fights concurrently.

Each fight is pure CPU work with its own RNG, so fights are pushed to worker
threads with `asyncio.to_thread`; a semaphore bounds how many run at once.
The only shared object is the read-only game data, loaded before dispatch.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from brute_arena.config import Settings
from brute_arena.utils.errors import ConfigurationError
from brute_arena.utils.fight_engine import simulate_fight
from brute_arena.utils.game_data import GameData, load_game_data
from brute_arena.utils.logger import get_logger
from brute_arena.utils.models import BruteSnapshot, FightOutcome

logger = get_logger("brute_arena.fight_pool")


@dataclass(frozen=True)
class FightRequest:
    brute_a: BruteSnapshot
    brute_b: BruteSnapshot
    seed: int
    modifiers: Optional[Mapping[Any, Any]] = None
    tournament: bool = False


async def simulate_many(
    requests: Iterable[FightRequest],
    max_concurrency: Optional[int] = None,
    game_data: Optional[GameData] = None,
    max_turns: Optional[int] = None,
) -> List[FightOutcome]:
    """Simulate every request; results are returned in request order."""
    limit = Settings.SIMULATION_CONCURRENCY if max_concurrency is None else max_concurrency
    if limit < 1:
        raise ConfigurationError("max_concurrency must be >= 1")
    gd = game_data or load_game_data()
    reqs = list(requests)
    sem = asyncio.Semaphore(limit)

    async def _one(req: FightRequest) -> FightOutcome:
        async with sem:
            return await asyncio.to_thread(
                simulate_fight, req.brute_a, req.brute_b, req.seed, req.modifiers,
                game_data=gd, max_turns=max_turns, tournament=req.tournament,
            )

    logger.debug("Simulating %d fights (concurrency=%d)", len(reqs), limit)
    return list(await asyncio.gather(*(_one(r) for r in reqs)))
