"""
Fairness Ranker
===============
Orders eligible candidates for one slot. Sort key, ascending:

    1. current duty score   (lower is owed more duty)
    2. duties in the trailing window
    3. tie-break            only reached when 1 and 2 are both equal
"""
import random
from typing import Any, Callable, Iterable, List, Optional

from dutyrota.models.config import EngineConfig, TieBreak
from dutyrota.models.person import Person

TieBreaker = Callable[[Person], Any]


def random_tie_breaker(rng: Optional[random.Random] = None) -> TieBreaker:
    """Uniform random key per candidate. Seed ``rng`` for reproducible runs."""
    source = rng or random.Random()
    return lambda person: source.random()


def id_tie_breaker() -> TieBreaker:
    """Deterministic key: lowest person ID first."""
    return lambda person: person.id


def make_tie_breaker(config: Optional[EngineConfig] = None) -> TieBreaker:
    """Build the tie-break strategy selected by the config."""
    config = config or EngineConfig()
    if config.tie_break == TieBreak.ID:
        return id_tie_breaker()
    return random_tie_breaker(random.Random(config.seed))


def rank_candidates(
    persons: Iterable[Person],
    score_of: Callable[[Person], float],
    recent_count_of: Callable[[Person], int],
    tie_break: Optional[TieBreaker] = None,
) -> List[Person]:
    """
    Return candidates in fairness order, best first.

    Args:
        persons: Eligible candidates
        score_of: Current running duty score of a person
        recent_count_of: Duties in the trailing window for a person
        tie_break: Key for exact ties (defaults to unseeded random)
    """
    tie_break = tie_break or random_tie_breaker()
    keyed = [
        ((score_of(p), recent_count_of(p), tie_break(p)), p)
        for p in persons
    ]
    keyed.sort(key=lambda item: item[0])
    return [p for _, p in keyed]
