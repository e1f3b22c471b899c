"""Pool sampling and pair selection."""

from arena.matchmaking.cache import WorkingSetCache
from arena.matchmaking.matchmaker import Matchmaker
from arena.matchmaking.pool import PoolSampler
from arena.matchmaking.selector import PairSelection, PairSelector, Strategy

__all__ = [
    "WorkingSetCache",
    "PoolSampler",
    "PairSelector",
    "PairSelection",
    "Strategy",
    "Matchmaker",
]
