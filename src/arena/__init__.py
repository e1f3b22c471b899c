"""
Matchmaking and rating-update engine for head-to-head voting arenas.

This package provides the storage-agnostic core of a pairwise voting
system: Elo rating updates, fair random sampling of large candidate
collections and weighted pair selection with per-voter repeat avoidance.

Key capabilities:
- Compute Elo updates, upsets and expected scores
- Sample per-category pools from a cached working set without full scans
- Select pairs by similar rating, upset potential or exposure contrast
- Keep bounded per-voter histories of recently shown pairs

Example:
    >>> from arena import Matchmaker, PairSelector, PoolSampler, WorkingSetCache
    >>> from arena.storage import InMemoryHistoryStore, SampleCandidateSource
    >>> sampler = PoolSampler(SampleCandidateSource.from_samples(), WorkingSetCache())
    >>> matchmaker = Matchmaker(sampler, PairSelector(), InMemoryHistoryStore())
    >>> selection = matchmaker.next_pair("overall", "voter-123")
    >>> print(f"{selection.first.id} vs {selection.second.id} ({selection.strategy.value})")
"""

__version__ = "0.1.0"

from arena.core.types import PairKey, PoolEntry, VoteResult
from arena.matchmaking import Matchmaker, PairSelector, PoolSampler, WorkingSetCache
from arena.rating.elo import EloRatingSystem

__all__ = [
    "EloRatingSystem",
    "Matchmaker",
    "PairKey",
    "PairSelector",
    "PoolEntry",
    "PoolSampler",
    "VoteResult",
    "WorkingSetCache",
    "__version__",
]
