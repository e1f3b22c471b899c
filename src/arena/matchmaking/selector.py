"""
Weighted Pair Selection

Picks one pair from a sampled pool, avoiding pairs the voter saw recently.
Each call draws one of three heuristics:

- similar rating (60%): rating gap within the similarity threshold
- upset potential (25%): wider gaps, where an upset is plausible but uncertain
- exposure contrast (15%): heavily battled candidates against rarely battled ones

If nothing the heuristic produced survives the voter's exclusion set, the
selector scans every pool pair in random order, and as a last resort returns
any two distinct candidates.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum
from itertools import combinations

from arena.core.configs import MatchmakingConfig
from arena.core.types import PoolEntry, pair_key
from arena.rating.elo import rating_difference

logger = logging.getLogger(__name__)

Pair = tuple[PoolEntry, PoolEntry]


class Strategy(str, Enum):
    SIMILAR_RATING = "similar_rating"
    UPSET_POTENTIAL = "upset_potential"
    EXPOSURE_CONTRAST = "exposure_contrast"
    RANDOM_FALLBACK = "random_fallback"
    LAST_RESORT = "last_resort"


@dataclass
class PairSelection:
    """A selected pair and how it was chosen."""

    first: PoolEntry
    second: PoolEntry
    strategy: Strategy
    key: str  # Canonical pair identity, as recorded in voter history


class PairSelector:
    """
    Chooses matchups from a pool with weighted heuristics.

    Args:
        config: Strategy weights, thresholds and band
        rng: Source of randomness for the strategy draw and tie-breaking
    """

    def __init__(
        self,
        config: MatchmakingConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or MatchmakingConfig()
        self.rng = rng or random.Random()

    def draw_strategy(self) -> Strategy:
        """Draw a heuristic according to the configured weights."""
        roll = self.rng.random()
        if roll < self.config.similar_weight:
            return Strategy.SIMILAR_RATING
        if roll < self.config.similar_weight + self.config.upset_weight:
            return Strategy.UPSET_POTENTIAL
        return Strategy.EXPOSURE_CONTRAST

    def select(
        self,
        pool: list[PoolEntry],
        category: str,
        excluded: Collection[str] = (),
        strategy: Strategy | None = None,
    ) -> PairSelection | None:
        """
        Select a pair the voter has not seen recently.

        Args:
            pool: Sampled candidates
            category: Category the pool was sampled from
            excluded: Pair keys to avoid (the voter's recent history)
            strategy: Force a heuristic instead of drawing one

        Returns:
            The selection, or None if the pool has fewer than 2 distinct candidates
        """
        pool = _distinct(pool)
        if len(pool) < 2:
            return None

        excluded = set(excluded)
        strategy = strategy or self.draw_strategy()
        candidates = self.candidate_pairs(pool, strategy)

        valid = [
            (a, b) for a, b in candidates
            if pair_key(category, a.id, b.id) not in excluded
        ]

        if not valid:
            return self._fallback_pair(pool, category, excluded)

        a, b = self.rng.choice(valid)
        return PairSelection(a, b, strategy, pair_key(category, a.id, b.id))

    def candidate_pairs(self, pool: list[PoolEntry], strategy: Strategy) -> list[Pair]:
        """Enumerate the pairs a heuristic considers."""
        if strategy == Strategy.SIMILAR_RATING:
            return self.similar_rating_pairs(pool)
        if strategy == Strategy.UPSET_POTENTIAL:
            return self.upset_potential_pairs(pool)
        if strategy == Strategy.EXPOSURE_CONTRAST:
            return self.exposure_contrast_pairs(pool)
        raise ValueError(f"Not a weighted strategy: {strategy}")

    def similar_rating_pairs(self, pool: list[PoolEntry]) -> list[Pair]:
        """Find pairs with similar ratings."""
        threshold = self.config.similar_threshold
        return [
            (a, b) for a, b in combinations(pool, 2)
            if rating_difference(a.rating, b.rating) <= threshold
        ]

    def upset_potential_pairs(self, pool: list[PoolEntry]) -> list[Pair]:
        """Find pairs whose rating gap falls in the upset band."""
        low, high = self.config.upset_min_gap, self.config.upset_max_gap
        return [
            (a, b) for a, b in combinations(pool, 2)
            if low <= rating_difference(a.rating, b.rating) <= high
        ]

    def exposure_contrast_pairs(self, pool: list[PoolEntry]) -> list[Pair]:
        """Pair the most-battled third of the pool with the least-battled third."""
        ordered = sorted(pool, key=lambda e: e.battles, reverse=True)
        third = len(ordered) // 3
        top, bottom = ordered[:third], ordered[len(ordered) - third:]
        return [(a, b) for a in top for b in bottom]

    def _fallback_pair(
        self,
        pool: list[PoolEntry],
        category: str,
        excluded: set[str],
    ) -> PairSelection:
        """Unweighted scan in random order, then any two distinct candidates."""
        shuffled = list(pool)
        self.rng.shuffle(shuffled)

        for a, b in combinations(shuffled, 2):
            key = pair_key(category, a.id, b.id)
            if key not in excluded:
                return PairSelection(a, b, Strategy.RANDOM_FALLBACK, key)

        logger.debug(f"Pool of {len(pool)} exhausted against voter history in {category}")
        a, b = shuffled[0], shuffled[1]
        return PairSelection(a, b, Strategy.LAST_RESORT, pair_key(category, a.id, b.id))


def _distinct(pool: list[PoolEntry]) -> list[PoolEntry]:
    seen: set[str] = set()
    distinct = []
    for entry in pool:
        if entry.id not in seen:
            seen.add(entry.id)
            distinct.append(entry)
    return distinct
