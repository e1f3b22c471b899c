"""
Pool Sampling

Draws a bounded, randomized pool of candidates for a category without
scanning the whole collection.

The expensive part, reading a working set from storage, happens at most once
per category per cache TTL: a uniform anchor in [0, 1) is drawn and the
working set is the run of candidates whose random key follows it, wrapping to
the start of the key ordering when the anchor lands near the end. Every call,
cached or not, hands out a freshly shuffled slice of that working set, so
successive requests inside one TTL window still see different pools.
"""

from __future__ import annotations

import logging
import random

from arena.core.configs import MatchmakingConfig
from arena.core.types import PoolEntry
from arena.matchmaking.cache import WorkingSetCache
from arena.storage.protocols import CandidateSource

logger = logging.getLogger(__name__)


class PoolSampler:
    """
    Produces pools of up to `config.pool_size` candidates per category.

    Args:
        source: Storage read in random-key order
        cache: Working-set cache (shared process-wide in production)
        config: Pool and working-set sizes
        rng: Source of randomness for anchors and shuffles

    Example:
        >>> sampler = PoolSampler(source, WorkingSetCache(ttl_seconds=60), rng=random.Random(1))
        >>> pool = sampler.sample("overall")
        >>> len(pool) <= sampler.config.pool_size
        True
    """

    def __init__(
        self,
        source: CandidateSource,
        cache: WorkingSetCache,
        config: MatchmakingConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.source = source
        self.cache = cache
        self.config = config or MatchmakingConfig()
        self.rng = rng or random.Random()

    def sample(self, category: str, size: int | None = None) -> list[PoolEntry]:
        """
        Get a shuffled pool for a category.

        Args:
            category: Ranking category
            size: Pool size override (defaults to config.pool_size)

        Returns:
            Up to `size` distinct candidates. Fewer than two means the
            category does not have enough eligible candidates.
        """
        size = size or self.config.pool_size

        working_set = self.cache.get(category)
        if working_set is None:
            working_set = self.fetch_working_set(category)
            if working_set:
                self.cache.put(category, working_set)

        shuffled = list(working_set)
        self.rng.shuffle(shuffled)
        return shuffled[:size]

    def fetch_working_set(self, category: str) -> list[PoolEntry]:
        """Read a working set starting at a fresh random anchor."""
        target = self.config.working_set_size
        anchor = self.rng.random()

        entries = list(self.source.fetch_slice(category, anchor, target))

        # Wrap around if the anchor was near the end of the keyspace
        if len(entries) < target:
            remaining = target - len(entries)
            seen = {e.id for e in entries}
            for entry in self.source.fetch_slice(category, 0.0, remaining):
                if entry.id not in seen:
                    seen.add(entry.id)
                    entries.append(entry)

        logger.info(
            f"Fetched working set for {category}: {len(entries)} candidates "
            f"(anchor={anchor:.4f}, target={target})"
        )
        return entries
