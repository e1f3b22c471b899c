"""Next-matchup orchestration: sample a pool, pick a pair, remember it."""

from __future__ import annotations

import logging
from collections.abc import Collection

from arena.core.configs import CATEGORIES
from arena.core.errors import InsufficientCandidatesError, InvalidRequestError
from arena.matchmaking.pool import PoolSampler
from arena.matchmaking.selector import PairSelection, PairSelector
from arena.storage.protocols import HistoryStore

logger = logging.getLogger(__name__)


class Matchmaker:
    """
    Produces the next pair for a voter.

    Example:
        >>> matchmaker = Matchmaker(sampler, PairSelector(), InMemoryHistoryStore())
        >>> selection = matchmaker.next_pair("overall", "voter-123")
        >>> selection.first.id != selection.second.id
        True
    """

    def __init__(
        self,
        sampler: PoolSampler,
        selector: PairSelector,
        history: HistoryStore,
        categories: Collection[str] = CATEGORIES,
    ) -> None:
        self.sampler = sampler
        self.selector = selector
        self.history = history
        self.categories = categories

    def validate(self, category: str, voter_id: str | None) -> None:
        """Reject unknown categories and missing voter ids."""
        if category not in self.categories:
            raise InvalidRequestError(
                f"Invalid category. Must be one of: {', '.join(self.categories)}"
            )
        if not voter_id or not voter_id.strip():
            raise InvalidRequestError("Voter ID is required")

    def select_pair(self, category: str, voter_id: str) -> PairSelection:
        """
        Select a pair the voter has not seen recently, without recording it.

        Raises:
            InvalidRequestError: Unknown category or missing voter id
            InsufficientCandidatesError: Fewer than 2 eligible candidates
        """
        self.validate(category, voter_id)

        pool = self.sampler.sample(category)
        if len(pool) < 2:
            logger.warning(f"Not enough candidates in category {category}")
            raise InsufficientCandidatesError(category, len(pool))

        recent = self.history.recent_pairs(voter_id)
        selection = self.selector.select(pool, category, recent)
        if selection is None:
            raise InsufficientCandidatesError(category, len(pool))
        return selection

    def next_pair(self, category: str, voter_id: str) -> PairSelection:
        """Select a pair for a voter and record it in their history."""
        selection = self.select_pair(category, voter_id)
        self.history.record_pair(voter_id, selection.key)
        return selection
