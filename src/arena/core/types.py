"""
Core data types for the matchup engine.

This module defines the primary data structures passed between the pool
sampler, the pair selector and the vote transaction.
"""

from dataclasses import dataclass, field
from typing import Any

from arena.core.configs import DEFAULT_RATING

PAIR_KEY_SEPARATOR = "|"


@dataclass
class PoolEntry:
    """
    A candidate as seen by matchmaking, scoped to one category.

    Pool entries are snapshots: the rating and battle count are whatever the
    store returned when the working set was fetched, and may be up to one
    cache TTL stale. Vote transactions never trust them; they re-read the
    authoritative rating.

    Attributes:
        id: Candidate identifier
        rating: Rating in the sampled category
        battles: Cumulative battles in the sampled category
        random_key: Sampling key in [0, 1), fixed at creation
        payload: Public attributes (name, image, ...) carried for the response

    Example:
        >>> entry = PoolEntry(id="cand_001", rating=1512, battles=3, random_key=0.42)
        >>> entry.rating
        1512
    """

    id: str
    rating: float = DEFAULT_RATING
    battles: int = 0
    random_key: float = 0.0
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PairKey:
    """
    Canonical identity of a shown pair: category plus sorted candidate ids.

    The string form ``"<category>|<first>|<second>"`` is what voter histories
    persist, so ``PairKey.of("overall", "b", "a")`` and
    ``PairKey.of("overall", "a", "b")`` compare and serialize identically.
    """

    category: str
    first: str
    second: str

    @classmethod
    def of(cls, category: str, id_a: str, id_b: str) -> "PairKey":
        """Build a key, ordering the ids."""
        first, second = sorted((id_a, id_b))
        return cls(category=category, first=first, second=second)

    @classmethod
    def parse(cls, value: str) -> "PairKey":
        """Parse the persisted string form."""
        parts = value.split(PAIR_KEY_SEPARATOR)
        if len(parts) != 3:
            raise ValueError(f"Malformed pair key: {value!r}")
        return cls.of(*parts)

    def __str__(self) -> str:
        return PAIR_KEY_SEPARATOR.join((self.category, self.first, self.second))


def pair_key(category: str, id_a: str, id_b: str) -> str:
    """Return the persisted string identity of a pair."""
    return str(PairKey.of(category, id_a, id_b))


@dataclass
class VoteResult:
    """Outcome of a successfully applied vote."""

    matchup_id: str
    category: str
    winner_id: str
    loser_id: str
    winner_rating_before: int
    loser_rating_before: int
    winner_new_rating: int
    loser_new_rating: int
    is_upset: bool

    @property
    def winner_delta(self) -> int:
        return self.winner_new_rating - self.winner_rating_before

    @property
    def loser_delta(self) -> int:
        return self.loser_new_rating - self.loser_rating_before
