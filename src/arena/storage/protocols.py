"""
Storage Protocols (Abstract Interfaces)

Defines the abstract interfaces matchmaking needs from persistent storage,
so the sampler and selector work against any backend (SQL databases,
document stores, in-memory fixtures) without coupling to one.

In-memory implementations are provided in arena.storage.sample_provider;
the API server implements them on top of SQLAlchemy.

Example:
    >>> from arena.storage import CandidateSource, PoolEntry
    >>>
    >>> class MyDatabaseSource(CandidateSource):
    ...     def fetch_slice(self, category, start, limit):
    ...         rows = self.db.query(category=category, key_gte=start, limit=limit)
    ...         return [PoolEntry(id=r.id, rating=r.rating, random_key=r.key) for r in rows]
    ...
    >>> sampler = PoolSampler(MyDatabaseSource(db), WorkingSetCache())
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from arena.core.types import PoolEntry

# Re-export PoolEntry for convenience
__all__ = [
    "CandidateSource",
    "HistoryStore",
    "PoolEntry",
]


@runtime_checkable
class CandidateSource(Protocol):
    """
    Protocol for reading candidates of a category in random-key order.

    Every candidate carries a random key in [0, 1) assigned once at creation.
    Reading a contiguous run of that ordering from a random starting point
    yields a uniform sample without scanning the collection, provided the
    backend indexes (category, random_key).

    Example implementation for a SQLAlchemy database:

        class SQLCandidateSource:
            def __init__(self, session_factory):
                self.session_factory = session_factory

            def fetch_slice(self, category, start, limit):
                with self.session_factory() as session:
                    rows = (
                        session.query(CandidateRating)
                        .filter(CandidateRating.category == category)
                        .filter(CandidateRating.random_key >= start)
                        .order_by(CandidateRating.random_key)
                        .limit(limit)
                        .all()
                    )
                    return [to_pool_entry(row) for row in rows]
    """

    def fetch_slice(self, category: str, start: float, limit: int) -> list[PoolEntry]:
        """
        Fetch candidates of a category whose random key is >= start.

        Args:
            category: Ranking category
            start: Lower bound (inclusive) on the random key, in [0, 1)
            limit: Maximum number of candidates to return

        Returns:
            Up to `limit` entries, ordered by ascending random key
        """
        ...


@runtime_checkable
class HistoryStore(Protocol):
    """
    Protocol for per-voter anti-repeat history.

    Histories are bounded, most-recent-first lists of pair keys (see
    arena.core.types.PairKey). Implementations must apply `record_pair` as a
    single read-modify-write so concurrent requests from one voter cannot
    lose each other's entries.
    """

    def recent_pairs(self, voter_id: str) -> list[str]:
        """
        Get the recently shown pair keys for a voter.

        Args:
            voter_id: Opaque voter identifier

        Returns:
            Pair keys, most recent first; empty for unknown voters
        """
        ...

    def record_pair(self, voter_id: str, pair_key: str) -> None:
        """
        Record that a pair was shown to a voter.

        Creates the history if absent, otherwise prepends the key and drops
        the oldest entries beyond the cap.

        Args:
            voter_id: Opaque voter identifier
            pair_key: Canonical pair identity
        """
        ...


def push_recent(recent: list[str], pair_key: str, cap: int) -> list[str]:
    """Prepend a pair key and truncate to `cap`, oldest entries dropped."""
    return [pair_key, *recent][:cap]
