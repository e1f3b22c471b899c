"""Storage protocols and in-memory implementations."""

from arena.storage.protocols import (
    CandidateSource,
    HistoryStore,
    PoolEntry,
    push_recent,
)
from arena.storage.sample_provider import (
    SAMPLE_CANDIDATES,
    InMemoryHistoryStore,
    SampleCandidateSource,
    make_entries,
)

__all__ = [
    "CandidateSource",
    "HistoryStore",
    "PoolEntry",
    "push_recent",
    "SAMPLE_CANDIDATES",
    "SampleCandidateSource",
    "InMemoryHistoryStore",
    "make_entries",
]
