"""Core types, configuration and errors for the matchup engine."""

from arena.core.configs import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_RATING,
    EloConfig,
    MatchmakingConfig,
)
from arena.core.errors import (
    ArenaError,
    CandidateNotFoundError,
    ConflictError,
    DuplicateCandidateError,
    InsufficientCandidatesError,
    InvalidRequestError,
    InvalidWinnerError,
    MatchupAlreadyDecidedError,
    MatchupNotFoundError,
    NotFoundError,
    TransientConflictError,
)
from arena.core.types import PairKey, PoolEntry, VoteResult, pair_key

__all__ = [
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "DEFAULT_RATING",
    "EloConfig",
    "MatchmakingConfig",
    "PairKey",
    "PoolEntry",
    "VoteResult",
    "pair_key",
    "ArenaError",
    "InvalidRequestError",
    "NotFoundError",
    "MatchupNotFoundError",
    "CandidateNotFoundError",
    "ConflictError",
    "MatchupAlreadyDecidedError",
    "InvalidWinnerError",
    "DuplicateCandidateError",
    "InsufficientCandidatesError",
    "TransientConflictError",
]
