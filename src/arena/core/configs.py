"""
Engine Configuration

Defines the tunable constants for rating updates and matchmaking.
Defaults mirror the production arena: K=24 Elo updates starting at 1500,
30-candidate pools drawn from a 200-candidate working set that is refreshed
every five minutes.

Two configuration objects are available:
- EloConfig: rating update parameters
- MatchmakingConfig: pool sizes, cache TTL and pair-selection heuristics
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EloConfig:
    """Configuration for the Elo rating system."""

    initial_rating: int = 1500
    k_factor: float = 24.0
    scale: float = 400.0  # Rating gap for 10:1 expected odds


@dataclass(frozen=True)
class MatchmakingConfig:
    """Configuration for pool sampling and pair selection."""

    pool_size: int = 30  # Candidates handed to the pair selector per request
    working_set_size: int = 200  # Candidates fetched and cached per category
    max_recent_pairs: int = 30  # Per-voter anti-repeat history cap

    # Strategy weights, drawn once per selection (must sum to 1)
    similar_weight: float = 0.60
    upset_weight: float = 0.25
    exposure_weight: float = 0.15

    similar_threshold: int = 100  # Max rating gap for "similar" pairs
    upset_min_gap: int = 100
    upset_max_gap: int = 300

    def __post_init__(self) -> None:
        total = self.similar_weight + self.upset_weight + self.exposure_weight
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Strategy weights must sum to 1, got {total}")
        if self.pool_size < 2:
            raise ValueError("pool_size must be at least 2")
        if self.working_set_size < self.pool_size:
            raise ValueError("working_set_size must be >= pool_size")


# Common constants
DEFAULT_RATING = EloConfig.initial_rating
ELO_K = EloConfig.k_factor

# Ranking categories (an item may belong to several, each with its own rating)
CATEGORIES = ["overall", "masculine", "feminine", "unisex"]
DEFAULT_CATEGORY = "overall"  # Every candidate belongs to this one
