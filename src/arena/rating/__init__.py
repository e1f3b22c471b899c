"""Rating computation."""

from arena.rating.elo import (
    EloRatingSystem,
    apply_outcome,
    expected_score,
    is_upset,
    rating_difference,
    upset_magnitude,
)

__all__ = [
    "EloRatingSystem",
    "apply_outcome",
    "expected_score",
    "is_upset",
    "rating_difference",
    "upset_magnitude",
]
