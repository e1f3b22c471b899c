"""
Elo Rating System

Standard logistic Elo with a single shared K-factor. Ratings are whole
numbers: every update is rounded half-up to the nearest integer before it is
stored.

Example:
    >>> elo = EloRatingSystem()
    >>> elo.apply_outcome(1500, 1500, a_won=True)
    (1512, 1488)
    >>> is_upset(1400, 1600)
    True
"""

import math

from arena.core.configs import EloConfig


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class EloRatingSystem:
    """Standard Elo rating calculations. Pure: no I/O, no state beyond config."""

    def __init__(self, config: EloConfig | None = None):
        self.config = config or EloConfig()

    def expected_score(self, rating_a: float, rating_b: float) -> float:
        """Calculate expected score for player A against player B."""
        return 1.0 / (1.0 + 10 ** ((rating_b - rating_a) / self.config.scale))

    def apply_outcome(
        self,
        rating_a: float,
        rating_b: float,
        a_won: bool,
    ) -> tuple[int, int]:
        """
        Update ratings after a match.

        Args:
            rating_a: Current rating of A
            rating_b: Current rating of B
            a_won: True if A won, False if B won

        Returns:
            (new_rating_a, new_rating_b), each rounded to the nearest integer
        """
        expected_a = self.expected_score(rating_a, rating_b)
        expected_b = 1 - expected_a

        score_a = 1.0 if a_won else 0.0
        score_b = 1.0 - score_a

        k = self.config.k_factor
        new_rating_a = _round_half_up(rating_a + k * (score_a - expected_a))
        new_rating_b = _round_half_up(rating_b + k * (score_b - expected_b))

        return new_rating_a, new_rating_b


_default_system = EloRatingSystem()


def expected_score(rating_a: float, rating_b: float) -> float:
    """Expected score of A against B with the default configuration."""
    return _default_system.expected_score(rating_a, rating_b)


def apply_outcome(rating_a: float, rating_b: float, a_won: bool) -> tuple[int, int]:
    """New ratings for A and B with the default configuration."""
    return _default_system.apply_outcome(rating_a, rating_b, a_won)


def is_upset(winner_rating_before: float, loser_rating_before: float) -> bool:
    """Check if a result is an upset (lower-rated side won)."""
    return winner_rating_before < loser_rating_before


def upset_magnitude(winner_rating_before: float, loser_rating_before: float) -> float:
    """
    Size of an upset: 0 when the favourite (or an equal) won, otherwise the
    rating gap in units of 200 points (so a 300-point upset scores 1.5).
    """
    if winner_rating_before >= loser_rating_before:
        return 0.0
    return (loser_rating_before - winner_rating_before) / 200


def rating_difference(rating_a: float, rating_b: float) -> float:
    """Absolute rating gap between two candidates."""
    return abs(rating_a - rating_b)
