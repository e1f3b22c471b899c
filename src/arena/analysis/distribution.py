"""
Rating Distribution Analysis

Summarizes how ratings and battle counts are spread across a category:
percentiles of the rating distribution (battled candidates only, since
unbattled ones all sit at the initial rating) and coverage of the
collection by votes.

Example:
    >>> summary = rating_distribution([1480, 1500, 1512, 1530, 1600])
    >>> summary["min"], summary["max"]
    (1480.0, 1600.0)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

logger = logging.getLogger(__name__)

PERCENTILES = (10, 25, 50, 75, 90)


def rating_distribution(ratings: Sequence[float]) -> dict:
    """
    Compute rating distribution statistics.

    Args:
        ratings: Ratings of battled candidates

    Returns:
        min/max/mean/std (sample standard deviation) and percentiles,
        rounded to one decimal; empty if fewer than 2 ratings
    """
    if len(ratings) < 2:
        return {}

    values = np.asarray(ratings, dtype=np.float64)
    pct = np.percentile(values, PERCENTILES)

    return {
        "min": round(float(values.min()), 1),
        "max": round(float(values.max()), 1),
        "mean": round(float(values.mean()), 1),
        "std": round(float(values.std(ddof=1)), 1),
        "percentiles": {str(p): round(float(v), 1) for p, v in zip(PERCENTILES, pct)},
    }


def coverage_analysis(battles: Sequence[int]) -> dict:
    """Analyze how well candidates were covered by votes."""
    counts = np.asarray(battles, dtype=np.int64)
    if counts.size == 0:
        return {
            "total_candidates": 0,
            "never_battled": 0,
            "with_5plus": 0,
            "with_10plus": 0,
            "average_battles": 0,
            "max_battles": 0,
        }

    return {
        "total_candidates": int(counts.size),
        "never_battled": int((counts == 0).sum()),
        "with_5plus": int((counts >= 5).sum()),
        "with_10plus": int((counts >= 10).sum()),
        "average_battles": round(float(counts.mean()), 2),
        "max_battles": int(counts.max()),
    }


def win_rate(wins: int, battles: int) -> float:
    """Share of battles won, 0 for unbattled candidates."""
    return round(wins / battles, 3) if battles > 0 else 0.0
