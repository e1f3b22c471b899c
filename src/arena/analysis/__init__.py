"""Rating and coverage statistics."""

from arena.analysis.distribution import coverage_analysis, rating_distribution, win_rate

__all__ = ["coverage_analysis", "rating_distribution", "win_rate"]
