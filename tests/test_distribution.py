"""Tests for rating distribution analysis."""

import pytest

from arena.analysis import coverage_analysis, rating_distribution, win_rate


class TestRatingDistribution:
    """Tests for rating_distribution."""

    def test_summary(self):
        summary = rating_distribution([1480, 1500, 1512, 1530, 1600])

        assert summary["min"] == 1480.0
        assert summary["max"] == 1600.0
        assert summary["mean"] == pytest.approx(1524.4)
        assert summary["percentiles"]["50"] == 1512.0
        assert summary["std"] > 0

    def test_percentile_keys(self):
        summary = rating_distribution([1400, 1600])
        assert list(summary["percentiles"]) == ["10", "25", "50", "75", "90"]

    def test_too_few_ratings(self):
        assert rating_distribution([]) == {}
        assert rating_distribution([1500]) == {}


class TestCoverageAnalysis:
    """Tests for coverage_analysis."""

    def test_coverage(self):
        coverage = coverage_analysis([0, 0, 5, 10, 12])

        assert coverage["total_candidates"] == 5
        assert coverage["never_battled"] == 2
        assert coverage["with_5plus"] == 3
        assert coverage["with_10plus"] == 2
        assert coverage["average_battles"] == pytest.approx(5.4)
        assert coverage["max_battles"] == 12

    def test_empty(self):
        coverage = coverage_analysis([])

        assert coverage["total_candidates"] == 0
        assert coverage["max_battles"] == 0


class TestWinRate:
    def test_win_rate(self):
        assert win_rate(2, 3) == 0.667
        assert win_rate(0, 0) == 0.0
