"""
Tests for Risk Metrics
======================
Tests cover:
- VaR / CVaR on sorted outcomes
- Exceedance probability
- Outcome statistics and confidence intervals
- Histogram
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from monte_carlo.errors import ComputationError
from monte_carlo.risk import (
    compute_histogram,
    compute_outcome_statistics,
    compute_risk_metrics,
    conditional_value_at_risk,
    exceedance_probability,
    value_at_risk,
)


@pytest.fixture
def hundred():
    """Outcomes 1..100 in shuffled order"""
    values = np.arange(1, 101, dtype=float)
    np.random.default_rng(3).shuffle(values)
    return values


# =============================================================================
# VaR / CVaR
# =============================================================================

class TestValueAtRisk:

    def test_var_at_95(self, hundred):
        # floor(100 * 0.05) = 5 -> sorted[5]
        assert value_at_risk(hundred, 0.95) == 6.0

    def test_cvar_at_95(self, hundred):
        # mean of sorted[0:5] = mean(1..5)
        assert conditional_value_at_risk(hundred, 0.95) == pytest.approx(3.0)

    def test_cvar_not_above_var(self, hundred):
        assert conditional_value_at_risk(hundred, 0.9) <= value_at_risk(hundred, 0.9)

    def test_cvar_empty_tail(self):
        """floor(10 * 0.05) = 0 leaves no tail to average"""
        with pytest.raises(ComputationError):
            conditional_value_at_risk(list(range(10)), 0.95)

    def test_full_confidence(self, hundred):
        assert value_at_risk(hundred, 1.0) == 1.0

    @pytest.mark.parametrize("level", [0, -0.5, 1.5])
    def test_invalid_confidence(self, hundred, level):
        with pytest.raises(ComputationError):
            value_at_risk(hundred, level)

    def test_empty_outcomes(self):
        with pytest.raises(ComputationError):
            value_at_risk([], 0.95)

    def test_metrics_reported_independently(self):
        """A failing CVaR does not hide VaR"""
        metrics = compute_risk_metrics(list(range(10)), 0.95)
        assert metrics.value_at_risk.ok
        assert metrics.value_at_risk.value == 0.0
        assert not metrics.conditional_value_at_risk.ok
        assert metrics.conditional_value_at_risk.value is None
        assert metrics.conditional_value_at_risk.error


class TestExceedanceProbability:

    def test_threshold_inclusive(self):
        assert exceedance_probability(list(range(1, 11)), 5) == pytest.approx(60.0)

    def test_all_and_none(self):
        assert exceedance_probability([1, 2, 3], 0) == 100.0
        assert exceedance_probability([1, 2, 3], 4) == 0.0


# =============================================================================
# Outcome statistics
# =============================================================================

class TestOutcomeStatistics:

    def test_known_values(self):
        stats = compute_outcome_statistics([2, 4, 4, 4, 5, 5, 7, 9])
        assert stats.mean == pytest.approx(5.0)
        assert stats.std == pytest.approx(2.0)
        assert stats.min == 2.0
        assert stats.max == 9.0
        assert stats.median == 5.0

    def test_percentiles_monotonic(self, hundred):
        p = compute_outcome_statistics(hundred).percentiles
        assert p.p5 <= p.p10 <= p.p25 <= p.p50 <= p.p75 <= p.p90 <= p.p95
        assert p.p5 == 6.0
        assert p.p95 == 96.0

    def test_confidence_intervals(self, hundred):
        stats = compute_outcome_statistics(hundred)
        p = stats.percentiles
        assert (stats.confidence_intervals.ci90.lower, stats.confidence_intervals.ci90.upper) == (p.p5, p.p95)
        assert (stats.confidence_intervals.ci80.lower, stats.confidence_intervals.ci80.upper) == (p.p10, p.p90)
        assert (stats.confidence_intervals.ci50.lower, stats.confidence_intervals.ci50.upper) == (p.p25, p.p75)

    def test_order_does_not_matter(self, hundred):
        assert compute_outcome_statistics(hundred) == compute_outcome_statistics(np.sort(hundred))

    def test_empty(self):
        with pytest.raises(ComputationError):
            compute_outcome_statistics([])


class TestHistogram:

    def test_counts_cover_all_outcomes(self, hundred):
        hist = compute_histogram(hundred)
        assert len(hist.counts) == 50
        assert len(hist.bins) == 51
        assert len(hist.bin_centers) == 50
        assert sum(hist.counts) == 100

    def test_non_finite_values_skipped(self):
        hist = compute_histogram([1.0, 2.0, float("nan"), float("inf")], n_bins=2)
        assert sum(hist.counts) == 2

    def test_only_non_finite(self):
        hist = compute_histogram([float("nan")])
        assert hist.counts == []
