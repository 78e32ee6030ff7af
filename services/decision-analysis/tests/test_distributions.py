"""
Tests for Distribution Sampler
==============================
Tests cover:
- Support bounds of every distribution
- Sample moments against parameters
- Degenerate parameters
- Parameter validation
- Distribution suggestion heuristic
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest
from pydantic import ValidationError
from scipy import stats

from exploratory.dataset import Dataset
from monte_carlo.distributions import (
    DistributionSampler,
    sample_distribution,
    suggest_distribution,
    suggest_distributions,
)
from monte_carlo.models import (
    ModelConfig,
    NormalDistribution,
    TriangularDistribution,
    UniformDistribution,
)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


# =============================================================================
# Sampling
# =============================================================================

class TestSampling:

    def test_uniform_within_bounds(self, rng):
        samples = sample_distribution(UniformDistribution(min=-3, max=7), 10000, rng)
        assert len(samples) == 10000
        assert samples.min() >= -3
        assert samples.max() <= 7

    def test_triangular_within_bounds(self, rng):
        samples = sample_distribution(TriangularDistribution(min=1, mode=2, max=10), 10000, rng)
        assert samples.min() >= 1
        assert samples.max() <= 10

    def test_uniform_0_10_bounds(self, rng):
        samples = sample_distribution(UniformDistribution(min=0, max=10), 100000, rng)
        assert len(samples) == 100000
        assert np.all((samples >= 0) & (samples <= 10))

    def test_triangular_0_5_10_bounds(self, rng):
        samples = sample_distribution(TriangularDistribution(min=0, mode=5, max=10), 100000, rng)
        assert len(samples) == 100000
        assert np.all((samples >= 0) & (samples <= 10))
        assert abs(samples.mean() - 5) < 0.05

    def test_normal_moments(self, rng):
        samples = sample_distribution(NormalDistribution(mean=10, std=2), 100000, rng)
        assert abs(samples.mean() - 10) < 0.05
        assert abs(samples.std() - 2) < 0.05

    def test_uniform_mean(self, rng):
        samples = sample_distribution(UniformDistribution(min=0, max=10), 100000, rng)
        assert abs(samples.mean() - 5) < 0.05

    def test_triangular_matches_scipy(self, rng):
        """Inverse CDF sampling follows scipy's triangular distribution"""
        low, mode, high = 2.0, 3.0, 8.0
        samples = sample_distribution(TriangularDistribution(min=low, mode=mode, max=high), 20000, rng)
        result = stats.kstest(samples, "triang", args=((mode - low) / (high - low), low, high - low))
        assert result.pvalue > 0.001

    def test_triangular_mode_at_edge(self, rng):
        samples = sample_distribution(TriangularDistribution(min=0, mode=0, max=1), 5000, rng)
        assert samples.min() >= 0
        assert samples.max() <= 1
        assert samples.mean() < 0.5

    def test_zero_std_normal(self, rng):
        samples = sample_distribution(NormalDistribution(mean=4, std=0), 100, rng)
        assert np.all(samples == 4)

    def test_degenerate_triangular(self, rng):
        samples = sample_distribution(TriangularDistribution(min=5, mode=5, max=5), 100, rng)
        assert np.all(samples == 5)
        assert sample_distribution(TriangularDistribution(min=5, mode=5, max=5), None, rng) == 5

    def test_single_draw_is_float(self, rng):
        value = sample_distribution(UniformDistribution(min=0, max=1), None, rng)
        assert isinstance(value, float)

    def test_same_seed_same_draws(self):
        spec = NormalDistribution(mean=0, std=1)
        first = DistributionSampler(np.random.default_rng(1)).draw_many(spec, 50)
        second = DistributionSampler(np.random.default_rng(1)).draw_many(spec, 50)
        np.testing.assert_array_equal(first, second)

    def test_sampler_draw(self, rng):
        sampler = DistributionSampler(rng)
        value = sampler.draw(UniformDistribution(min=2, max=3))
        assert 2 <= value <= 3


# =============================================================================
# Validation
# =============================================================================

class TestDistributionValidation:

    def test_negative_std(self):
        with pytest.raises(ValidationError):
            NormalDistribution(mean=0, std=-1)

    def test_uniform_max_below_min(self):
        with pytest.raises(ValidationError):
            UniformDistribution(min=5, max=1)

    def test_triangular_mode_outside(self):
        with pytest.raises(ValidationError):
            TriangularDistribution(min=0, mode=5, max=3)

    def test_missing_parameter(self):
        with pytest.raises(ValidationError):
            TriangularDistribution(min=0, max=3)

    def test_tagged_union_parsing(self):
        """The `type` field selects the distribution variant"""
        config = ModelConfig.model_validate({
            "target_variable": "profit",
            "input_variables": ["price", "cost"],
            "uncertain_variables": ["price", "cost"],
            "distributions": {
                "price": {"type": "triangular", "min": 1, "mode": 2, "max": 4},
                "cost": {"type": "normal", "mean": 3, "std": 0.5},
            },
        })
        assert isinstance(config.distributions["price"], TriangularDistribution)
        assert isinstance(config.distributions["cost"], NormalDistribution)

    def test_unknown_distribution_type(self):
        with pytest.raises(ValidationError):
            ModelConfig.model_validate({
                "target_variable": "profit",
                "distributions": {"price": {"type": "lognormal", "mean": 1, "std": 1}},
            })


# =============================================================================
# Suggestion heuristic
# =============================================================================

class TestSuggestDistribution:

    def test_low_variation_is_normal(self):
        spec = suggest_distribution([100, 101, 99, 100])
        assert isinstance(spec, NormalDistribution)
        assert spec.mean == pytest.approx(100)

    def test_bounded_spread_is_uniform(self):
        spec = suggest_distribution(list(range(1, 11)))
        assert isinstance(spec, UniformDistribution)
        assert spec.min == 1
        assert spec.max == 10

    def test_negative_values_are_normal(self):
        spec = suggest_distribution([-10, 0, 10, 50])
        assert isinstance(spec, NormalDistribution)

    def test_constant_values(self):
        spec = suggest_distribution([5, 5, 5])
        assert isinstance(spec, NormalDistribution)
        assert spec.std == 0

    def test_empty(self):
        assert suggest_distribution([]) is None

    def test_dataset_variables(self):
        ds = Dataset([{"a": i, "b": None} for i in range(1, 11)])
        suggested = suggest_distributions(ds, ["a", "b"])
        assert list(suggested) == ["a"]
