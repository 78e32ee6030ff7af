"""
Tests for Coefficient Estimator
===============================
Tests cover:
- Univariate slope recovery
- Default coefficient for degenerate inputs
- Positional vs pairwise row alignment
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from exploratory.coefficients import DEFAULT_COEFFICIENT, estimate_coefficient, estimate_coefficients
from exploratory.dataset import Dataset
from exploratory.models import CoefficientAlignment


class TestSlopeRecovery:

    @pytest.fixture
    def linear_dataset(self):
        # target = 2 * x + 1, z unrelated constant
        return Dataset([
            {"x": x, "z": 7, "target": 2 * x + 1}
            for x in [1, 2, 3, 4, 5]
        ])

    @pytest.mark.parametrize("alignment", list(CoefficientAlignment))
    def test_exact_slope(self, linear_dataset, alignment):
        assert estimate_coefficient(linear_dataset, "target", "x", alignment) == pytest.approx(2.0)

    @pytest.mark.parametrize("alignment", list(CoefficientAlignment))
    def test_zero_variance_input(self, linear_dataset, alignment):
        """Constant input has no slope, the default weight is used"""
        assert estimate_coefficient(linear_dataset, "target", "z", alignment) == DEFAULT_COEFFICIENT

    def test_one_entry_per_input(self, linear_dataset):
        result = estimate_coefficients(linear_dataset, "target", ["z", "x"])
        assert list(result) == ["z", "x"]
        assert result["x"] == pytest.approx(2.0)
        assert result["z"] == 1.0

    def test_alignment_from_string(self, linear_dataset):
        result = estimate_coefficients(linear_dataset, "target", ["x"], "pairwise")
        assert result["x"] == pytest.approx(2.0)


class TestDegenerateInputs:

    def test_input_without_numbers(self):
        ds = Dataset([{"x": "a", "target": 1}, {"x": "b", "target": 2}])
        assert estimate_coefficient(ds, "target", "x") == 1.0

    def test_target_without_numbers(self):
        ds = Dataset([{"x": 1, "target": None}, {"x": 2, "target": None}])
        assert estimate_coefficient(ds, "target", "x") == 1.0

    def test_single_pair_pairwise(self):
        ds = Dataset([{"x": 1, "target": 3}, {"x": None, "target": 5}])
        assert estimate_coefficient(ds, "target", "x", CoefficientAlignment.PAIRWISE) == 1.0


class TestRowAlignment:
    """Scattered missing targets make the two alignments disagree"""

    @pytest.fixture
    def gapped_dataset(self):
        return Dataset([
            {"x": 1, "target": None},
            {"x": 2, "target": 4},
            {"x": 3, "target": 6},
            {"x": 4, "target": 20},
        ])

    def test_pairwise_uses_complete_rows(self, gapped_dataset):
        # Pairs (2, 4), (3, 6), (4, 20): cov sum 16, var sum 2
        result = estimate_coefficient(gapped_dataset, "target", "x", CoefficientAlignment.PAIRWISE)
        assert result == pytest.approx(8.0)

    def test_positional_stops_at_filtered_target_length(self, gapped_dataset):
        # Means from filtered series: x 2.5, target 10; only rows 1 and 2 are walked
        result = estimate_coefficient(gapped_dataset, "target", "x", CoefficientAlignment.POSITIONAL)
        assert result == pytest.approx(2.0)

    def test_positional_is_default(self, gapped_dataset):
        assert estimate_coefficients(gapped_dataset, "target", ["x"])["x"] == pytest.approx(2.0)
