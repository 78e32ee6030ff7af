"""
Coefficient Estimator
=====================
One weight per input variable: the univariate least-squares slope
cov(input, target) / var(input) against the target alone.

This is NOT a joint multivariate fit; callers may override any value.

Two row alignments are available:
- POSITIONAL (default): means come from each independently filtered series,
  rows are walked by index up to min(row_count, len(filtered target)) and
  only rows where both values are numeric contribute. With nulls scattered
  in the target, rows past the filtered target length are never visited.
- PAIRWISE: only pairwise-complete rows, the same filtering the correlation
  matrix uses.
"""

import logging
from typing import Dict, Sequence

import numpy as np
from scipy import stats

from .dataset import Dataset, is_numeric
from .models import CoefficientAlignment

logger = logging.getLogger(__name__)

DEFAULT_COEFFICIENT = 1.0


def _positional_coefficient(dataset: Dataset, target: str, variable: str) -> float:
    target_values = dataset.numeric_values(target)
    input_values = dataset.numeric_values(variable)
    if len(target_values) == 0 or len(input_values) == 0:
        return DEFAULT_COEFFICIENT

    target_mean = float(np.mean(target_values))
    input_mean = float(np.mean(input_values))

    numerator = 0.0
    denominator = 0.0
    limit = min(len(dataset), len(target_values))
    for record in dataset.records[:limit]:
        t = record.get(target)
        x = record.get(variable)
        if is_numeric(t) and is_numeric(x):
            numerator += (float(x) - input_mean) * (float(t) - target_mean)
            denominator += (float(x) - input_mean) ** 2

    if denominator == 0:
        logger.debug(f"Zero variance for '{variable}', using default coefficient")
        return DEFAULT_COEFFICIENT
    return numerator / denominator


def _pairwise_coefficient(dataset: Dataset, target: str, variable: str) -> float:
    xs, ys = dataset.paired_values(variable, target)
    if len(xs) < 2 or float(np.max(xs)) == float(np.min(xs)):
        logger.debug(f"Degenerate pairs for '{variable}', using default coefficient")
        return DEFAULT_COEFFICIENT
    return float(stats.linregress(xs, ys).slope)


def estimate_coefficient(
    dataset: Dataset,
    target: str,
    variable: str,
    alignment: CoefficientAlignment = CoefficientAlignment.POSITIONAL,
) -> float:
    """Slope of target on one input; 1 when the input has no variance or no pairs"""
    if alignment == CoefficientAlignment.PAIRWISE:
        return _pairwise_coefficient(dataset, target, variable)
    return _positional_coefficient(dataset, target, variable)


def estimate_coefficients(
    dataset: Dataset,
    target: str,
    inputs: Sequence[str],
    alignment: CoefficientAlignment = CoefficientAlignment.POSITIONAL,
) -> Dict[str, float]:
    """
    Estimate a coefficient for every input variable independently.

    Args:
        dataset: Historical records
        target: Target column
        inputs: Input columns (order preserved in the result)
        alignment: Row pairing strategy

    Returns:
        Mapping input -> coefficient
    """
    alignment = CoefficientAlignment(alignment)
    return {v: estimate_coefficient(dataset, target, v, alignment) for v in inputs}
