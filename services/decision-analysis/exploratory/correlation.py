"""
Correlation Engine
==================
Pairwise Pearson correlation over numeric columns.

Each pair uses its own pairwise-complete rows: a row missing in one column
only drops out of the pairs involving that column.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from .dataset import Dataset
from .models import CorrelationMatrix
from .preprocessing import detect_numeric_columns

logger = logging.getLogger(__name__)


def pearson_from_pairs(xs: np.ndarray, ys: np.ndarray) -> float:
    """
    r = (Σxy − ΣxΣy/n) / sqrt((Σx² − (Σx)²/n)(Σy² − (Σy)²/n))

    Degenerate input (no pairs, zero variance) gives 0.
    """
    n = len(xs)
    if n == 0:
        return 0.0

    sum_x = float(np.sum(xs))
    sum_y = float(np.sum(ys))
    sum_x_sq = float(np.sum(xs * xs))
    sum_y_sq = float(np.sum(ys * ys))
    sum_xy = float(np.sum(xs * ys))

    numerator = sum_xy - (sum_x * sum_y / n)
    variance_term = (sum_x_sq - sum_x * sum_x / n) * (sum_y_sq - sum_y * sum_y / n)

    # Rounding can leave a tiny negative product for constant columns
    if not variance_term > 0:
        return 0.0
    denominator = math.sqrt(variance_term)
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0

    r = numerator / denominator
    return float(min(1.0, max(-1.0, r)))


def pearson_correlation(dataset: Dataset, first: str, second: str) -> float:
    """Correlation of two columns over their pairwise-complete rows"""
    if first == second:
        return 1.0
    xs, ys = dataset.paired_values(first, second)
    r = pearson_from_pairs(xs, ys)
    if r == 0.0 and len(xs) > 0:
        logger.debug(f"Degenerate correlation for ({first}, {second}) over {len(xs)} rows")
    return r


def compute_correlation_matrix(
    dataset: Dataset,
    columns: Optional[Sequence[str]] = None,
) -> CorrelationMatrix:
    """
    Full correlation matrix; recomputed from scratch on every call.

    Args:
        dataset: Source records
        columns: Numeric columns to correlate (detected when omitted)

    Returns:
        Symmetric CorrelationMatrix with an exact 1 diagonal
    """
    names: List[str] = list(columns) if columns is not None else detect_numeric_columns(dataset)
    n = len(names)
    values = [[0.0] * n for _ in range(n)]

    for i in range(n):
        values[i][i] = 1.0
        for j in range(i + 1, n):
            r = pearson_correlation(dataset, names[i], names[j])
            values[i][j] = r
            values[j][i] = r

    return CorrelationMatrix(columns=names, values=values)
