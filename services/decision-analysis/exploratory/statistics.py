"""
Statistics Engine
=================
Descriptive statistics for numeric columns.

Conventions shared with the simulation outputs:
1. Percentile p is the nearest rank sorted[floor(n * p)] (no interpolation)
2. Standard deviation uses the population variance (divide by n)
3. Columns with more than STATISTICS_SAMPLE_CAP usable values are summarized
   from the FIRST values only (not a random sample)
"""

import logging
import math
from typing import Any, Dict, Iterable, Optional, Sequence

import numpy as np

from .dataset import Dataset, is_numeric
from .models import ColumnStatistics

logger = logging.getLogger(__name__)

STATISTICS_SAMPLE_CAP = 10000


def nearest_rank_percentile(sorted_values: Sequence[float], p: float) -> float:
    """sorted[floor(n * p)], clamped to the last index"""
    n = len(sorted_values)
    if n == 0:
        raise ValueError("percentile of an empty sample")
    index = min(int(math.floor(n * p)), n - 1)
    return float(sorted_values[index])


def compute_column_statistics(
    values: Iterable[Any],
    cap: Optional[int] = STATISTICS_SAMPLE_CAP,
) -> Optional[ColumnStatistics]:
    """
    Summarize one column's values.

    Returns None when the column has no usable numeric value.
    """
    usable = [float(v) for v in values if is_numeric(v)]
    count = len(usable)
    if count == 0:
        return None

    sample = np.asarray(usable if cap is None or count <= cap else usable[:cap], dtype=float)
    if len(sample) < count:
        logger.debug(f"Statistics computed from first {len(sample)} of {count} values")

    sorted_sample = np.sort(sample)
    mean = float(np.mean(sample))
    std = float(np.sqrt(np.mean((sample - mean) ** 2)))

    return ColumnStatistics(
        count=count,
        sample_size=len(sample),
        mean=mean,
        std=std,
        min=float(sorted_sample[0]),
        q25=nearest_rank_percentile(sorted_sample, 0.25),
        median=nearest_rank_percentile(sorted_sample, 0.50),
        q75=nearest_rank_percentile(sorted_sample, 0.75),
        max=float(sorted_sample[-1]),
    )


def compute_statistics(
    dataset: Dataset,
    columns: Optional[Sequence[str]] = None,
) -> Dict[str, ColumnStatistics]:
    """
    Descriptive statistics for every column that has numeric values.

    Columns without any usable numeric value are left out of the mapping.
    """
    result: Dict[str, ColumnStatistics] = {}
    for column in columns if columns is not None else dataset.columns:
        stats = compute_column_statistics(dataset.column_values(column))
        if stats is not None:
            result[column] = stats
    return result
