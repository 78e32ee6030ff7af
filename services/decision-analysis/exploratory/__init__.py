# Exploratory analysis module
# Dataset wrapper, preprocessing and pre-simulation statistics

from .dataset import Dataset, is_absent, is_numeric
from .models import (
    ColumnType,
    CoefficientAlignment,
    ColumnStatistics,
    CorrelationMatrix,
    MissingValueInfo,
    CategoryCount,
)
from .statistics import (
    STATISTICS_SAMPLE_CAP,
    nearest_rank_percentile,
    compute_column_statistics,
    compute_statistics,
)
from .correlation import pearson_correlation, compute_correlation_matrix
from .coefficients import estimate_coefficient, estimate_coefficients
from .preprocessing import (
    analyze_missing_values,
    detect_column_types,
    detect_numeric_columns,
    category_counts,
    impute,
)

__all__ = [
    "Dataset",
    "is_absent",
    "is_numeric",
    "ColumnType",
    "CoefficientAlignment",
    "ColumnStatistics",
    "CorrelationMatrix",
    "MissingValueInfo",
    "CategoryCount",
    "STATISTICS_SAMPLE_CAP",
    "nearest_rank_percentile",
    "compute_column_statistics",
    "compute_statistics",
    "pearson_correlation",
    "compute_correlation_matrix",
    "estimate_coefficient",
    "estimate_coefficients",
    "analyze_missing_values",
    "detect_column_types",
    "detect_numeric_columns",
    "category_counts",
    "impute",
]
