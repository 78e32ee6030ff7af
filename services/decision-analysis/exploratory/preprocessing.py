"""
Preprocessing Helpers
=====================
Data preparation on an already-parsed Dataset:
1. Missing value report per column
2. Column type detection (numeric / datetime / categorical)
3. Frequency tables for categorical columns
4. Imputation (drop / mean / median / mode) and column selection

Column work runs on an object-dtype DataFrame (Dataset.to_frame), so the
original Python values survive the round trip. Every helper returns new
objects; the input Dataset is never modified.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .dataset import Dataset, is_absent, is_numeric
from .models import CategoryCount, ColumnType, MissingValueInfo

logger = logging.getLogger(__name__)

CATEGORY_LIMIT = 50

IMPUTATION_METHODS = ("drop", "mean", "median", "mode")


def _absent_mask(data):
    """None, NaN and empty strings (works on a Series or a DataFrame)"""
    return data.isna() | data.eq("")


def analyze_missing_values(dataset: Dataset) -> Dict[str, MissingValueInfo]:
    """Count absent values (None, NaN, empty string) per column"""
    frame = dataset.to_frame(dtype=object)
    total = len(frame)
    missing = _absent_mask(frame).sum()

    report: Dict[str, MissingValueInfo] = {}
    for column in dataset.columns:
        count = int(missing[column])
        percentage = round(count / total * 100, 2) if total else 0.0
        report[column] = MissingValueInfo(count=count, percentage=percentage)
    return report


def _first_present(dataset: Dataset, column: str) -> Any:
    for value in dataset.column_values(column):
        if not is_absent(value):
            return value
    return None


def _looks_like_datetime(value: Any) -> bool:
    if isinstance(value, (datetime, date, pd.Timestamp)):
        return True
    if not isinstance(value, str):
        return False
    try:
        pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        return False
    return True


def detect_column_types(dataset: Dataset) -> Dict[str, ColumnType]:
    """Classify each column from its first present value"""
    types: Dict[str, ColumnType] = {}
    for column in dataset.columns:
        sample = _first_present(dataset, column)
        if sample is None:
            types[column] = ColumnType.UNKNOWN
        elif is_numeric(sample):
            types[column] = ColumnType.NUMERIC
        elif _looks_like_datetime(sample):
            types[column] = ColumnType.DATETIME
        else:
            types[column] = ColumnType.CATEGORICAL
    return types


def detect_numeric_columns(dataset: Dataset) -> List[str]:
    """Columns whose first present value is numeric, in column order"""
    return [c for c in dataset.columns if is_numeric(_first_present(dataset, c))]


def category_counts(dataset: Dataset, column: str, limit: int = CATEGORY_LIMIT) -> List[CategoryCount]:
    """Most frequent values of a column (as strings), highest count first, ties in order of appearance"""
    values = pd.Series(dataset.column_values(column), dtype=object)
    present = values[~_absent_mask(values)].astype(str)
    ranked = (
        present.value_counts(sort=False)
        .sort_values(ascending=False, kind="stable")
        .head(limit)
    )
    return [CategoryCount(value=str(value), count=int(count)) for value, count in ranked.items()]


def _fill_value(present: pd.Series, method: str) -> Optional[Any]:
    if present.empty:
        return None

    if method == "mode":
        ordered = present.reset_index(drop=True)
        tally = (
            pd.DataFrame({"value": ordered, "position": ordered.index})
            .groupby("value", sort=False)["position"]
            .agg(["size", "max"])
        )
        # Ties go to the value seen last
        return tally.sort_values(["size", "max"]).index[-1]

    numeric = present[present.map(is_numeric).astype(bool)].astype(float)
    if numeric.empty:
        return None
    if method == "mean":
        return float(numeric.mean())
    return float(numeric.sort_values().iloc[len(numeric) // 2])


def impute(
    dataset: Dataset,
    methods: Mapping[str, str],
    columns: Optional[Sequence[str]] = None,
) -> Dataset:
    """
    Apply per-column missing value handling, then keep only `columns`.

    Methods are applied in mapping order, each on the output of the previous:
    - drop:   remove rows where the column is absent
    - mean:   fill with the mean of the numeric values
    - median: fill with sorted[floor(n / 2)] of the numeric values
    - mode:   fill with the most frequent present value

    Raises:
        ValueError: unknown method or column
    """
    frame = dataset.to_frame(dtype=object)

    for column, method in methods.items():
        if column not in dataset.columns:
            raise ValueError(f"Unknown column: {column}")
        if method not in IMPUTATION_METHODS:
            raise ValueError(f"Unknown imputation method '{method}' for column {column}")

        absent = _absent_mask(frame[column])

        if method == "drop":
            before = len(frame)
            frame = frame.loc[~absent].copy()
            logger.info(f"Dropped {before - len(frame)} rows with missing '{column}'")
            continue

        fill = _fill_value(frame.loc[~absent, column], method)
        if fill is None:
            logger.warning(f"No values to compute {method} for '{column}', left unchanged")
            continue
        frame[column] = frame[column].mask(absent, fill)

    selected = list(columns) if columns is not None else list(dataset.columns)
    unknown = [c for c in selected if c not in dataset.columns]
    if unknown:
        raise ValueError(f"Unknown columns: {unknown}")

    return Dataset.from_frame(frame[selected])
