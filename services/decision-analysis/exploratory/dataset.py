"""
Dataset
=======
Immutable, record-oriented view of an already-parsed tabular source.

Value classification used by every analysis step:
- absent:  None, NaN, empty string
- numeric: int / float / numpy number (bool excluded), not NaN
- text:    everything else
"""

import math
from numbers import Real
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


def is_absent(value: Any) -> bool:
    """True for None, NaN and empty strings"""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


def is_numeric(value: Any) -> bool:
    """True for real numbers that are not bools and not NaN"""
    if isinstance(value, (bool, np.bool_)):
        return False
    if not isinstance(value, (Real, np.number)):
        return False
    return not math.isnan(float(value))


class Dataset:
    """
    Ordered sequence of records sharing a fixed, ordered column set.

    Records may omit a column; a missing key reads as None.
    """

    def __init__(
        self,
        records: Iterable[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
    ):
        frozen = tuple(MappingProxyType(dict(r)) for r in records)

        if columns is None:
            seen: Dict[str, None] = {}
            for record in frozen:
                for key in record:
                    seen.setdefault(key, None)
            columns = list(seen)

        self._records: Tuple[Mapping[str, Any], ...] = frozen
        self._columns: Tuple[str, ...] = tuple(columns)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Dataset":
        """Build a dataset from a DataFrame (NaN becomes None, numpy scalars become Python values)"""
        cleaned = df.astype(object).where(pd.notna(df), None)
        records = [
            {k: v.item() if isinstance(v, np.generic) else v for k, v in row.items()}
            for row in cleaned.to_dict(orient="records")
        ]
        return cls(records, columns=[str(c) for c in df.columns])

    @classmethod
    def coerce(cls, data: Any) -> "Dataset":
        """Accept a Dataset, a DataFrame or a sequence of record mappings"""
        if isinstance(data, Dataset):
            return data
        if isinstance(data, pd.DataFrame):
            return cls.from_frame(data)
        return cls(data)

    def to_frame(self, dtype: Optional[Any] = None) -> pd.DataFrame:
        """DataFrame view; dtype=object keeps the original Python values"""
        return pd.DataFrame([dict(r) for r in self._records], columns=list(self._columns), dtype=dtype)

    @property
    def columns(self) -> Tuple[str, ...]:
        return self._columns

    @property
    def records(self) -> Tuple[Mapping[str, Any], ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(self._records)

    def __contains__(self, column: object) -> bool:
        return column in self._columns

    def column_values(self, column: str) -> List[Any]:
        """Raw values of one column in row order"""
        return [record.get(column) for record in self._records]

    def numeric_values(self, column: str) -> np.ndarray:
        """Numeric values of one column in row order, everything else dropped"""
        values = [float(v) for v in self.column_values(column) if is_numeric(v)]
        return np.asarray(values, dtype=float)

    def numeric_mean(self, column: str, default: float = 0.0) -> float:
        values = self.numeric_values(column)
        if len(values) == 0:
            return default
        return float(np.mean(values))

    def paired_values(self, first: str, second: str) -> Tuple[np.ndarray, np.ndarray]:
        """Row-aligned values of two columns, keeping rows where both are numeric"""
        xs: List[float] = []
        ys: List[float] = []
        for record in self._records:
            x = record.get(first)
            y = record.get(second)
            if is_numeric(x) and is_numeric(y):
                xs.append(float(x))
                ys.append(float(y))
        return np.asarray(xs, dtype=float), np.asarray(ys, dtype=float)

    def with_records(
        self,
        records: Iterable[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
    ) -> "Dataset":
        """New dataset with the same column order unless overridden"""
        return Dataset(records, columns=self._columns if columns is None else columns)

    def __repr__(self) -> str:
        return f"Dataset(rows={len(self)}, columns={list(self._columns)})"
