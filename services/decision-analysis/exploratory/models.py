"""
Exploratory Analysis Models
===========================
Pydantic models returned by the pre-simulation analysis helpers.
"""

from enum import Enum
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field, model_validator


class ColumnType(str, Enum):
    """Detected column data type"""
    NUMERIC = "numeric"
    DATETIME = "datetime"
    CATEGORICAL = "categorical"
    UNKNOWN = "unknown"


class CoefficientAlignment(str, Enum):
    """How input and target rows are paired when estimating coefficients"""
    POSITIONAL = "positional"  # Walk rows by index, means from independently filtered series
    PAIRWISE = "pairwise"      # Pairwise-complete rows only


class ColumnStatistics(BaseModel):
    """Descriptive statistics of one numeric column"""
    count: int = Field(..., ge=1, description="Usable numeric values in the column")
    sample_size: int = Field(..., ge=1, description="Values the moments were computed from (capped)")
    mean: float
    std: float = Field(..., ge=0, description="Population standard deviation")
    min: float
    q25: float
    median: float
    q75: float
    max: float


class CorrelationMatrix(BaseModel):
    """
    Square Pearson correlation matrix over numeric columns.
    values[i][j] is the correlation of columns[i] and columns[j].
    """
    columns: List[str] = Field(default_factory=list)
    values: List[List[float]] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_square(self):
        n = len(self.columns)
        if len(self.values) != n or any(len(row) != n for row in self.values):
            raise ValueError("correlation matrix must be square and match its columns")
        return self

    def __getitem__(self, pair: Tuple[str, str]) -> float:
        first, second = pair
        i = self.columns.index(first)
        j = self.columns.index(second)
        return self.values[i][j]

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        """Nested mapping column -> column -> r"""
        return {
            a: {b: self.values[i][j] for j, b in enumerate(self.columns)}
            for i, a in enumerate(self.columns)
        }


class MissingValueInfo(BaseModel):
    """Absent values in one column"""
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)


class CategoryCount(BaseModel):
    value: str
    count: int
