"""
Modele danych dla symulacji Monte Carlo.

Obsługiwane rozkłady:
- normal: Rozkład normalny (mean, std)
- uniform: Rozkład jednostajny (min, max)
- triangular: Rozkład trójkątny (min, mode, max)

Rozkład jest unią oznaczoną polem `type` - każdy wariant ma własny
zestaw wymaganych parametrów, sprawdzany przy tworzeniu obiektu.
"""

from enum import Enum
from typing import Annotated, Dict, List, Optional, Union, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from exploratory.models import ColumnStatistics, CorrelationMatrix

from .config import DEFAULT_CONFIDENCE_LEVEL, DEFAULT_NUM_SIMULATIONS


class ModelType(str, Enum):
    """Postać modelu wyniku."""
    LINEAR = "linear"                  # Σ coef[v] * x[v]
    MULTIPLICATIVE = "multiplicative"  # Π x[v] ^ coef[v]


class NormalDistribution(BaseModel):
    """Rozkład normalny N(mean, std)."""

    type: Literal["normal"] = "normal"
    mean: float = Field(..., description="Wartość oczekiwana")
    std: float = Field(..., ge=0, description="Odchylenie standardowe (>= 0)")


class UniformDistribution(BaseModel):
    """Rozkład jednostajny na przedziale [min, max]."""

    type: Literal["uniform"] = "uniform"
    min: float = Field(..., description="Dolna granica")
    max: float = Field(..., description="Górna granica")

    @model_validator(mode="after")
    def check_bounds(self):
        if self.max < self.min:
            raise ValueError(f"uniform: max ({self.max}) < min ({self.min})")
        return self


class TriangularDistribution(BaseModel):
    """Rozkład trójkątny (min, mode, max) - szacunki eksperckie."""

    type: Literal["triangular"] = "triangular"
    min: float = Field(..., description="Wartość minimalna")
    mode: float = Field(..., description="Wartość najbardziej prawdopodobna")
    max: float = Field(..., description="Wartość maksymalna")

    @model_validator(mode="after")
    def check_bounds(self):
        if not (self.min <= self.mode <= self.max):
            raise ValueError(
                f"triangular: wymagane min <= mode <= max "
                f"(min={self.min}, mode={self.mode}, max={self.max})"
            )
        return self


DistributionSpec = Annotated[
    Union[NormalDistribution, UniformDistribution, TriangularDistribution],
    Field(discriminator="type"),
]


class ModelConfig(BaseModel):
    """
    Konfiguracja modelu symulacji.

    Spójność z danymi (kolumny, zmienne niepewne, rozkłady, liczba symulacji)
    sprawdza silnik przed rozpoczęciem obliczeń - patrz validate_config().
    """

    target_variable: str = Field(..., description="Kolumna zmiennej objaśnianej")
    input_variables: List[str] = Field(
        default_factory=list,
        description="Zmienne wejściowe (bez zmiennej objaśnianej)"
    )
    uncertain_variables: List[str] = Field(
        default_factory=list,
        description="Podzbiór zmiennych wejściowych losowanych z rozkładów"
    )
    distributions: Dict[str, DistributionSpec] = Field(
        default_factory=dict,
        description="Rozkład dla każdej zmiennej niepewnej"
    )
    coefficients: Dict[str, float] = Field(
        default_factory=dict,
        description="Współczynniki modelu (brak = 1)"
    )
    model_type: ModelType = Field(default=ModelType.LINEAR, description="Postać modelu")
    num_simulations: int = Field(
        default=DEFAULT_NUM_SIMULATIONS,
        description="Liczba prób Monte Carlo"
    )
    random_seed: Optional[int] = Field(
        None,
        ge=0,
        description="Ziarno generatora losowego (dla powtarzalności, >= 0)"
    )


class PercentileResults(BaseModel):
    """Wyniki dla kluczowych percentyli (metoda najbliższej rangi)."""

    p5: float = Field(..., description="5-ty percentyl (pesymistyczny)")
    p10: float = Field(..., description="10-ty percentyl")
    p25: float = Field(..., description="25-ty percentyl (Q1)")
    p50: float = Field(..., description="50-ty percentyl (mediana)")
    p75: float = Field(..., description="75-ty percentyl (Q3)")
    p90: float = Field(..., description="90-ty percentyl")
    p95: float = Field(..., description="95-ty percentyl (optymistyczny)")


class ConfidenceInterval(BaseModel):
    lower: float
    upper: float


class ConfidenceIntervals(BaseModel):
    """Przedziały ufności wyznaczone z percentyli."""

    ci50: ConfidenceInterval = Field(..., description="P25 - P75 (IQR)")
    ci80: ConfidenceInterval = Field(..., description="P10 - P90")
    ci90: ConfidenceInterval = Field(..., description="P5 - P95")


class OutcomeStatistics(BaseModel):
    """Statystyki opisowe rozkładu wyników."""

    mean: float = Field(..., description="Średnia")
    std: float = Field(..., description="Odchylenie standardowe (populacyjne)")
    min: float
    max: float
    median: float
    percentiles: PercentileResults
    confidence_intervals: ConfidenceIntervals


class MetricResult(BaseModel):
    """Wynik pojedynczej metryki - wartość albo opis błędu."""

    value: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RiskMetrics(BaseModel):
    """Metryki ryzyka liczone niezależnie od siebie."""

    confidence_level: float = Field(
        default=DEFAULT_CONFIDENCE_LEVEL,
        gt=0,
        le=1,
        description="Poziom ufności dla VaR/CVaR"
    )
    value_at_risk: MetricResult = Field(..., description="Value at Risk")
    conditional_value_at_risk: MetricResult = Field(
        ...,
        description="Conditional VaR (Expected Shortfall)"
    )


class HistogramData(BaseModel):
    """Dane histogramu dla wizualizacji."""

    bins: List[float] = Field(..., description="Granice przedziałów")
    counts: List[int] = Field(..., description="Liczności w przedziałach")
    bin_centers: List[float] = Field(..., description="Środki przedziałów")


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Recommendation(BaseModel):
    summary: str
    range: str
    risk: str
    action: str


class RiskAssessment(BaseModel):
    """Ocena zmienności wyniku i rekomendacja."""

    level: RiskLevel
    coefficient_of_variation: Optional[float] = Field(
        None,
        description="std / |mean| (brak dla średniej równej 0)"
    )
    description: str
    recommendation: Recommendation


class SimulationResult(BaseModel):
    """Pełny wynik symulacji Monte Carlo."""

    outcomes: List[float] = Field(..., description="Wyniki prób w kolejności wykonania")
    statistics: OutcomeStatistics
    config: ModelConfig = Field(..., description="Użyta konfiguracja")
    risk_metrics: RiskMetrics
    histogram: HistogramData
    risk_assessment: RiskAssessment
    seed: int = Field(..., description="Ziarno, które odtwarza ten wynik")
    computation_time_ms: float = Field(..., description="Czas obliczeń [ms]")

    @field_validator("outcomes")
    @classmethod
    def validate_outcomes(cls, v):
        if len(v) == 0:
            raise ValueError("outcomes nie może być puste")
        return v


class AnalysisReport(BaseModel):
    """Wyniki analizy poprzedzającej symulację."""

    numeric_columns: List[str]
    statistics: Dict[str, ColumnStatistics]
    correlation: CorrelationMatrix
    coefficients: Dict[str, float]
    suggested_distributions: Dict[str, DistributionSpec] = Field(default_factory=dict)
