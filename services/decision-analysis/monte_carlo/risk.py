"""
Metryki ryzyka dla rozkładu wyników symulacji.

Percentyle liczone metodą najbliższej rangi: sorted[floor(n * p)],
obcięte do ostatniego indeksu (ta sama konwencja co w statystykach kolumn).
"""

import logging
import math
from typing import Sequence, Union

import numpy as np

from exploratory.statistics import nearest_rank_percentile

from .config import DEFAULT_CONFIDENCE_LEVEL, HISTOGRAM_BINS, PERCENTILES
from .errors import ComputationError
from .models import (
    ConfidenceInterval,
    ConfidenceIntervals,
    HistogramData,
    MetricResult,
    OutcomeStatistics,
    PercentileResults,
    RiskMetrics,
)

logger = logging.getLogger(__name__)

Outcomes = Union[Sequence[float], np.ndarray]


def _as_array(outcomes: Outcomes) -> np.ndarray:
    data = np.asarray(outcomes, dtype=float)
    if data.ndim != 1 or len(data) == 0:
        raise ComputationError("Brak wyników do analizy (pusta lista outcomes)")
    return data


def _check_confidence(confidence_level: float) -> None:
    if not 0 < confidence_level <= 1:
        raise ComputationError(
            f"Poziom ufności musi należeć do (0, 1], otrzymano {confidence_level}"
        )


def _cutoff_index(n: int, confidence_level: float) -> int:
    return int(math.floor(n * (1 - confidence_level)))


def compute_percentiles(sorted_outcomes: np.ndarray) -> PercentileResults:
    """Oblicza percentyle dla posortowanych danych."""
    return PercentileResults(
        **{name: nearest_rank_percentile(sorted_outcomes, p) for name, p in PERCENTILES.items()}
    )


def compute_outcome_statistics(outcomes: Outcomes) -> OutcomeStatistics:
    """
    Statystyki opisowe wyników (wariancja populacyjna: Σ(x - mean)² / n).

    Args:
        outcomes: Wyniki prób w dowolnej kolejności

    Returns:
        OutcomeStatistics z percentylami i przedziałami ufności
    """
    data = _as_array(outcomes)
    sorted_data = np.sort(data)

    mean = float(np.mean(data))
    std = float(np.sqrt(np.mean((data - mean) ** 2)))
    percentiles = compute_percentiles(sorted_data)

    return OutcomeStatistics(
        mean=mean,
        std=std,
        min=float(sorted_data[0]),
        max=float(sorted_data[-1]),
        median=percentiles.p50,
        percentiles=percentiles,
        confidence_intervals=ConfidenceIntervals(
            ci50=ConfidenceInterval(lower=percentiles.p25, upper=percentiles.p75),
            ci80=ConfidenceInterval(lower=percentiles.p10, upper=percentiles.p90),
            ci90=ConfidenceInterval(lower=percentiles.p5, upper=percentiles.p95),
        ),
    )


def value_at_risk(outcomes: Outcomes, confidence_level: float = DEFAULT_CONFIDENCE_LEVEL) -> float:
    """
    Value at Risk: wynik na pozycji floor(n * (1 - c)) posortowanych rosnąco.

    Próg straty przekraczany z prawdopodobieństwem c.
    """
    _check_confidence(confidence_level)
    sorted_data = np.sort(_as_array(outcomes))
    index = min(_cutoff_index(len(sorted_data), confidence_level), len(sorted_data) - 1)
    return float(sorted_data[index])


def conditional_value_at_risk(
    outcomes: Outcomes,
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
) -> float:
    """
    Conditional VaR: średnia wyników poniżej indeksu odcięcia VaR.

    Raises:
        ComputationError: gdy indeks odcięcia wynosi 0 (pusty ogon)
    """
    _check_confidence(confidence_level)
    sorted_data = np.sort(_as_array(outcomes))
    cutoff = _cutoff_index(len(sorted_data), confidence_level)
    if cutoff == 0:
        raise ComputationError(
            f"CVaR nieokreślony: pusty ogon dla n={len(sorted_data)} "
            f"i poziomu ufności {confidence_level}"
        )
    return float(np.mean(sorted_data[:cutoff]))


def exceedance_probability(outcomes: Outcomes, threshold: float) -> float:
    """Procent prób z wynikiem >= threshold (0-100)."""
    data = _as_array(outcomes)
    return float(np.count_nonzero(data >= threshold) / len(data) * 100)


def _metric(func, *args) -> MetricResult:
    try:
        return MetricResult(value=func(*args))
    except ComputationError as e:
        logger.info(f"Metric {func.__name__} not available: {e}")
        return MetricResult(error=str(e))


def compute_risk_metrics(
    outcomes: Outcomes,
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
) -> RiskMetrics:
    """
    Oblicza VaR i CVaR niezależnie - błąd jednej metryki nie unieważnia drugiej.

    Raises:
        ComputationError: dla poziomu ufności spoza (0, 1]
    """
    _check_confidence(confidence_level)
    return RiskMetrics(
        confidence_level=confidence_level,
        value_at_risk=_metric(value_at_risk, outcomes, confidence_level),
        conditional_value_at_risk=_metric(conditional_value_at_risk, outcomes, confidence_level),
    )


def compute_histogram(outcomes: Outcomes, n_bins: int = HISTOGRAM_BINS) -> HistogramData:
    """Oblicza histogram dla wizualizacji (wartości nieskończone/NaN pomijane)."""
    data = _as_array(outcomes)
    finite = data[np.isfinite(data)]
    if len(finite) == 0:
        return HistogramData(bins=[], counts=[], bin_centers=[])

    counts, bin_edges = np.histogram(finite, bins=n_bins)
    bin_centers = (bin_edges[:-1] + bin_edges[1:]) / 2

    return HistogramData(
        bins=bin_edges.tolist(),
        counts=counts.tolist(),
        bin_centers=bin_centers.tolist(),
    )
