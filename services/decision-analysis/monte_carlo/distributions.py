"""
Funkcje rozkładów prawdopodobieństwa dla symulacji Monte Carlo.

Obsługuje:
- Losowanie z rozkładów normal / uniform / triangular
- Heurystyczny dobór rozkładu na podstawie danych historycznych

Jedynym źródłem losowości są próbki U(0,1) z przekazanego generatora
(numpy.random.Generator.random); rozkłady docelowe uzyskiwane są
transformacjami: Box-Muller dla normalnego, odwrotna dystrybuanta dla
trójkątnego.
"""

import math
from typing import Dict, Optional, Sequence, Union

import numpy as np

from exploratory.dataset import Dataset

from .config import SUGGEST_NORMAL_CV, SUGGEST_UNIFORM_RANGE_STD
from .models import (
    DistributionSpec,
    NormalDistribution,
    TriangularDistribution,
    UniformDistribution,
)

Draw = Union[float, np.ndarray]


def _nonzero_uniform(rng: np.random.Generator, size: Optional[int]) -> Draw:
    """U(0,1) z odrzuceniem dokładnych zer (ln(0) jest nieokreślony)."""
    if size is None:
        u = rng.random()
        while u == 0.0:
            u = rng.random()
        return u

    u = rng.random(size)
    zeros = u == 0.0
    while np.any(zeros):
        u[zeros] = rng.random(int(zeros.sum()))
        zeros = u == 0.0
    return u


def _sample_normal(spec: NormalDistribution, rng: np.random.Generator, size: Optional[int]) -> Draw:
    # Box-Muller: z0 = sqrt(-2 ln u1) * cos(2 pi u2)
    u1 = _nonzero_uniform(rng, size)
    u2 = rng.random(size)
    z0 = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
    return spec.mean + spec.std * z0


def _sample_uniform(spec: UniformDistribution, rng: np.random.Generator, size: Optional[int]) -> Draw:
    u = rng.random(size)
    return spec.min + u * (spec.max - spec.min)


def _sample_triangular(spec: TriangularDistribution, rng: np.random.Generator, size: Optional[int]) -> Draw:
    low, mode, high = spec.min, spec.mode, spec.max
    u = rng.random(size)

    # Degenerate interval - the inverse CDF divides by (max - min)
    if high == low:
        return low if size is None else np.full(size, low, dtype=float)

    width = high - low
    f = (mode - low) / width
    left = low + np.sqrt(u * width * (mode - low))
    right = high - np.sqrt((1.0 - u) * width * (high - mode))
    return np.where(u < f, left, right) if size is not None else (left if u < f else right)


def sample_distribution(
    spec: DistributionSpec,
    n_samples: Optional[int] = None,
    random_state: Optional[np.random.Generator] = None,
) -> Draw:
    """
    Generuje próbki z określonego rozkładu.

    Args:
        spec: Definicja rozkładu (normal / uniform / triangular)
        n_samples: Liczba próbek (None = pojedyncza wartość float)
        random_state: Generator liczb losowych (opcjonalny)

    Returns:
        float dla n_samples=None, w przeciwnym razie tablica numpy
    """
    rng = random_state or np.random.default_rng()

    if isinstance(spec, NormalDistribution):
        result = _sample_normal(spec, rng, n_samples)
    elif isinstance(spec, UniformDistribution):
        result = _sample_uniform(spec, rng, n_samples)
    elif isinstance(spec, TriangularDistribution):
        result = _sample_triangular(spec, rng, n_samples)
    else:
        raise ValueError(f"Nieobsługiwany typ rozkładu: {type(spec).__name__}")

    if n_samples is None:
        return float(result)
    return np.asarray(result, dtype=float)


class DistributionSampler:
    """
    Losowanie z rozkładów przy użyciu jednego, jawnie przekazanego generatora.

    Poza stanem generatora obiekt jest bezstanowy - nie przechowuje
    poprzednich losowań dla zmiennych.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng or np.random.default_rng()

    def draw(self, spec: DistributionSpec) -> float:
        """Pojedyncze losowanie."""
        return sample_distribution(spec, None, self.rng)

    def draw_many(self, spec: DistributionSpec, size: int) -> np.ndarray:
        """`size` niezależnych losowań z tego samego rozkładu."""
        return sample_distribution(spec, size, self.rng)


def suggest_distribution(values: Sequence[float]) -> Optional[DistributionSpec]:
    """
    Prosta heurystyka doboru rozkładu (to nie jest dopasowanie rozkładu).

    - CV = std / |mean| < 0.1           -> normal(mean, std)
    - min >= 0 i (max - min) / std < 4  -> uniform(min, max)
    - w pozostałych przypadkach         -> normal(mean, std)

    Returns:
        Proponowany rozkład albo None dla pustej próbki
    """
    data = np.asarray(values, dtype=float)
    if len(data) == 0:
        return None

    mean = float(np.mean(data))
    std = float(np.sqrt(np.mean((data - mean) ** 2)))
    low = float(np.min(data))
    high = float(np.max(data))

    cv = std / abs(mean) if mean != 0 else math.inf
    if std == 0 or cv < SUGGEST_NORMAL_CV:
        return NormalDistribution(mean=mean, std=std)
    if low >= 0 and (high - low) / std < SUGGEST_UNIFORM_RANGE_STD:
        return UniformDistribution(min=low, max=high)
    return NormalDistribution(mean=mean, std=std)


def suggest_distributions(dataset: Dataset, variables: Sequence[str]) -> Dict[str, DistributionSpec]:
    """Proponowane rozkłady dla zmiennych, które mają wartości liczbowe."""
    suggested: Dict[str, DistributionSpec] = {}
    for variable in variables:
        spec = suggest_distribution(dataset.numeric_values(variable))
        if spec is not None:
            suggested[variable] = spec
    return suggested
