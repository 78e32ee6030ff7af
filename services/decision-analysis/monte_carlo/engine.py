"""
Silnik symulacji Monte Carlo dla analizy decyzyjnej.

Przebieg:
1. Walidacja konfiguracji (błąd przerywa całe uruchomienie)
2. Wartości bazowe: średnia historyczna dla zmiennych pewnych (liczona raz)
3. Próby: zmienne niepewne losowane z rozkładów, wynik z modelu
   liniowego lub multiplikatywnego
4. Statystyki, metryki ryzyka, histogram, rekomendacja

Próby są niezależne, więc dzielone są na paczki o stałym rozmiarze.
Każda paczka ma własny strumień losowy (SeedSequence.spawn) i zapisuje
wyniki do własnego wycinka tablicy - podział nie zależy od liczby wątków,
więc to samo ziarno daje ten sam ciąg wyników.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import ValidationError

from exploratory.coefficients import estimate_coefficients
from exploratory.correlation import compute_correlation_matrix
from exploratory.dataset import Dataset
from exploratory.models import CoefficientAlignment
from exploratory.preprocessing import detect_numeric_columns
from exploratory.statistics import compute_statistics

from .config import BATCH_SIZE, DEFAULT_CONFIDENCE_LEVEL, MAX_SIMULATIONS, MAX_WORKERS, RANDOM_SEED
from .distributions import DistributionSampler, suggest_distributions
from .errors import ConfigurationError, SimulationCancelledError
from .insights import assess_risk
from .models import AnalysisReport, ModelConfig, ModelType, SimulationResult
from .risk import compute_histogram, compute_outcome_statistics, compute_risk_metrics

logger = logging.getLogger(__name__)

DEFAULT_COEFFICIENT = 1.0


def parse_model_config(data: Union[ModelConfig, Mapping[str, Any]]) -> ModelConfig:
    """Buduje ModelConfig ze słownika; błędy walidacji jako ConfigurationError."""
    if isinstance(data, ModelConfig):
        return data
    try:
        return ModelConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Nieprawidłowa konfiguracja modelu: {e}") from e


def validate_config(dataset: Dataset, config: ModelConfig, max_simulations: int = MAX_SIMULATIONS) -> None:
    """
    Sprawdza spójność konfiguracji z danymi.

    Raises:
        ConfigurationError: przy pierwszej wykrytej niezgodności
    """
    if config.num_simulations < 1:
        raise ConfigurationError(f"num_simulations musi być >= 1 (otrzymano {config.num_simulations})")
    if config.num_simulations > max_simulations:
        raise ConfigurationError(
            f"num_simulations przekracza limit {max_simulations} (otrzymano {config.num_simulations})"
        )
    if config.random_seed is not None and config.random_seed < 0:
        raise ConfigurationError(f"random_seed musi być >= 0 (otrzymano {config.random_seed})")

    if config.target_variable not in dataset.columns:
        raise ConfigurationError(f"Zmienna objaśniana '{config.target_variable}' nie występuje w danych")

    missing = [v for v in config.input_variables if v not in dataset.columns]
    if missing:
        raise ConfigurationError(f"Zmienne wejściowe nie występują w danych: {missing}")
    if config.target_variable in config.input_variables:
        raise ConfigurationError("Zmienna objaśniana nie może być zmienną wejściową")
    if len(set(config.input_variables)) != len(config.input_variables):
        raise ConfigurationError("Zmienne wejściowe nie mogą się powtarzać")

    outside = [v for v in config.uncertain_variables if v not in config.input_variables]
    if outside:
        raise ConfigurationError(f"Zmienne niepewne spoza zmiennych wejściowych: {outside}")
    if len(set(config.uncertain_variables)) != len(config.uncertain_variables):
        raise ConfigurationError("Zmienne niepewne nie mogą się powtarzać")

    without_dist = [v for v in config.uncertain_variables if v not in config.distributions]
    if without_dist:
        raise ConfigurationError(f"Brak rozkładu dla zmiennych niepewnych: {without_dist}")

    # Specs built with model_construct() skip validation, check them again
    for variable, spec in config.distributions.items():
        try:
            type(spec).model_validate(spec.model_dump())
        except ValidationError as e:
            raise ConfigurationError(f"Nieprawidłowe parametry rozkładu dla '{variable}': {e}") from e


def compute_baseline(dataset: Dataset, config: ModelConfig) -> Dict[str, float]:
    """Średnia historyczna (0 przy braku danych) dla każdej zmiennej pewnej."""
    uncertain = set(config.uncertain_variables)
    return {
        v: dataset.numeric_mean(v, default=0.0)
        for v in config.input_variables
        if v not in uncertain
    }


def evaluate_outcomes(
    inputs: Mapping[str, np.ndarray],
    variables: Sequence[str],
    coefficients: Mapping[str, float],
    model_type: ModelType,
    size: int,
) -> np.ndarray:
    """
    Wektoryzowana ocena modelu dla paczki prób.

    linear:         Σ coef[v] * x[v]
    multiplicative: Π x[v] ^ coef[v]  (ziarno iloczynu = 1)
    Brakujący współczynnik = 1.
    """
    if model_type == ModelType.MULTIPLICATIVE:
        result = np.ones(size)
        # Negative base with fractional exponent gives NaN, same as a scalar pow
        with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
            for v in variables:
                result = result * np.power(inputs[v], coefficients.get(v, DEFAULT_COEFFICIENT))
        return result

    result = np.zeros(size)
    for v in variables:
        result = result + coefficients.get(v, DEFAULT_COEFFICIENT) * inputs[v]
    return result


class SimulationRunner:
    """
    Uruchamia próby Monte Carlo w paczkach na puli wątków.

    Cechy:
    - Niezależny strumień losowy na paczkę (powtarzalność przy stałym ziarnie)
    - Wyniki w kolejności prób (wycinek tablicy na paczkę)
    - Anulowanie sprawdzane pomiędzy paczkami
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        batch_size: Optional[int] = None,
        max_simulations: int = MAX_SIMULATIONS,
    ):
        """
        Args:
            max_workers: Liczba wątków (domyślnie MC_MAX_WORKERS)
            batch_size: Liczba prób w paczce (domyślnie MC_BATCH_SIZE)
            max_simulations: Górny limit num_simulations
        """
        self.max_workers = max(1, max_workers or MAX_WORKERS)
        self.batch_size = max(1, batch_size or BATCH_SIZE)
        self.max_simulations = max_simulations

    def _resolve_seed(self, config: ModelConfig) -> int:
        if config.random_seed is not None:
            return config.random_seed
        if RANDOM_SEED is not None:
            return RANDOM_SEED
        return int(np.random.SeedSequence().entropy)

    def _plan_batches(self, n: int) -> List[Tuple[int, int]]:
        return [(start, min(start + self.batch_size, n)) for start in range(0, n, self.batch_size)]

    def _simulate_batch(
        self,
        size: int,
        rng: np.random.Generator,
        baseline: Mapping[str, float],
        config: ModelConfig,
    ) -> np.ndarray:
        inputs: Dict[str, np.ndarray] = {v: np.full(size, value) for v, value in baseline.items()}

        sampler = DistributionSampler(rng)
        for variable in config.uncertain_variables:
            inputs[variable] = sampler.draw_many(config.distributions[variable], size)

        return evaluate_outcomes(
            inputs,
            config.input_variables,
            config.coefficients,
            config.model_type,
            size,
        )

    def simulate(
        self,
        dataset: Dataset,
        config: ModelConfig,
        seed: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> np.ndarray:
        """
        Wykonuje dokładnie config.num_simulations prób.

        Returns:
            Tablica wyników w kolejności prób

        Raises:
            SimulationCancelledError: gdy cancel_event zostanie ustawiony
        """
        n = config.num_simulations
        baseline = compute_baseline(dataset, config)
        batches = self._plan_batches(n)
        child_seeds = np.random.SeedSequence(seed).spawn(len(batches))
        outcomes = np.empty(n, dtype=float)

        def run_batch(index: int) -> int:
            if cancel_event is not None and cancel_event.is_set():
                return 0
            start, stop = batches[index]
            rng = np.random.default_rng(child_seeds[index])
            outcomes[start:stop] = self._simulate_batch(stop - start, rng, baseline, config)
            return stop - start

        workers = min(self.max_workers, len(batches))
        if workers <= 1:
            completed = sum(run_batch(i) for i in range(len(batches)))
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                completed = sum(executor.map(run_batch, range(len(batches))))

        if cancel_event is not None and cancel_event.is_set() and completed < n:
            logger.info(f"Simulation cancelled after {completed}/{n} trials")
            raise SimulationCancelledError(completed, n)

        return outcomes

    def run(
        self,
        dataset: Union[Dataset, Any],
        config: Union[ModelConfig, Mapping[str, Any]],
        cancel_event: Optional[threading.Event] = None,
        confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    ) -> SimulationResult:
        """
        Wykonuje pełną symulację Monte Carlo.

        Args:
            dataset: Dane historyczne (Dataset, DataFrame lub lista rekordów)
            config: Konfiguracja modelu
            cancel_event: Opcjonalne zdarzenie anulowania
            confidence_level: Poziom ufności dla VaR/CVaR w wyniku

        Returns:
            Wynik symulacji z rozkładem, statystykami i metrykami ryzyka
        """
        start_time = time.perf_counter()

        dataset = Dataset.coerce(dataset)
        config = parse_model_config(config)
        validate_config(dataset, config, self.max_simulations)

        seed = self._resolve_seed(config)
        logger.info(
            f"Monte Carlo: {config.num_simulations} trials, model={config.model_type.value}, "
            f"inputs={len(config.input_variables)}, uncertain={len(config.uncertain_variables)}, "
            f"workers={self.max_workers}, seed={seed}"
        )

        outcomes = self.simulate(dataset, config, seed, cancel_event)

        statistics = compute_outcome_statistics(outcomes)
        risk_metrics = compute_risk_metrics(outcomes, confidence_level)
        histogram = compute_histogram(outcomes)
        risk_assessment = assess_risk(statistics, config.num_simulations, config.target_variable)

        computation_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"Monte Carlo finished in {computation_time_ms:.1f} ms, mean={statistics.mean:.4f}")

        return SimulationResult(
            outcomes=outcomes.tolist(),
            statistics=statistics,
            config=config,
            risk_metrics=risk_metrics,
            histogram=histogram,
            risk_assessment=risk_assessment,
            seed=seed,
            computation_time_ms=computation_time_ms,
        )


def run_simulation(
    dataset: Union[Dataset, Any],
    config: Union[ModelConfig, Mapping[str, Any]],
    *,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SimulationResult:
    """Główny punkt wejścia: dane + konfiguracja -> SimulationResult."""
    return SimulationRunner(max_workers=max_workers).run(dataset, config, cancel_event=cancel_event)


def analyze_dataset(
    dataset: Union[Dataset, Any],
    target_variable: str,
    input_variables: Sequence[str],
    alignment: CoefficientAlignment = CoefficientAlignment.POSITIONAL,
) -> AnalysisReport:
    """
    Analiza przed symulacją: statystyki, korelacje i współczynniki liczone
    równolegle (redukcje tylko do odczytu), plus proponowane rozkłady.

    Raises:
        ConfigurationError: gdy kolumny nie występują w danych
    """
    dataset = Dataset.coerce(dataset)
    missing = [c for c in [target_variable, *input_variables] if c not in dataset.columns]
    if missing:
        raise ConfigurationError(f"Kolumny nie występują w danych: {missing}")

    numeric_columns = detect_numeric_columns(dataset)

    with ThreadPoolExecutor(max_workers=3) as executor:
        statistics = executor.submit(compute_statistics, dataset)
        correlation = executor.submit(compute_correlation_matrix, dataset, numeric_columns)
        coefficients = executor.submit(
            estimate_coefficients, dataset, target_variable, list(input_variables), alignment
        )

        return AnalysisReport(
            numeric_columns=numeric_columns,
            statistics=statistics.result(),
            correlation=correlation.result(),
            coefficients=coefficients.result(),
            suggested_distributions=suggest_distributions(dataset, input_variables),
        )
