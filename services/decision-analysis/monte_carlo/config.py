"""
Konfiguracja silnika symulacji Monte Carlo.

Limity pracy i parametry wykonania czytane ze zmiennych środowiskowych,
stałe analityczne (percentyle, progi ryzyka) zapisane na sztywno.
"""

import os
from typing import Dict, Optional


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_optional_int(name: str, minimum: Optional[int] = None) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    number = int(value)
    if minimum is not None and number < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {number}")
    return number


# Simulation limits
DEFAULT_NUM_SIMULATIONS = 10000
MAX_SIMULATIONS = _env_int("MC_MAX_SIMULATIONS", 1_000_000)

# Fan-out: trials per batch (one random stream per batch) and worker pool size
BATCH_SIZE = _env_int("MC_BATCH_SIZE", 2500)
MAX_WORKERS = _env_int("MC_MAX_WORKERS", os.cpu_count() or 1)

# None = fresh OS entropy on every run
RANDOM_SEED = _env_optional_int("MC_RANDOM_SEED", minimum=0)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Outcome percentiles (nearest rank)
PERCENTILES: Dict[str, float] = {
    "p5": 0.05,
    "p10": 0.10,
    "p25": 0.25,
    "p50": 0.50,
    "p75": 0.75,
    "p90": 0.90,
    "p95": 0.95,
}

DEFAULT_CONFIDENCE_LEVEL = 0.95
HISTOGRAM_BINS = 50

# Coefficient of variation thresholds for the risk level
RISK_CV_LOW = 0.1
RISK_CV_MEDIUM = 0.3

# Distribution suggestion heuristic
SUGGEST_NORMAL_CV = 0.1
SUGGEST_UNIFORM_RANGE_STD = 4.0


def get_runtime_settings() -> Dict[str, Optional[int]]:
    """Zwraca limity wykonania obowiązujące w tym procesie."""
    return {
        "max_simulations": MAX_SIMULATIONS,
        "batch_size": BATCH_SIZE,
        "max_workers": MAX_WORKERS,
        "random_seed": RANDOM_SEED,
    }
