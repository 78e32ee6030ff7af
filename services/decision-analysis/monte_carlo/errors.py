"""Wyjątki silnika analitycznego."""


class AnalysisError(Exception):
    """Bazowa klasa błędów silnika analitycznego."""


class ConfigurationError(AnalysisError, ValueError):
    """Nieprawidłowa konfiguracja modelu (zgłaszana przed rozpoczęciem symulacji)."""


class ComputationError(AnalysisError):
    """Nie można obliczyć pojedynczej metryki (np. pusty ogon dla CVaR)."""


class SimulationCancelledError(ComputationError):
    """Symulacja anulowana pomiędzy paczkami prób."""

    def __init__(self, completed: int, requested: int):
        self.completed = completed
        self.requested = requested
        super().__init__(
            f"Simulation cancelled after {completed} of {requested} trials"
        )
