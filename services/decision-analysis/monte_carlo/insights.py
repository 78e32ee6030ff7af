"""
Ocena ryzyka i rekomendacja na podstawie rozkładu wyników.

Poziom ryzyka wynika ze współczynnika zmienności CV = std / |mean|:
- CV < 0.1  -> Low
- CV < 0.3  -> Medium
- pozostałe -> High (także dla średniej równej 0)
"""

from typing import Optional

from .config import RISK_CV_LOW, RISK_CV_MEDIUM
from .models import OutcomeStatistics, Recommendation, RiskAssessment, RiskLevel

RISK_DESCRIPTIONS = {
    RiskLevel.LOW: "Low variability in outcomes",
    RiskLevel.MEDIUM: "Moderate variability in outcomes",
    RiskLevel.HIGH: "High variability in outcomes",
}

RISK_ACTIONS = {
    RiskLevel.HIGH: (
        "Consider strategies to reduce uncertainty in key input variables. "
        "Focus on improving data quality or reducing variability in uncertain factors."
    ),
    RiskLevel.MEDIUM: (
        "Monitor key variables and prepare contingency plans. "
        "The outcome range is manageable but requires attention."
    ),
    RiskLevel.LOW: (
        "Proceed with confidence, but continue monitoring. "
        "The low variability suggests stable and predictable outcomes."
    ),
}


def coefficient_of_variation(statistics: OutcomeStatistics) -> Optional[float]:
    if statistics.mean == 0:
        return None
    return statistics.std / abs(statistics.mean)


def classify_risk(cv: Optional[float]) -> RiskLevel:
    if cv is None:
        return RiskLevel.HIGH
    if cv < RISK_CV_LOW:
        return RiskLevel.LOW
    if cv < RISK_CV_MEDIUM:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def assess_risk(
    statistics: OutcomeStatistics,
    num_simulations: int,
    target_variable: str,
) -> RiskAssessment:
    """
    Generuje ocenę ryzyka i rekomendację.

    Args:
        statistics: Statystyki rozkładu wyników
        num_simulations: Liczba wykonanych prób
        target_variable: Nazwa zmiennej objaśnianej

    Returns:
        RiskAssessment z poziomem ryzyka i tekstem rekomendacji
    """
    cv = coefficient_of_variation(statistics)
    level = classify_risk(cv)
    p = statistics.percentiles

    recommendation = Recommendation(
        summary=(
            f"Based on {num_simulations:,} simulations, the expected "
            f"{target_variable} is {statistics.mean:.2f}."
        ),
        range=f"With 90% confidence, the outcome will be between {p.p5:.2f} and {p.p95:.2f}.",
        risk=f"Risk Level: {level.value} - {RISK_DESCRIPTIONS[level]}",
        action=RISK_ACTIONS[level],
    )

    return RiskAssessment(
        level=level,
        coefficient_of_variation=cv,
        description=RISK_DESCRIPTIONS[level],
        recommendation=recommendation,
    )
