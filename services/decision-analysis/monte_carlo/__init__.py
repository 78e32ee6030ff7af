# Monte Carlo simulation module for decision analysis
from .errors import (
    AnalysisError,
    ConfigurationError,
    ComputationError,
    SimulationCancelledError,
)
from .models import (
    ModelType,
    NormalDistribution,
    UniformDistribution,
    TriangularDistribution,
    DistributionSpec,
    ModelConfig,
    PercentileResults,
    OutcomeStatistics,
    MetricResult,
    RiskMetrics,
    HistogramData,
    RiskLevel,
    RiskAssessment,
    SimulationResult,
    AnalysisReport,
)
from .distributions import (
    sample_distribution,
    DistributionSampler,
    suggest_distribution,
    suggest_distributions,
)
from .risk import (
    compute_outcome_statistics,
    value_at_risk,
    conditional_value_at_risk,
    exceedance_probability,
    compute_risk_metrics,
    compute_histogram,
)
from .insights import assess_risk
from .engine import (
    SimulationRunner,
    parse_model_config,
    validate_config,
    run_simulation,
    analyze_dataset,
)

__all__ = [
    "AnalysisError",
    "ConfigurationError",
    "ComputationError",
    "SimulationCancelledError",
    "ModelType",
    "NormalDistribution",
    "UniformDistribution",
    "TriangularDistribution",
    "DistributionSpec",
    "ModelConfig",
    "PercentileResults",
    "OutcomeStatistics",
    "MetricResult",
    "RiskMetrics",
    "HistogramData",
    "RiskLevel",
    "RiskAssessment",
    "SimulationResult",
    "AnalysisReport",
    "sample_distribution",
    "DistributionSampler",
    "suggest_distribution",
    "suggest_distributions",
    "compute_outcome_statistics",
    "value_at_risk",
    "conditional_value_at_risk",
    "exceedance_probability",
    "compute_risk_metrics",
    "compute_histogram",
    "assess_risk",
    "SimulationRunner",
    "parse_model_config",
    "validate_config",
    "run_simulation",
    "analyze_dataset",
]
