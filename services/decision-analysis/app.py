"""
Decision Analysis Service
Exploratory statistics and Monte Carlo simulation over tabular records.
The records arrive already parsed (list of JSON objects, one per row).
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
import logging

from exploratory import (
    CategoryCount,
    CoefficientAlignment,
    ColumnStatistics,
    ColumnType,
    CorrelationMatrix,
    Dataset,
    MissingValueInfo,
    analyze_missing_values,
    category_counts,
    compute_correlation_matrix,
    compute_statistics,
    detect_column_types,
    estimate_coefficients,
    impute,
)
from monte_carlo import (
    AnalysisReport,
    ComputationError,
    ConfigurationError,
    DistributionSpec,
    HistogramData,
    OutcomeStatistics,
    RiskMetrics,
    SimulationResult,
    analyze_dataset,
    compute_histogram,
    compute_outcome_statistics,
    compute_risk_metrics,
    exceedance_probability,
    run_simulation,
    suggest_distributions,
)
from monte_carlo.config import DEFAULT_CONFIDENCE_LEVEL, LOG_LEVEL, get_runtime_settings

# Setup logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Prometheus metrics
from prometheus_fastapi_instrumentator import Instrumentator

app = FastAPI(
    title="Decision Analysis Service",
    description="Descriptive statistics, correlation, coefficient estimation and Monte Carlo simulation",
    version="1.0.0"
)

# Initialize Prometheus metrics
Instrumentator().instrument(app).expose(app)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============== Models ==============
class DatasetRequest(BaseModel):
    data: List[Dict[str, Any]] = Field(..., description="Records, one object per row")
    columns: Optional[List[str]] = Field(None, description="Columns to analyze (all when omitted)")


class CoefficientsRequest(BaseModel):
    data: List[Dict[str, Any]]
    target_variable: str
    input_variables: List[str]
    alignment: CoefficientAlignment = CoefficientAlignment.POSITIONAL


class CoefficientsResponse(BaseModel):
    target_variable: str
    alignment: CoefficientAlignment
    coefficients: Dict[str, float]


class SuggestDistributionsRequest(BaseModel):
    data: List[Dict[str, Any]]
    variables: List[str]


class PreprocessRequest(BaseModel):
    data: List[Dict[str, Any]]
    methods: Dict[str, str] = Field(
        default_factory=dict,
        description="Column -> drop / mean / median / mode"
    )
    columns: Optional[List[str]] = Field(None, description="Columns kept in the output")
    include_categories: bool = Field(False, description="Add frequency tables for categorical columns")


class PreprocessResponse(BaseModel):
    columns: List[str]
    row_count: int
    data: List[Dict[str, Any]]
    missing_values: Dict[str, MissingValueInfo]
    column_types: Dict[str, ColumnType]
    category_counts: Dict[str, List[CategoryCount]] = Field(default_factory=dict)


class SimulationRequest(BaseModel):
    data: List[Dict[str, Any]]
    # Parsed by the engine so that invalid configs map to 400
    config: Dict[str, Any]


class RiskRequest(BaseModel):
    outcomes: List[float] = Field(..., description="Simulated outcomes")
    confidence_level: float = Field(DEFAULT_CONFIDENCE_LEVEL, description="VaR/CVaR confidence level")
    threshold: Optional[float] = Field(None, description="Target value for exceedance probability")


class RiskResponse(BaseModel):
    statistics: OutcomeStatistics
    risk_metrics: RiskMetrics
    histogram: HistogramData
    exceedance_probability: Optional[float] = Field(None, description="% of outcomes >= threshold")


# ============== Helpers ==============
def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, ComputationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (ConfigurationError, ValueError)):
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"Unexpected error: {type(e).__name__}: {str(e)}")
    return HTTPException(status_code=500, detail=str(e))


# ============== API Endpoints ==============
@app.get("/")
async def root():
    return {
        "service": "Decision Analysis Service",
        "version": "1.0.0",
        "status": "running",
        "settings": get_runtime_settings(),
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.post("/statistics", response_model=Dict[str, ColumnStatistics])
def statistics_endpoint(request: DatasetRequest):
    """Descriptive statistics per numeric column (first 10 000 values per column)"""
    try:
        dataset = Dataset(request.data)
        return compute_statistics(dataset, request.columns)
    except Exception as e:
        raise _http_error(e)


@app.post("/correlation", response_model=CorrelationMatrix)
def correlation_endpoint(request: DatasetRequest):
    """Pearson correlation matrix over numeric columns (pairwise-complete rows)"""
    try:
        dataset = Dataset(request.data)
        return compute_correlation_matrix(dataset, request.columns)
    except Exception as e:
        raise _http_error(e)


@app.post("/coefficients", response_model=CoefficientsResponse)
def coefficients_endpoint(request: CoefficientsRequest):
    """Univariate slope of the target on each input variable"""
    try:
        dataset = Dataset(request.data)
        missing = [c for c in [request.target_variable, *request.input_variables] if c not in dataset]
        if missing:
            raise ConfigurationError(f"Unknown columns: {missing}")
        coefficients = estimate_coefficients(
            dataset,
            request.target_variable,
            request.input_variables,
            request.alignment,
        )
        return CoefficientsResponse(
            target_variable=request.target_variable,
            alignment=request.alignment,
            coefficients=coefficients,
        )
    except Exception as e:
        raise _http_error(e)


@app.post("/suggest-distributions", response_model=Dict[str, DistributionSpec])
def suggest_distributions_endpoint(request: SuggestDistributionsRequest):
    """Heuristic starting distributions for uncertain variables"""
    try:
        return suggest_distributions(Dataset(request.data), request.variables)
    except Exception as e:
        raise _http_error(e)


@app.post("/preprocess", response_model=PreprocessResponse)
def preprocess_endpoint(request: PreprocessRequest):
    """
    Missing value handling and column selection.

    Reports missing values and column types of the input, then returns
    the imputed records restricted to the selected columns.
    """
    try:
        dataset = Dataset(request.data)
        column_types = detect_column_types(dataset)
        categories = {}
        if request.include_categories:
            categories = {
                column: category_counts(dataset, column)
                for column, kind in column_types.items()
                if kind == ColumnType.CATEGORICAL
            }

        processed = impute(dataset, request.methods, request.columns)
        logger.info(f"Preprocessed {len(dataset)} -> {len(processed)} rows, columns={list(processed.columns)}")

        return PreprocessResponse(
            columns=list(processed.columns),
            row_count=len(processed),
            data=[dict(r) for r in processed],
            missing_values=analyze_missing_values(dataset),
            column_types=column_types,
            category_counts=categories,
        )
    except Exception as e:
        raise _http_error(e)


@app.post("/analyze", response_model=AnalysisReport)
def analyze_endpoint(request: CoefficientsRequest):
    """Statistics, correlation, coefficients and suggested distributions in one call"""
    try:
        return analyze_dataset(
            Dataset(request.data),
            request.target_variable,
            request.input_variables,
            request.alignment,
        )
    except Exception as e:
        raise _http_error(e)


@app.post("/simulate", response_model=SimulationResult)
def simulate_endpoint(request: SimulationRequest):
    """
    Monte Carlo simulation of the target variable.

    Certain inputs are fixed at their historical mean, uncertain inputs are
    drawn from their distributions on every trial. The outcome is either
    Σ coef * x (linear) or Π x ^ coef (multiplicative).
    """
    try:
        return run_simulation(Dataset(request.data), request.config)
    except Exception as e:
        raise _http_error(e)


@app.post("/risk", response_model=RiskResponse)
def risk_endpoint(request: RiskRequest):
    """Statistics, VaR/CVaR and histogram for an existing outcome list"""
    try:
        exceedance = None
        if request.threshold is not None:
            exceedance = exceedance_probability(request.outcomes, request.threshold)
        return RiskResponse(
            statistics=compute_outcome_statistics(request.outcomes),
            risk_metrics=compute_risk_metrics(request.outcomes, request.confidence_level),
            histogram=compute_histogram(request.outcomes),
            exceedance_probability=exceedance,
        )
    except Exception as e:
        raise _http_error(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8012)
